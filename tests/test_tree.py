"""Tests for access trees, the traversal driver, and the tree algorithms."""

from __future__ import annotations

import dataclasses
from typing import List

import pytest

from conftest import SMALL_TREES, all_subsets
from lsss import (
    AccessTree,
    Inner,
    Leaf,
    MalformedTree,
    SatisfactionVisitor,
    TreeVisitor,
    flat_threshold_tree,
    perform_visitor,
)


class TestConstruction:
    def test_leaf(self) -> None:
        leaf = Leaf(3)
        assert leaf.threshold == 0
        assert leaf.children == ()
        assert leaf.is_leaf

    def test_inner_stores_children_as_tuple(self) -> None:
        node = Inner(1, [Leaf(0), Leaf(1)])
        assert node.children == (Leaf(0), Leaf(1))
        assert node.threshold == 1
        assert not node.is_leaf

    @pytest.mark.parametrize("threshold", [0, 3, -1])
    def test_threshold_out_of_range(self, threshold: int) -> None:
        with pytest.raises(MalformedTree, match="threshold"):
            Inner(threshold, [Leaf(0), Leaf(1)])

    def test_inner_without_children(self) -> None:
        with pytest.raises(MalformedTree, match="at least one child"):
            Inner(1, [])

    def test_negative_share_id(self) -> None:
        with pytest.raises(MalformedTree):
            Leaf(-1)

    def test_malformed_tree_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            Inner(0, [Leaf(0)])

    def test_trees_are_immutable(self) -> None:
        node = Inner(1, [Leaf(0)])
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.threshold = 2  # type: ignore[misc]
        with pytest.raises(dataclasses.FrozenInstanceError):
            Leaf(0).share_id = 1  # type: ignore[misc]

    def test_structural_equality(self) -> None:
        a = Inner(2, [Inner(1, [Leaf(0), Leaf(1)]), Leaf(2)])
        b = Inner(2, [Inner(1, [Leaf(0), Leaf(1)]), Leaf(2)])
        assert a == b
        assert hash(a) == hash(b)
        assert a != Inner(2, [Leaf(2), Inner(1, [Leaf(0), Leaf(1)])])

    def test_all_of_any_of(self) -> None:
        assert Inner.all_of([Leaf(0), Leaf(1)]).threshold == 2
        assert Inner.any_of([Leaf(0), Leaf(1), Leaf(2)]).threshold == 1

    def test_flat_threshold_tree(self) -> None:
        tree = flat_threshold_tree(2, 3)
        assert tree.threshold == 2
        assert tree.share_ids() == [0, 1, 2]


class TestQueries:
    def test_share_ids_in_preorder(self, and_or_tree: Inner) -> None:
        assert and_or_tree.share_ids() == [0, 1, 2]
        assert SMALL_TREES["deep_chain"].share_ids() == [0, 1, 2, 3, 4]

    def test_depth(self, and_or_tree: Inner) -> None:
        assert Leaf(0).depth() == 0
        assert and_or_tree.depth() == 2

    def test_str(self, and_or_tree: Inner) -> None:
        assert str(and_or_tree) == "( 2 of: ( 1 of: 0,1 ),2 )"
        assert str(Leaf(4)) == "4"


class _RecordingVisitor(TreeVisitor[int]):
    """Counts leaves; stops after *limit* children per node."""

    def __init__(self, seen: List[AccessTree], limit: int) -> None:
        self.seen = seen
        self.limit = limit
        self.total = 0
        self.accepted = 0

    def visit(self, node: AccessTree) -> None:
        self.seen.append(node)
        if node.is_leaf:
            self.total = 1

    def child_context(self) -> _RecordingVisitor:
        return _RecordingVisitor(self.seen, self.limit)

    def accept_child_result(self, result: int) -> None:
        self.accepted += 1
        self.total += result

    def is_complete(self) -> bool:
        return self.accepted >= self.limit

    def finish(self) -> int:
        return self.total


class TestTraversal:
    def test_visits_in_preorder(self, and_or_tree: Inner) -> None:
        seen: List[AccessTree] = []
        assert perform_visitor(and_or_tree, _RecordingVisitor(seen, 99)) == 3
        assert seen == [
            and_or_tree,
            and_or_tree.children[0],
            Leaf(0),
            Leaf(1),
            Leaf(2),
        ]

    def test_is_complete_stops_children_loop(self, and_or_tree: Inner) -> None:
        seen: List[AccessTree] = []
        assert perform_visitor(and_or_tree, _RecordingVisitor(seen, 1)) == 1
        assert seen == [and_or_tree, and_or_tree.children[0], Leaf(0)]


class TestSatisfaction:
    @pytest.mark.parametrize(
        "presented, expected",
        [
            ({0, 2}, True),
            ({1, 2}, True),
            ({0, 1, 2}, True),
            ({0, 1}, False),
            ({2}, False),
            (set(), False),
        ],
    )
    def test_and_or_scenario(
        self, and_or_tree: Inner, presented: set, expected: bool,
    ) -> None:
        assert and_or_tree.is_satisfied_by(presented) is expected

    def test_unknown_ids_are_ignored(self, and_or_tree: Inner) -> None:
        assert not and_or_tree.is_satisfied_by({2, 7, 8})

    def test_leaf_root(self) -> None:
        assert Leaf(0).is_satisfied_by([0])
        assert not Leaf(0).is_satisfied_by([1])

    @pytest.mark.parametrize("name", sorted(SMALL_TREES))
    def test_monotone(self, name: str) -> None:
        tree = SMALL_TREES[name]
        ids = tree.share_ids()
        for subset in all_subsets(ids):
            if not tree.is_satisfied_by(subset):
                continue
            for extra in ids:
                assert tree.is_satisfied_by(set(subset) | {extra})

    def test_subtree_result_is_true_value(self) -> None:
        # the first child settles the root; the second must still be
        # evaluated correctly when visited on its own
        tree = Inner(1, [Leaf(0), Inner(2, [Leaf(1), Leaf(2)])])
        assert tree.is_satisfied_by({0})
        sub = tree.children[1]
        assert perform_visitor(sub, SatisfactionVisitor(frozenset({0}))) is False
        assert perform_visitor(sub, SatisfactionVisitor(frozenset({1, 2}))) is True


class TestMinimalSubset:
    def test_and_or_scenario(self, and_or_tree: Inner) -> None:
        result = and_or_tree.minimal_satisfying_subset({0, 1, 2})
        assert result is not None
        count, ids = result
        assert count == 2
        assert len(ids) == 2
        assert 2 in ids
        assert len({0, 1} & set(ids)) == 1

    def test_tie_break_keeps_input_order(self, and_or_tree: Inner) -> None:
        assert and_or_tree.minimal_satisfying_subset({0, 1, 2}) == (2, [0, 2])

    def test_prefers_cheaper_children(self) -> None:
        tree = Inner(1, [Inner(2, [Leaf(0), Leaf(1)]), Leaf(2)])
        assert tree.minimal_satisfying_subset({0, 1, 2}) == (1, [2])

    def test_unsatisfiable_returns_none(self, and_or_tree: Inner) -> None:
        assert and_or_tree.minimal_satisfying_subset({0, 1}) is None
        assert and_or_tree.minimal_satisfying_subset(set()) is None

    @pytest.mark.parametrize("name", sorted(SMALL_TREES))
    def test_subset_is_sound(self, name: str) -> None:
        tree = SMALL_TREES[name]
        for subset in all_subsets(tree.share_ids()):
            result = tree.minimal_satisfying_subset(subset)
            if not tree.is_satisfied_by(subset):
                assert result is None
                continue
            assert result is not None
            count, ids = result
            assert count == len(ids)
            assert set(ids) <= set(subset)
            assert len(ids) <= len(subset)
            assert tree.is_satisfied_by(ids)
