"""Shared fixtures for the lsss test suite."""

from __future__ import annotations

from itertools import combinations
from typing import Iterator, List, Tuple

import pytest

from lsss import Inner, Leaf, MonotoneSpanProgram, Zp, flat_threshold_tree


def all_subsets(ids: List[int]) -> Iterator[Tuple[int, ...]]:
    """Every subset of *ids*, smallest first."""
    for size in range(len(ids) + 1):
        yield from combinations(ids, size)


# AND(OR(A, B), C) with A=0, B=1, C=2
AND_OR_TREE = Inner(2, [Inner(1, [Leaf(0), Leaf(1)]), Leaf(2)])

# Trees with at most six leaves, small enough for exhaustive checks.
SMALL_TREES = {
    "and_or": AND_OR_TREE,
    "flat_2_of_3": flat_threshold_tree(2, 3),
    "flat_3_of_3": flat_threshold_tree(3, 3),
    "single_leaf": Leaf(0),
    "or_of_ands": Inner(1, [
        Inner(2, [Leaf(0), Leaf(1)]),
        Inner(2, [Leaf(2), Leaf(3)]),
    ]),
    "nested_thresholds": Inner(2, [
        Inner(2, [Leaf(0), Leaf(1)]),
        Leaf(2),
        Inner(2, [Leaf(3), Leaf(4), Leaf(5)]),
    ]),
    "deep_chain": Inner(2, [
        Leaf(0),
        Inner(2, [Leaf(1), Inner(1, [Leaf(2), Inner(2, [Leaf(3), Leaf(4)])])]),
    ]),
}


@pytest.fixture
def f13() -> Zp:
    return Zp(13)


@pytest.fixture
def f11() -> Zp:
    return Zp(11)


@pytest.fixture
def and_or_tree() -> Inner:
    return AND_OR_TREE


@pytest.fixture
def and_or_msp(f13: Zp) -> MonotoneSpanProgram:
    return MonotoneSpanProgram.build(AND_OR_TREE, f13)
