"""
Threshold access trees and the traversal protocol shared by every
algorithm that evaluates them.

Model
-----
An access tree is built from two node kinds:

- ``Leaf(share_id)``: one share; threshold is definitionally 0.
- ``Inner(threshold, children)``: satisfied iff at least *threshold*
  of its children are, with  1 ≤ threshold ≤ len(children).

AND and OR are the special cases  threshold = len(children)  and
threshold = 1.  Share identifiers are dense in  [0, n)  and the order
of children is significant: it fixes the column layout of the
monotone span program compiled from the tree.

Trees are immutable.  Algorithms never mutate them; each one is a
``TreeVisitor`` driven by :func:`perform_visitor`, which spawns a fresh
visitor for every child so no traversal state is shared between
siblings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING, Generic, Iterable, Iterator, List, Optional, Tuple,
    TypeVar,
)

from .errors import MalformedTree

if TYPE_CHECKING:
    from .field import Zp

R = TypeVar("R")


# ── nodes ───────────────────────────────────────────────────────────────

class AccessTree:
    """
    Common interface of ``Leaf`` and ``Inner``.

    Both expose ``threshold: int`` and ``children: tuple``.
    """

    __slots__ = ()

    threshold: int
    children: Tuple[AccessTree, ...]

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def share_ids(self) -> List[int]:
        """Share identifiers of all leaves, in pre-order (left to right)."""
        return [leaf.share_id for leaf in self.leaves()]

    def leaves(self) -> Iterator[Leaf]:
        stack: List[AccessTree] = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Leaf):
                yield node
            else:
                stack.extend(reversed(node.children))

    def depth(self) -> int:
        if self.is_leaf:
            return 0
        return 1 + max(c.depth() for c in self.children)

    # ── algorithms ─────────────────────────────────────────────────────

    def is_satisfied_by(self, share_ids: Iterable[int]) -> bool:
        """Does presenting *share_ids* satisfy this tree?"""
        from .visitors import SatisfactionVisitor

        return perform_visitor(self, SatisfactionVisitor(frozenset(share_ids)))

    def minimal_satisfying_subset(
        self, share_ids: Iterable[int],
    ) -> Optional[Tuple[int, List[int]]]:
        """
        Greedy small subset of *share_ids* that still satisfies the tree.

        Returns ``(count, ids)`` or ``None`` if *share_ids* do not
        satisfy the tree at all.  The subset is not guaranteed to be of
        minimum size: each gate keeps its cheapest satisfied children.
        """
        from .visitors import MinimalSubsetVisitor

        count, ids = perform_visitor(
            self, MinimalSubsetVisitor(frozenset(share_ids)),
        )
        if count == 0:
            return None
        return count, ids

    def span_program_rows(self, field: Zp) -> Tuple[int, List[tuple]]:
        """
        Compile the tree into monotone-span-program rows over *field*.

        Returns ``(number_of_columns, rows)``; row *i* belongs to the
        *i*-th leaf in pre-order and may be shorter than the column
        count (implicitly zero-padded).
        """
        from .visitors import MatrixVisitor

        cols, rows = perform_visitor(self, MatrixVisitor(field, (field.one(),)))
        return cols + 1, rows

    def __str__(self) -> str:
        from .visitors import FormatVisitor

        return perform_visitor(self, FormatVisitor())


@dataclass(frozen=True)
class Leaf(AccessTree):
    """A share; satisfied iff its identifier is presented."""

    share_id: int

    def __post_init__(self) -> None:
        if self.share_id < 0:
            raise MalformedTree(f"share id must be ≥ 0, got {self.share_id}")

    @property
    def threshold(self) -> int:
        return 0

    @property
    def children(self) -> Tuple[AccessTree, ...]:
        return ()


@dataclass(frozen=True)
class Inner(AccessTree):
    """A *threshold*-of-*children* gate."""

    threshold: int
    children: Tuple[AccessTree, ...]

    def __init__(self, threshold: int, children: Iterable[AccessTree]) -> None:
        kids = tuple(children)
        if not kids:
            raise MalformedTree("inner node must have at least one child")
        if not 1 <= threshold <= len(kids):
            raise MalformedTree(
                f"threshold {threshold} outside [1, {len(kids)}] "
                f"for a node with {len(kids)} children"
            )
        object.__setattr__(self, "threshold", threshold)
        object.__setattr__(self, "children", kids)

    @classmethod
    def all_of(cls, children: Iterable[AccessTree]) -> Inner:
        kids = tuple(children)
        return cls(len(kids), kids)

    @classmethod
    def any_of(cls, children: Iterable[AccessTree]) -> Inner:
        return cls(1, children)


def flat_threshold_tree(threshold: int, num_shares: int) -> Inner:
    """*threshold*-of-*num_shares* over leaves ``0 .. num_shares-1``."""
    return Inner(threshold, [Leaf(i) for i in range(num_shares)])


# ── traversal protocol ──────────────────────────────────────────────────

class TreeVisitor(ABC, Generic[R]):
    """
    One algorithm's per-node state.

    :func:`perform_visitor` calls ``visit`` on the node, then for each
    child obtains a fresh visitor from ``child_context``, recurses, and
    folds the child's result back with ``accept_child_result``.
    ``finish`` yields the node's result.
    """

    @abstractmethod
    def visit(self, node: AccessTree) -> None:
        """Inspect *node* and initialise local state."""

    @abstractmethod
    def child_context(self) -> TreeVisitor[R]:
        """Fresh visitor for the next child, derived from this one."""

    @abstractmethod
    def accept_child_result(self, result: R) -> None:
        """Fold one finished child result into this node's aggregate."""

    @abstractmethod
    def finish(self) -> R:
        """Result of the current node after all children are folded."""

    def is_complete(self) -> bool:
        """True once further children cannot change ``finish()``."""
        return False


def perform_visitor(node: AccessTree, visitor: TreeVisitor[R]) -> R:
    """Drive *visitor* over the subtree rooted at *node*."""
    visitor.visit(node)
    for child in node.children:
        if visitor.is_complete():
            break
        child_result = perform_visitor(child, visitor.child_context())
        visitor.accept_child_result(child_result)
    return visitor.finish()
