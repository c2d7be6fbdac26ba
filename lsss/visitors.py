"""
Tree algorithms expressed as ``TreeVisitor`` implementations.

- ``SatisfactionVisitor``    does a share set satisfy the tree?
- ``MinimalSubsetVisitor``   greedy small satisfying subset
- ``MatrixVisitor``          monotone-span-program rows
- ``FormatVisitor``          ``( t of: … )`` rendering

Each visitor holds the state of exactly one node.  ``child_context``
copies whatever the child needs (the presented set is shared but
read-only), so a traversal never observes another traversal's state.

MSP construction
----------------
For a gate with threshold *t* the *k*-th child (1-based) receives the
parent's row prefix extended by the Vandermonde powers

    (k, k², …, k^{t-1})

followed by one zero for every column already claimed by earlier
siblings' subtrees.  Any *t* children can therefore combine their
prefixes (with the Lagrange coefficients at 0 of their positions) back
into the parent prefix, and no smaller set can.  Column 0 holds the
secret.
"""

from __future__ import annotations

from typing import FrozenSet, List, Tuple

from .errors import MalformedTree
from .field import Zp, ZpElement
from .tree import AccessTree, TreeVisitor

Row = Tuple[ZpElement, ...]
SubsetResult = Tuple[int, List[int]]
MatrixResult = Tuple[int, List[Row]]


def _zero_threshold_error() -> MalformedTree:
    return MalformedTree(
        "tree contains a node with children and threshold 0; "
        "0 is not a valid threshold"
    )


# ── satisfaction ────────────────────────────────────────────────────────

class SatisfactionVisitor(TreeVisitor[bool]):
    """
    Boolean satisfaction check.

    The children loop stops as soon as the outcome is decided: either
    *threshold* children are satisfied, or too few children remain to
    reach it.  Skipped children are never assigned a result, so every
    ``finish()`` is the true value of its own subtree.
    """

    def __init__(self, presented: FrozenSet[int]) -> None:
        self._presented = presented
        self._threshold = 0
        self._remaining = 0
        self._count = 0
        self._satisfied = False

    def visit(self, node: AccessTree) -> None:
        self._threshold = node.threshold
        self._remaining = len(node.children)
        if node.is_leaf:
            self._satisfied = node.share_id in self._presented  # type: ignore[attr-defined]
        elif self._threshold == 0:
            raise _zero_threshold_error()

    def child_context(self) -> SatisfactionVisitor:
        return SatisfactionVisitor(self._presented)

    def accept_child_result(self, result: bool) -> None:
        self._remaining -= 1
        if not self._satisfied and result:
            self._count += 1
            self._satisfied = self._count >= self._threshold

    def is_complete(self) -> bool:
        if self._satisfied:
            return True
        return self._count + self._remaining < self._threshold

    def finish(self) -> bool:
        return self._satisfied


# ── minimal satisfying subset ───────────────────────────────────────────

class MinimalSubsetVisitor(TreeVisitor[SubsetResult]):
    """
    Greedy smallest satisfying subset.

    A leaf yields ``(1, [id])`` if presented.  A gate keeps the
    *threshold* satisfied children with the fewest leaves (stable on
    ties, so earlier children win) and yields ``(0, [])`` when fewer
    than *threshold* children are satisfied.
    """

    def __init__(self, presented: FrozenSet[int]) -> None:
        self._presented = presented
        self._threshold = 0
        self._leaf_id = -1
        self._satisfied_children: List[SubsetResult] = []

    def visit(self, node: AccessTree) -> None:
        self._threshold = node.threshold
        if node.is_leaf:
            self._leaf_id = node.share_id  # type: ignore[attr-defined]
        elif self._threshold == 0:
            raise _zero_threshold_error()

    def child_context(self) -> MinimalSubsetVisitor:
        return MinimalSubsetVisitor(self._presented)

    def accept_child_result(self, result: SubsetResult) -> None:
        if result[0] > 0:
            self._satisfied_children.append(result)

    def finish(self) -> SubsetResult:
        if self._threshold == 0:
            if self._leaf_id in self._presented:
                return 1, [self._leaf_id]
            return 0, []

        if len(self._satisfied_children) < self._threshold:
            return 0, []

        chosen = sorted(self._satisfied_children, key=lambda r: r[0])
        chosen = chosen[: self._threshold]
        ids: List[int] = []
        for _, leaf_ids in chosen:
            ids.extend(leaf_ids)
        return sum(count for count, _ in chosen), ids


# ── monotone span program matrix ────────────────────────────────────────

class MatrixVisitor(TreeVisitor[MatrixResult]):
    """
    Compile a subtree into MSP rows.

    Result is ``(extra_columns, rows)``: the number of columns this
    subtree introduces beyond its prefix, and one row per leaf in
    pre-order.
    """

    def __init__(self, field: Zp, prefix: Row) -> None:
        self._field = field
        self._prefix = prefix
        self._threshold = 0
        self._own_offset = 0
        self._counter_n = field.zero()
        self._rows: List[Row] = []

    def visit(self, node: AccessTree) -> None:
        self._threshold = node.threshold
        if node.is_leaf:
            self._rows.append(self._prefix)
            return
        if self._threshold > 1 and len(node.children) >= self._field.modulus:
            raise MalformedTree(
                f"gate with {len(node.children)} children needs distinct "
                f"non-zero evaluation points; {self._field!r} is too small"
            )

    def child_context(self) -> MatrixVisitor:
        if self._threshold == 0:
            raise _zero_threshold_error()

        self._counter_n = self._counter_n + 1

        # Vandermonde powers counter_n^1 .. counter_n^{t-1}
        value = self._field.one()
        extension: List[ZpElement] = []
        for _ in range(1, self._threshold):
            value = value * self._counter_n
            extension.append(value)

        # columns already claimed by earlier siblings stay zero
        zero = self._field.zero()
        extension.extend(zero for _ in range(self._own_offset))

        return MatrixVisitor(self._field, self._prefix + tuple(extension))

    def accept_child_result(self, result: MatrixResult) -> None:
        cols_used, rows = result
        self._own_offset += cols_used
        self._rows.extend(rows)

    def finish(self) -> MatrixResult:
        if self._threshold == 0:
            return 0, self._rows
        return self._own_offset + self._threshold - 1, self._rows


# ── rendering ───────────────────────────────────────────────────────────

class FormatVisitor(TreeVisitor[str]):
    """Render a tree as nested ``( t of: … )`` groups of share ids."""

    def __init__(self) -> None:
        self._threshold = 0
        self._leaf = ""
        self._parts: List[str] = []

    def visit(self, node: AccessTree) -> None:
        self._threshold = node.threshold
        if node.is_leaf:
            self._leaf = str(node.share_id)  # type: ignore[attr-defined]

    def child_context(self) -> FormatVisitor:
        return FormatVisitor()

    def accept_child_result(self, result: str) -> None:
        self._parts.append(result)

    def finish(self) -> str:
        if self._threshold == 0:
            return self._leaf
        return f"( {self._threshold} of: {','.join(self._parts)} )"
