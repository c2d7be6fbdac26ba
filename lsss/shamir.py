"""
Shamir-based linear secret sharing: flat  t-of-n  and threshold trees.

``ShamirSecretSharing`` shares among  n  parties with ids  1 … n  by
evaluating one ``RandomPolynomial`` of degree  t-1.

``ThresholdTreeSharing`` applies the same idea recursively: every gate
shares the value it receives among its children with its own
polynomial (child *k* gets  f(k)), and leaves keep what they receive.
The solving vector of a qualified set is the product of the Lagrange
coefficients met on each selected leaf's path to the root.  It
realises the same access structure as the monotone span program of the
tree, without building a matrix.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

import structlog

from .config import Config, config as default_config
from .errors import MalformedTree, NoSatisfyingSet
from .field import IntLike, Zp, ZpElement
from .polynomial import RandomPolynomial, interpolate_at, lagrange_coefficients
from .tree import AccessTree, TreeVisitor, perform_visitor

log = structlog.get_logger()

Shares = Dict[int, ZpElement]


def _combine(
    field: Zp, coeffs: Mapping[int, ZpElement], shares: Mapping[int, ZpElement],
) -> ZpElement:
    return sum(
        (c * field.element(shares[i]) for i, c in coeffs.items()), field.zero(),
    )


# ── flat threshold ──────────────────────────────────────────────────────

class ShamirSecretSharing:
    """*threshold*-of-*num_shares* Shamir sharing; share ids are 1 … n."""

    def __init__(self, threshold: int, num_shares: int, field: Zp) -> None:
        if not 1 <= threshold <= num_shares:
            raise MalformedTree(
                f"threshold {threshold} outside [1, {num_shares}]"
            )
        if num_shares >= field.modulus:
            raise MalformedTree(
                f"{num_shares} shares need distinct non-zero points in {field!r}"
            )
        self.threshold = threshold
        self.num_shares = num_shares
        self.field = field

    @property
    def share_ids(self) -> List[int]:
        return list(range(1, self.num_shares + 1))

    def _valid(self, share_ids: Iterable[int]) -> List[int]:
        return sorted({i for i in share_ids if 1 <= i <= self.num_shares})

    def share(self, secret: IntLike) -> Shares:
        poly = RandomPolynomial(self.threshold - 1, secret, self.field)
        return poly.shares(self.num_shares)

    def is_qualified(self, share_ids: Iterable[int]) -> bool:
        return len(self._valid(share_ids)) >= self.threshold

    def solving_vector(self, share_ids: Iterable[int]) -> Shares:
        """Lagrange coefficients at 0 over all valid ids given."""
        ids = self._valid(share_ids)
        if len(ids) < self.threshold:
            log.warning(
                "solving_vector_rejected",
                presented=len(ids),
                threshold=self.threshold,
            )
            raise NoSatisfyingSet(
                f"{len(ids)} shares given, {self.threshold} needed"
            )
        return lagrange_coefficients(ids, 0, self.field)

    def reconstruct(self, shares: Mapping[int, ZpElement]) -> ZpElement:
        return _combine(self.field, self.solving_vector(shares.keys()), shares)

    def complete_shares(
        self, secret: IntLike, partial: Mapping[int, ZpElement],
    ) -> Shares:
        """
        Extend *partial* to a full share set consistent with *secret*.

        Fewer than *threshold* partial shares leave the polynomial
        undetermined; the missing degrees of freedom are filled with
        random values and the rest follows by interpolation.
        """
        unknown = set(partial) - set(self.share_ids)
        if unknown:
            raise ValueError(f"unknown share ids {sorted(unknown)}")
        if len(partial) >= self.threshold:
            raise ValueError(
                f"{len(partial)} partial shares already determine the "
                f"polynomial (threshold {self.threshold})"
            )

        full: Shares = {i: self.field.element(v) for i, v in partial.items()}
        missing = [i for i in self.share_ids if i not in full]
        for i in missing[: self.threshold - len(partial) - 1]:
            full[i] = self.field.random()

        points = dict(full)
        points[0] = self.field.element(secret)
        for i in self.share_ids:
            if i not in full:
                full[i] = interpolate_at(points, i, self.field)
        return full

    def check_share_consistency(
        self, secret: IntLike, shares: Mapping[int, ZpElement],
    ) -> bool:
        """
        True iff all *shares* lie on one polynomial of degree  < t
        whose value at 0 is *secret*.
        """
        unknown = set(shares) - set(self.share_ids)
        if unknown:
            raise ValueError(f"unknown share ids {sorted(unknown)}")
        if len(shares) < self.threshold:
            raise ValueError("not enough shares to reconstruct the secret")
        ids = sorted(shares)
        basis = {i: self.field.element(shares[i]) for i in ids[: self.threshold]}
        if interpolate_at(basis, 0, self.field) != self.field.element(secret):
            return False
        return all(
            interpolate_at(basis, i, self.field) == self.field.element(shares[i])
            for i in ids[self.threshold:]
        )

    def __repr__(self) -> str:
        return (
            f"ShamirSecretSharing(threshold={self.threshold}, "
            f"num_shares={self.num_shares}, field={self.field!r})"
        )


# ── threshold tree ──────────────────────────────────────────────────────

class _DistributionVisitor(TreeVisitor[Shares]):
    """Hands each child  f(k)  of this gate's random polynomial."""

    def __init__(self, field: Zp, value: ZpElement) -> None:
        self._field = field
        self._value = value
        self._poly: Optional[RandomPolynomial] = None
        self._counter = 0
        self._leaf_id = -1
        self._shares: Shares = {}

    def visit(self, node: AccessTree) -> None:
        if node.is_leaf:
            self._leaf_id = node.share_id  # type: ignore[attr-defined]
        else:
            self._poly = RandomPolynomial(node.threshold - 1, self._value, self._field)

    def child_context(self) -> _DistributionVisitor:
        self._counter += 1
        return _DistributionVisitor(self._field, self._poly.evaluate(self._counter))  # type: ignore[union-attr]

    def accept_child_result(self, result: Shares) -> None:
        self._shares.update(result)

    def finish(self) -> Shares:
        if self._poly is None:
            return {self._leaf_id: self._value}
        return self._shares


class _PathCoefficientVisitor(TreeVisitor[Optional[Shares]]):
    """
    Product of Lagrange coefficients along the paths to *selected*
    leaves.  ``None`` marks a subtree the selection does not satisfy.
    """

    def __init__(self, field: Zp, selected: FrozenSet[int]) -> None:
        self._field = field
        self._selected = selected
        self._threshold = 0
        self._leaf_id = -1
        self._counter = 0
        self._children: Dict[int, Shares] = {}

    def visit(self, node: AccessTree) -> None:
        self._threshold = node.threshold
        if node.is_leaf:
            self._leaf_id = node.share_id  # type: ignore[attr-defined]

    def child_context(self) -> _PathCoefficientVisitor:
        self._counter += 1
        return _PathCoefficientVisitor(self._field, self._selected)

    def accept_child_result(self, result: Optional[Shares]) -> None:
        if result is not None:
            self._children[self._counter] = result

    def is_complete(self) -> bool:
        return self._threshold > 0 and len(self._children) >= self._threshold

    def finish(self) -> Optional[Shares]:
        if self._threshold == 0:
            if self._leaf_id in self._selected:
                return {self._leaf_id: self._field.one()}
            return None
        if len(self._children) < self._threshold:
            return None

        lambdas = lagrange_coefficients(self._children, 0, self._field)
        result: Shares = {}
        for k, coeffs in self._children.items():
            for sid, c in coeffs.items():
                result[sid] = c * lambdas[k]
        return result


class _ConsistencyVisitor(TreeVisitor[Optional[ZpElement]]):
    """
    Recompute each gate's value from its first *t* children and check
    the remaining children against the same polynomial.  ``None``
    marks an inconsistent subtree.
    """

    def __init__(self, field: Zp, shares: Mapping[int, ZpElement]) -> None:
        self._field = field
        self._shares = shares
        self._threshold = 0
        self._leaf_id = -1
        self._counter = 0
        self._points: Dict[int, ZpElement] = {}
        self._broken = False

    def visit(self, node: AccessTree) -> None:
        self._threshold = node.threshold
        if node.is_leaf:
            self._leaf_id = node.share_id  # type: ignore[attr-defined]

    def child_context(self) -> _ConsistencyVisitor:
        self._counter += 1
        return _ConsistencyVisitor(self._field, self._shares)

    def accept_child_result(self, result: Optional[ZpElement]) -> None:
        if result is None:
            self._broken = True
        else:
            self._points[self._counter] = result

    def is_complete(self) -> bool:
        return self._broken

    def finish(self) -> Optional[ZpElement]:
        if self._threshold == 0:
            return self._field.element(self._shares[self._leaf_id])
        if self._broken:
            return None
        ks = sorted(self._points)
        basis = {k: self._points[k] for k in ks[: self._threshold]}
        for k in ks[self._threshold:]:
            if interpolate_at(basis, k, self._field) != self._points[k]:
                return None
        return interpolate_at(basis, 0, self._field)


class _FixedValueVisitor(TreeVisitor[Optional[ZpElement]]):
    """
    Value a subtree receives, if the *partial* shares below it already
    determine it; ``None`` otherwise.
    """

    def __init__(self, field: Zp, partial: Mapping[int, ZpElement]) -> None:
        self._field = field
        self._partial = partial
        self._threshold = 0
        self._leaf_id = -1
        self._counter = 0
        self._points: Dict[int, ZpElement] = {}

    def visit(self, node: AccessTree) -> None:
        self._threshold = node.threshold
        if node.is_leaf:
            self._leaf_id = node.share_id  # type: ignore[attr-defined]

    def child_context(self) -> _FixedValueVisitor:
        self._counter += 1
        return _FixedValueVisitor(self._field, self._partial)

    def accept_child_result(self, result: Optional[ZpElement]) -> None:
        if result is not None:
            self._points[self._counter] = result

    def is_complete(self) -> bool:
        return self._threshold > 0 and len(self._points) >= self._threshold

    def finish(self) -> Optional[ZpElement]:
        if self._threshold == 0:
            if self._leaf_id not in self._partial:
                return None
            return self._field.element(self._partial[self._leaf_id])
        if len(self._points) < self._threshold:
            return None
        return interpolate_at(self._points, 0, self._field)


class _CompletionVisitor(TreeVisitor[Shares]):
    """
    Hands each child a value consistent with *value* and with the
    children the partial shares already fix.

    A gate with threshold *t* and *d < t* fixed children draws
    ``t - d - 1`` further children at random; together with *value* at 0
    that pins the polynomial, and every other child is interpolated.
    A gate with ``d >= t`` follows its fixed children alone.
    """

    def __init__(
        self, field: Zp, partial: Mapping[int, ZpElement], value: ZpElement,
    ) -> None:
        self._field = field
        self._partial = partial
        self._value = value
        self._leaf_id = -1
        self._basis: Dict[int, ZpElement] = {}
        self._counter = 0
        self._shares: Shares = {}

    def visit(self, node: AccessTree) -> None:
        if node.is_leaf:
            self._leaf_id = node.share_id  # type: ignore[attr-defined]
            return

        fixed: Dict[int, ZpElement] = {}
        for k, child in enumerate(node.children, start=1):
            v = perform_visitor(child, _FixedValueVisitor(self._field, self._partial))
            if v is not None:
                fixed[k] = v

        t = node.threshold
        if len(fixed) >= t:
            self._basis = {k: fixed[k] for k in sorted(fixed)[:t]}
            return

        basis = dict(fixed)
        basis[0] = self._value
        free = [k for k in range(1, len(node.children) + 1) if k not in fixed]
        for k in free[: t - len(fixed) - 1]:
            basis[k] = self._field.random()
        self._basis = basis

    def child_context(self) -> _CompletionVisitor:
        self._counter += 1
        k = self._counter
        if k in self._basis:
            value = self._basis[k]
        else:
            value = interpolate_at(self._basis, k, self._field)
        return _CompletionVisitor(self._field, self._partial, value)

    def accept_child_result(self, result: Shares) -> None:
        self._shares.update(result)

    def finish(self) -> Shares:
        if self._leaf_id < 0:
            return self._shares
        if self._leaf_id in self._partial:
            return {self._leaf_id: self._field.element(self._partial[self._leaf_id])}
        return {self._leaf_id: self._value}


class ThresholdTreeSharing:
    """Recursive Shamir sharing over an access tree, keyed by share id."""

    def __init__(
        self, tree: AccessTree, field: Zp, *, config: Optional[Config] = None,
    ) -> None:
        (config or default_config).check_tree(tree)
        ids = tree.share_ids()
        if len(set(ids)) != len(ids):
            raise MalformedTree("share ids must be unique within a tree")
        stack = [tree]
        while stack:
            node = stack.pop()
            if node.threshold > 1 and len(node.children) >= field.modulus:
                raise MalformedTree(
                    f"gate with {len(node.children)} children needs distinct "
                    f"non-zero evaluation points; {field!r} is too small"
                )
            stack.extend(node.children)
        self.tree = tree
        self.field = field
        self._ids = frozenset(ids)

    @property
    def share_ids(self) -> List[int]:
        return self.tree.share_ids()

    def share(self, secret: IntLike) -> Shares:
        return perform_visitor(
            self.tree, _DistributionVisitor(self.field, self.field.element(secret)),
        )

    def is_qualified(self, share_ids: Iterable[int]) -> bool:
        return self.tree.is_satisfied_by(share_ids)

    def solving_vector(self, share_ids: Iterable[int]) -> Shares:
        """
        Coefficients over a greedy minimal satisfying subset of
        *share_ids*.  Raises ``NoSatisfyingSet`` if there is none.
        """
        subset = self.tree.minimal_satisfying_subset(share_ids)
        if subset is None:
            log.warning("solving_vector_rejected", reason="tree_not_satisfied")
            raise NoSatisfyingSet("given set does not satisfy the access structure")
        _, ids = subset
        coeffs = perform_visitor(
            self.tree, _PathCoefficientVisitor(self.field, frozenset(ids)),
        )
        if coeffs is None:
            raise NoSatisfyingSet("selected subset does not reach the root")
        return coeffs

    def reconstruct(self, shares: Mapping[int, ZpElement]) -> ZpElement:
        return _combine(self.field, self.solving_vector(shares.keys()), shares)

    def complete_shares(
        self, secret: IntLike, partial: Mapping[int, ZpElement],
    ) -> Shares:
        """
        Extend an unqualified *partial* share set to a full sharing of
        *secret*, gate by gate from the root down.
        """
        unknown = set(partial) - self._ids
        if unknown:
            raise ValueError(f"unknown share ids {sorted(unknown)}")
        if self.tree.is_satisfied_by(partial):
            raise ValueError(
                "partial shares already satisfy the access structure"
            )
        return perform_visitor(
            self.tree,
            _CompletionVisitor(self.field, partial, self.field.element(secret)),
        )

    def check_share_consistency(
        self, secret: IntLike, shares: Mapping[int, ZpElement],
    ) -> bool:
        """True iff the full share set *shares* is a sharing of *secret*."""
        missing = self._ids - set(shares)
        if missing:
            raise ValueError(f"missing shares for ids {sorted(missing)}")
        root = perform_visitor(self.tree, _ConsistencyVisitor(self.field, shares))
        return root is not None and root == self.field.element(secret)

    def __repr__(self) -> str:
        return f"ThresholdTreeSharing(tree={self.tree}, field={self.field!r})"
