"""
Monotone span programs compiled from threshold access trees.

A monotone span program over  Z_p  is a matrix *M* with one row per
share.  To share a secret *s* the dealer picks a random vector
v = (s, r_1, …, r_{d-1}) and hands share *i* the value  ⟨M_i, v⟩.
A set *S* of shares is qualified iff  e_0 = (1, 0, …, 0)  lies in the
span of its rows; the coefficients  c  with  Σ_{i∈S} c_i M_i = e_0
then recover  s = Σ c_i ⟨M_i, v⟩.

The matrix comes from :class:`~lsss.visitors.MatrixVisitor`: each
*t*-of-*n* gate extends its children's rows with Vandermonde powers,
which gives exactly the access structure of the tree.

References
----------
- Karchmer, Wigderson (1993). "On Span Programs."  Structure in
  Complexity Theory.
- Beimel (1996). "Secure Schemes for Secret Sharing and Key
  Distribution."  PhD thesis, Technion.
"""

from __future__ import annotations

from typing import Collection, Dict, Iterable, List, Mapping, Optional, Set, Tuple

import structlog

from .config import Config, config as default_config
from .converter import LeafMap, PolicyConverter, shares_of
from .errors import InconsistentLinearSystem, MalformedTree, NoSatisfyingSet
from .field import IntLike, Zp, ZpElement, solve_linear_system
from .policy import Fact, Policy
from .tree import AccessTree

log = structlog.get_logger()

Row = Tuple[ZpElement, ...]


class MonotoneSpanProgram:
    """
    Linear secret sharing for the access structure of one tree.

    The matrix is computed once at construction and never changes, so
    one instance may serve concurrent readers.
    """

    def __init__(
        self,
        tree: AccessTree,
        field: Zp,
        leaf_map: Optional[LeafMap] = None,
        *,
        config: Optional[Config] = None,
    ) -> None:
        (config or default_config).check_tree(tree)

        ids = tree.share_ids()
        if len(set(ids)) != len(ids):
            raise MalformedTree("share ids must be unique within a tree")

        columns, rows = tree.span_program_rows(field)

        self._tree = tree
        self._field = field
        self._leaf_map: LeafMap = leaf_map if leaf_map is not None else {}
        self._columns = columns
        self._rows: Dict[int, Row] = dict(zip(ids, rows))

        log.debug("msp_built", rows=len(ids), columns=columns)

    # ── factories ──────────────────────────────────────────────────────

    @classmethod
    def build(
        cls, tree: AccessTree, field: Zp, *, config: Optional[Config] = None,
    ) -> MonotoneSpanProgram:
        return cls(tree, field, config=config)

    @classmethod
    def from_policy(
        cls, policy: Policy, field: Zp, *, config: Optional[Config] = None,
    ) -> MonotoneSpanProgram:
        """Convert *policy* to a tree and compile it."""
        converter = PolicyConverter(policy)
        return cls(converter.tree, field, converter.leaf_map, config=config)

    # ── accessors ──────────────────────────────────────────────────────

    @property
    def tree(self) -> AccessTree:
        return self._tree

    @property
    def field(self) -> Zp:
        return self._field

    @property
    def leaf_map(self) -> LeafMap:
        return self._leaf_map

    @property
    def number_of_columns(self) -> int:
        return self._columns

    @property
    def share_ids(self) -> List[int]:
        return list(self._rows)

    @property
    def matrix(self) -> Tuple[Row, ...]:
        """All rows in share-id order, zero-padded to the column count."""
        return tuple(self.row(sid) for sid in sorted(self._rows))

    def row(self, share_id: int) -> Row:
        """Row of *share_id*, zero-padded to ``number_of_columns``."""
        r = self._rows[share_id]
        return r + (self._field.zero(),) * (self._columns - len(r))

    # ── sharing ────────────────────────────────────────────────────────

    def share(self, secret: IntLike) -> Dict[int, ZpElement]:
        """
        Shares ``{share_id: ⟨M_i, v⟩}`` for  v = (secret, r_1, …)  with
        uniformly random  r_j.
        """
        s = self._field.element(secret)
        v = [s] + [self._field.random() for _ in range(self._columns - 1)]
        zero = self._field.zero()
        # zip stops at the end of short rows: implicit zero padding
        return {
            sid: sum((a * b for a, b in zip(r, v)), zero)
            for sid, r in self._rows.items()
        }

    # ── qualification / reconstruction ─────────────────────────────────

    def is_qualified(self, share_ids: Iterable[int]) -> bool:
        return self._tree.is_satisfied_by(share_ids)

    def solving_vector(self, share_ids: Iterable[int]) -> Dict[int, ZpElement]:
        """
        Coefficients ``{i: c_i}`` with  Σ c_i M_i = e_0.

        The ids are first narrowed to a greedy minimal satisfying
        subset; only ids of that subset appear in the result.  Ids
        unknown to the tree are ignored.

        Raises
        ------
        NoSatisfyingSet
            If *share_ids* do not satisfy the access structure.
        """
        presented = frozenset(i for i in share_ids if i in self._rows)
        subset = self._tree.minimal_satisfying_subset(presented)
        if subset is None:
            log.warning(
                "solving_vector_rejected",
                presented=len(presented),
                reason="tree_not_satisfied",
            )
            raise NoSatisfyingSet("given set does not satisfy the access structure")
        _, ids = subset
        return self.solve_for_rows(ids)

    def solve_for_rows(self, share_ids: Collection[int]) -> Dict[int, ZpElement]:
        """
        Solve  M_S^T c = e_0  over exactly the rows *share_ids*, without
        consulting the tree.

        Raises ``NoSatisfyingSet`` if e_0 is not in the span of the rows
        and ``KeyError`` for an unknown id.
        """
        ids = list(dict.fromkeys(share_ids))
        rows = [self.row(i) for i in ids]
        zero, one = self._field.zero(), self._field.one()

        # one equation per column, one unknown per selected row
        system = [[r[col] for r in rows] for col in range(self._columns)]
        target = [one] + [zero] * (self._columns - 1)
        try:
            coeffs = solve_linear_system(system, target, self._field)
        except InconsistentLinearSystem as exc:
            log.warning(
                "solving_vector_rejected",
                presented=len(ids),
                reason="e0_not_in_row_span",
            )
            raise NoSatisfyingSet(
                "given set does not satisfy the access structure"
            ) from exc

        log.debug("solving_vector_found", rows=len(ids), columns=self._columns)
        return dict(zip(ids, coeffs))

    def reconstruct(self, shares: Mapping[int, ZpElement]) -> ZpElement:
        """Recover the secret from a qualified set of shares."""
        coeffs = self.solving_vector(shares.keys())
        return sum(
            (c * self._field.element(shares[i]) for i, c in coeffs.items()),
            self._field.zero(),
        )

    def check_share_consistency(
        self, secret: IntLike, shares: Mapping[int, ZpElement],
    ) -> bool:
        """
        True iff some  v = (secret, r_1, …)  produces every given share.
        """
        unknown = set(shares) - set(self._rows)
        if unknown:
            raise ValueError(f"unknown share ids {sorted(unknown)}")
        s = self._field.element(secret)

        ids = list(shares)
        system = [list(self.row(i)[1:]) for i in ids]
        rhs = [self._field.element(shares[i]) - self.row(i)[0] * s for i in ids]
        try:
            solve_linear_system(system, rhs, self._field)
        except InconsistentLinearSystem:
            return False
        return True

    # ── fact-level helpers ─────────────────────────────────────────────

    def shares_of(self, facts: Collection[Fact]) -> Set[int]:
        """Share ids belonging to *facts* (via the leaf map)."""
        return shares_of(self._leaf_map, facts)

    def is_qualified_by(self, facts: Collection[Fact]) -> bool:
        return self.is_qualified(self.shares_of(facts))

    def solving_vector_for(self, facts: Collection[Fact]) -> Dict[int, ZpElement]:
        return self.solving_vector(self.shares_of(facts))

    # ── rendering ──────────────────────────────────────────────────────

    def format_matrix(self) -> str:
        """One line per row: the padded row, then its fact if known."""
        matrix = self.matrix
        width = max(
            (len(str(e.value)) for r in matrix for e in r), default=1,
        )
        lines = []
        for sid, r in zip(sorted(self._rows), matrix):
            cells = " ".join(f"{e.value:>{width}d}" for e in r)
            fact = self._leaf_map.get(sid)
            label = str(fact) if fact is not None else str(sid)
            lines.append(f"( {cells} ) {label}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"MonotoneSpanProgram(rows={len(self._rows)}, "
            f"columns={self._columns}, field={self._field!r})"
        )
