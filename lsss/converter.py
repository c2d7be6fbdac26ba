"""
Policy AST → access tree conversion.

Facts become leaves numbered  0, 1, 2, …  in pre-order, left to right.
The same order is used by every tree traversal, so share *i* of a
monotone span program always belongs to the *i*-th fact of the policy.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Collection, Dict, Mapping, Set, Tuple

from .errors import UnsupportedPolicyKind
from .policy import BooleanOperator, BooleanPolicy, Fact, Policy, ThresholdPolicy
from .tree import AccessTree, Inner, Leaf

LeafMap = Mapping[int, Fact]


class PolicyConverter:
    """
    Single-use converter; holds the share-id → fact map being built.

    Prefer :func:`convert_policy` unless the converter itself is needed.
    """

    def __init__(self, policy: Policy) -> None:
        self._receivers: Dict[int, Fact] = {}
        self.tree = self._convert(policy)
        self.leaf_map: LeafMap = MappingProxyType(self._receivers)

    def _convert(self, policy: Policy) -> AccessTree:
        if isinstance(policy, Fact):
            share_id = len(self._receivers)
            self._receivers[share_id] = policy
            return Leaf(share_id)

        if isinstance(policy, ThresholdPolicy):
            return Inner(
                policy.threshold, [self._convert(c) for c in policy.children],
            )

        if isinstance(policy, BooleanPolicy):
            children = [self._convert(c) for c in policy.children]
            if policy.operator is BooleanOperator.AND:
                return Inner(len(children), children)
            return Inner(1, children)

        raise UnsupportedPolicyKind(
            f"unexpected type {type(policy).__name__} for policy"
        )


def convert_policy(policy: Policy) -> Tuple[AccessTree, LeafMap]:
    """Build ``(tree, leaf_map)`` from a policy AST."""
    converter = PolicyConverter(policy)
    return converter.tree, converter.leaf_map


def shares_of(leaf_map: LeafMap, facts: Collection[Fact]) -> Set[int]:
    """Share ids of every leaf whose fact is in *facts*."""
    wanted = set(facts)
    return {sid for sid, fact in leaf_map.items() if fact in wanted}
