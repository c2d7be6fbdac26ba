"""Resource limits for tree compilation, loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from .errors import MalformedTree

if TYPE_CHECKING:
    from .tree import AccessTree


def _int_env(key: str, default: str) -> int:
    val = os.getenv(key, default)
    try:
        return int(val)
    except (ValueError, TypeError, OverflowError):
        raise ValueError(f"Invalid integer for {key}: {val!r}")


@dataclass(frozen=True)
class Config:
    # Largest number of leaves (= MSP rows) a tree may have
    max_leaves: int = _int_env("LSSS_MAX_LEAVES", "4096")

    # Largest number of children below a single threshold gate
    max_gate_width: int = _int_env("LSSS_MAX_GATE_WIDTH", "1024")

    def validate(self) -> List[str]:
        """Validate the limits. Returns list of warnings (empty = all good)."""
        warnings = []
        if self.max_leaves < 1:
            raise ValueError(f"LSSS_MAX_LEAVES must be ≥ 1, got {self.max_leaves}")
        if self.max_gate_width < 1:
            raise ValueError(
                f"LSSS_MAX_GATE_WIDTH must be ≥ 1, got {self.max_gate_width}"
            )
        if self.max_gate_width > self.max_leaves:
            warnings.append(
                "LSSS_MAX_GATE_WIDTH exceeds LSSS_MAX_LEAVES; the leaf limit "
                "is the effective bound"
            )
        return warnings

    def check_tree(self, tree: AccessTree) -> None:
        """Raise ``MalformedTree`` if *tree* exceeds either limit."""
        leaves = 0
        stack = [tree]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                leaves += 1
                continue
            if len(node.children) > self.max_gate_width:
                raise MalformedTree(
                    f"gate with {len(node.children)} children exceeds "
                    f"LSSS_MAX_GATE_WIDTH={self.max_gate_width}"
                )
            stack.extend(node.children)
        if leaves > self.max_leaves:
            raise MalformedTree(
                f"tree with {leaves} leaves exceeds LSSS_MAX_LEAVES={self.max_leaves}"
            )


config = Config()
