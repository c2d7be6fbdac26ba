"""
Policy AST consumed by the tree converter, and a small textual parser.

Grammar (whitespace is ignored)::

    policy  := "and(" args ")" | "or(" args ")" | "kof(" k "," args ")"
             | name
    args    := policy ("," policy)*
    name    := [A-Za-z_][A-Za-z0-9_]*

``kof(2, A, B, C)`` is the 2-of-3 threshold over *A*, *B*, *C*.  Names
become ``Fact`` leaves whose payload is the name itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Hashable, Iterable, List, Tuple

from .errors import PolicySyntaxError


class Policy:
    """Marker base class of all policy AST nodes."""

    __slots__ = ()


@dataclass(frozen=True)
class Fact(Policy):
    """Atomic condition; *payload* names the attribute / party / server."""

    payload: Hashable

    def __str__(self) -> str:
        return str(self.payload)


@dataclass(frozen=True)
class ThresholdPolicy(Policy):
    """At least *threshold* of *children* must hold."""

    threshold: int
    children: Tuple[Policy, ...]

    def __init__(self, threshold: int, *children: Any) -> None:
        object.__setattr__(self, "threshold", threshold)
        object.__setattr__(self, "children", _as_policies(children))

    def __str__(self) -> str:
        inner = ", ".join(str(c) for c in self.children)
        return f"kof({self.threshold}, {inner})"


class BooleanOperator(Enum):
    AND = "and"
    OR = "or"


@dataclass(frozen=True)
class BooleanPolicy(Policy):
    """Conjunction or disjunction of *children*."""

    operator: BooleanOperator
    children: Tuple[Policy, ...]

    def __init__(self, operator: BooleanOperator, *children: Any) -> None:
        object.__setattr__(self, "operator", operator)
        object.__setattr__(self, "children", _as_policies(children))

    def __str__(self) -> str:
        inner = ", ".join(str(c) for c in self.children)
        return f"{self.operator.value}({inner})"


def _as_policies(children: Iterable[Any]) -> Tuple[Policy, ...]:
    """Accept ``f(a, b)`` as well as ``f([a, b])``; wrap bare payloads."""
    items = list(children)
    if len(items) == 1 and isinstance(items[0], (list, tuple)):
        items = list(items[0])
    return tuple(c if isinstance(c, Policy) else Fact(c) for c in items)


# ── parser ──────────────────────────────────────────────────────────────

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INT = re.compile(r"\d+")


def parse_policy(text: str) -> Policy:
    """
    Parse ``and(…)`` / ``or(…)`` / ``kof(k, …)`` expressions.

    Raises ``PolicySyntaxError`` on malformed input.
    """
    s = re.sub(r"\s+", "", text)
    if not s:
        raise PolicySyntaxError("empty policy")

    def parse_expr(i: int) -> Tuple[Policy, int]:
        if s.startswith("and(", i):
            kids, j = parse_args(i + 4)
            return BooleanPolicy(BooleanOperator.AND, kids), j
        if s.startswith("or(", i):
            kids, j = parse_args(i + 3)
            return BooleanPolicy(BooleanOperator.OR, kids), j
        if s.startswith("kof(", i):
            m = _INT.match(s, i + 4)
            if not m or not s.startswith(",", m.end()):
                raise PolicySyntaxError(
                    f"kof: expected '<k>,' at position {i + 4}"
                )
            kids, j = parse_args(m.end() + 1)
            return ThresholdPolicy(int(m.group(0)), kids), j

        m = _NAME.match(s, i)
        if not m:
            raise PolicySyntaxError(f"parse error at {i}: {s[i:i + 20]!r}")
        return Fact(m.group(0)), m.end()

    def parse_args(i: int) -> Tuple[List[Policy], int]:
        kids: List[Policy] = []
        while True:
            if i >= len(s):
                raise PolicySyntaxError("unexpected end of policy")
            node, i = parse_expr(i)
            kids.append(node)
            if i >= len(s):
                raise PolicySyntaxError("unbalanced parentheses in policy")
            if s[i] == ")":
                return kids, i + 1
            if s[i] != ",":
                raise PolicySyntaxError(
                    f"expected ',' or ')' at {i}, got {s[i]!r}"
                )
            i += 1

    node, end = parse_expr(0)
    if end != len(s):
        raise PolicySyntaxError(f"trailing input in policy at {end}")
    return node
