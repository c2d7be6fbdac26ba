"""
lsss: linear secret sharing over threshold access trees.

Monotone access structures built from threshold gates are compiled to

- **monotone span programs** over a prime field  Z_p
  [Karchmer & Wigderson 1993], or
- **recursive Shamir sharing**, one polynomial per gate
  [Shamir 1979],

and queried for satisfaction, greedy minimal satisfying subsets and
reconstruction coefficients.  Attribute-based and distributed-key
schemes use the coefficients to recombine their own per-share material,
e.g. group elements on secp256k1.

Quick start
-----------
::

    from lsss import MonotoneSpanProgram, Zp, parse_policy

    field = Zp(13)
    msp = MonotoneSpanProgram.from_policy(parse_policy("and(or(A, B), C)"), field)

    shares = msp.share(7)
    coeffs = msp.solving_vector({0, 2})          # A and C
    assert sum(c * shares[i] for i, c in coeffs.items()) == 7
"""

__version__ = "0.1.0"

# ── field ───────────────────────────────────────────────────────────────
from .field import Zp, ZpElement, batch_inverse, solve_linear_system

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    LSSSError,
    MalformedTree,
    NoSatisfyingSet,
    UnsupportedPolicyKind,
    PolicySyntaxError,
    DegenerateInterpolationSet,
    InconsistentLinearSystem,
)

# ── access trees ────────────────────────────────────────────────────────
from .tree import (
    AccessTree,
    Leaf,
    Inner,
    TreeVisitor,
    flat_threshold_tree,
    perform_visitor,
)
from .visitors import (
    SatisfactionVisitor,
    MinimalSubsetVisitor,
    MatrixVisitor,
    FormatVisitor,
)

# ── policies ────────────────────────────────────────────────────────────
from .policy import (
    Policy,
    Fact,
    ThresholdPolicy,
    BooleanPolicy,
    BooleanOperator,
    parse_policy,
)
from .converter import LeafMap, PolicyConverter, convert_policy, shares_of

# ── sharing schemes ─────────────────────────────────────────────────────
from .msp import MonotoneSpanProgram
from .shamir import ShamirSecretSharing, ThresholdTreeSharing
from .polynomial import (
    RandomPolynomial,
    evaluate,
    lagrange_coefficient,
    lagrange_coefficients,
    interpolate_at,
)

# ── exponent recombination ──────────────────────────────────────────────
from .curve import G, ORDER, SECP256K1, Point, combine_in_exponent

# ── configuration ───────────────────────────────────────────────────────
from .config import Config, config

__all__ = [
    # version
    "__version__",
    # field
    "Zp", "ZpElement", "batch_inverse", "solve_linear_system",
    # errors
    "LSSSError", "MalformedTree", "NoSatisfyingSet", "UnsupportedPolicyKind",
    "PolicySyntaxError", "DegenerateInterpolationSet",
    "InconsistentLinearSystem",
    # trees
    "AccessTree", "Leaf", "Inner", "TreeVisitor", "flat_threshold_tree",
    "perform_visitor",
    "SatisfactionVisitor", "MinimalSubsetVisitor", "MatrixVisitor",
    "FormatVisitor",
    # policies
    "Policy", "Fact", "ThresholdPolicy", "BooleanPolicy", "BooleanOperator",
    "parse_policy", "LeafMap", "PolicyConverter", "convert_policy",
    "shares_of",
    # schemes
    "MonotoneSpanProgram", "ShamirSecretSharing", "ThresholdTreeSharing",
    "RandomPolynomial", "evaluate", "lagrange_coefficient",
    "lagrange_coefficients", "interpolate_at",
    # curve
    "G", "ORDER", "SECP256K1", "Point", "combine_in_exponent",
    # config
    "Config", "config",
]
