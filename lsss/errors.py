"""
Exception hierarchy for threshold-tree secret sharing.

Every error raised on purpose by this package derives from
``LSSSError``.  Where a builtin category already describes the failure
(``ValueError`` for malformed input, ``ZeroDivisionError`` for a
degenerate interpolation set) the exception also inherits from it, so
callers that only know the builtin still catch it.

Only ``NoSatisfyingSet`` is an expected, recoverable condition: the
presented shares simply do not qualify.  Everything else signals a
programming error in the caller.
"""

from __future__ import annotations


class LSSSError(Exception):
    """Base class for all errors raised by :pymod:`lsss`."""


class MalformedTree(LSSSError, ValueError):
    """
    An access tree violates its structural invariants.

    Raised for an inner node whose threshold is 0 or exceeds its number
    of children, and for trees the configured limits or the field size
    cannot accommodate.
    """


class NoSatisfyingSet(LSSSError):
    """The given shares do not satisfy the access structure."""


class UnsupportedPolicyKind(LSSSError, TypeError):
    """The policy converter met an AST node it has no rule for."""


class PolicySyntaxError(LSSSError, ValueError):
    """A textual policy could not be parsed."""


class DegenerateInterpolationSet(LSSSError, ZeroDivisionError):
    """Lagrange index set contains duplicates (a denominator vanishes)."""


class InconsistentLinearSystem(LSSSError, ValueError):
    """Gaussian elimination found a row ``0 = b`` with ``b != 0``."""
