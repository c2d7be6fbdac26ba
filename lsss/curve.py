"""
secp256k1 group elements for recombining shares "in the exponent".

A distributed-key or attribute-based scheme never reassembles the
secret *s* itself.  Each party publishes  s_i · G  and a combiner
computes

    s · G = Σ_i  c_i · (s_i · G)

with the coefficients  c_i  of a solving vector or of Lagrange
interpolation.  Scalars are ``ZpElement`` values of ``SECP256K1``; the
group operations are delegated to ``coincurve`` (libsecp256k1).

References
----------
- SEC 2 v2 §2.4.1  secp256k1 domain parameters
- SEC 1 v2 §2.3.3  point compression
"""

from __future__ import annotations

from typing import Mapping, Optional

from coincurve import PublicKey

from .field import IntLike, Zp, ZpElement

# ── group parameters ────────────────────────────────────────────────────
ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SCALAR_BYTES = 32
COMPRESSED_BYTES = 33

# scalars of the group: solving vectors over this field act on points
SECP256K1 = Zp(ORDER)

_INFINITY_BYTES = bytes(COMPRESSED_BYTES)


def _scalar_bytes(s: IntLike) -> Optional[bytes]:
    """Big-endian encoding of *s* mod n, or ``None`` for zero."""
    e = SECP256K1.element(s)
    if e.is_zero():
        return None
    return e.value.to_bytes(SCALAR_BYTES, "big")


# ── Point ───────────────────────────────────────────────────────────────
class Point:
    """
    Element of the secp256k1 group, written additively.

    Wraps a ``coincurve.PublicKey``; the identity, which libsecp256k1
    cannot represent as a key, is the wrapper holding ``None``.
    """

    __slots__ = ("_key",)

    def __init__(self, key: Optional[PublicKey] = None) -> None:
        self._key = key

    @classmethod
    def generator(cls) -> Point:
        return cls.from_scalar(1)

    @classmethod
    def identity(cls) -> Point:
        return cls(None)

    @classmethod
    def from_scalar(cls, s: IntLike) -> Point:
        """*s · G*."""
        raw = _scalar_bytes(s)
        return cls(None if raw is None else PublicKey.from_secret(raw))

    @classmethod
    def from_bytes(cls, data: bytes) -> Point:
        """SEC 1 point, or 33 zero bytes for the identity."""
        if data == _INFINITY_BYTES:
            return cls.identity()
        return cls(PublicKey(data))

    def to_bytes(self) -> bytes:
        if self._key is None:
            return _INFINITY_BYTES
        return self._key.format(compressed=True)

    def is_inf(self) -> bool:
        return self._key is None

    # ── group law ──────────────────────────────────────────────────────

    def __mul__(self, s: IntLike) -> Point:
        raw = _scalar_bytes(s)
        if self._key is None or raw is None:
            return Point.identity()
        return Point(self._key.multiply(raw))

    __rmul__ = __mul__

    def __neg__(self) -> Point:
        return self * (ORDER - 1)

    def __add__(self, other: Point) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        if self._key is None:
            return other
        if other._key is None:
            return self
        if self == -other:
            return Point.identity()
        return Point(PublicKey.combine_keys([self._key, other._key]))

    def __sub__(self, other: Point) -> Point:
        return self + (-other)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Point) and self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self) -> str:
        if self._key is None:
            return "Point(identity)"
        return f"Point({self.to_bytes().hex()[:18]}…)"


G = Point.generator()


# ── recombination ───────────────────────────────────────────────────────

def combine_in_exponent(
    coefficients: Mapping[int, ZpElement],
    points: Mapping[int, Point],
) -> Point:
    """
    Σ_i  c_i · P_i  over the ids in *coefficients*.

    Points for ids without a coefficient are ignored; a coefficient
    without a matching point raises ``KeyError``.
    """
    acc = Point.identity()
    for share_id, c in coefficients.items():
        acc = acc + points[share_id] * c
    return acc
