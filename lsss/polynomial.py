"""
Polynomials and Lagrange interpolation over  Z_p.

Shamir sharing of a secret *s* with threshold *t* picks a random
polynomial *f* of degree  t-1  with  f(0) = s  and hands party *i* the
value  f(i).  Any *t* values determine *f*; the secret is recovered as

    f(0) = Σ_{i∈S}  λ_i(0) · f(i),
    λ_i(x) = Π_{j∈S, j≠i}  (x - j) / (i - j).

The same coefficients combine per-party group elements "in the
exponent" (see :pymod:`curve`), which is how distributed key shares are
recombined without ever assembling the secret.

References
----------
- Shamir (1979). "How to Share a Secret."  CACM 22(11).
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .errors import DegenerateInterpolationSet
from .field import IntLike, Zp, ZpElement, batch_inverse


# ── polynomial evaluation ───────────────────────────────────────────────
#  coefficients[i] = a_i   so  f(x) = a_0 + a_1 x + a_2 x^2 + …


def evaluate(coeffs: Sequence[ZpElement], x: ZpElement) -> ZpElement:
    """Evaluate f(x) via Horner's method in O(d) mults."""
    if not coeffs:
        return x.field.zero()
    result = coeffs[-1]
    for c in reversed(coeffs[:-1]):
        result = result * x + c
    return result


class RandomPolynomial:
    """
    Random polynomial of exact degree *degree* with a fixed value at 0.

    ``coefficients[0] = zero_value``; the leading coefficient is
    sampled from the non-zero elements so the degree is exact; all
    other coefficients are uniform and independent.
    """

    __slots__ = ("_field", "_coeffs")

    def __init__(self, degree: int, zero_value: IntLike, field: Zp) -> None:
        if degree < 0:
            raise ValueError("degree must be ≥ 0")
        self._field = field
        coeffs = [field.element(zero_value)]
        if degree > 0:
            coeffs.extend(field.random() for _ in range(degree - 1))
            coeffs.append(field.random_unit())
        self._coeffs: Tuple[ZpElement, ...] = tuple(coeffs)

    @property
    def degree(self) -> int:
        return len(self._coeffs) - 1

    @property
    def coefficients(self) -> Tuple[ZpElement, ...]:
        return self._coeffs

    @property
    def field(self) -> Zp:
        return self._field

    def evaluate(self, x: IntLike) -> ZpElement:
        return evaluate(self._coeffs, self._field.element(x))

    __call__ = evaluate

    def shares(self, n: int) -> Dict[int, ZpElement]:
        """Shamir shares  {i: f(i)}  for  i = 1 … n."""
        return {i: self.evaluate(i) for i in range(1, n + 1)}

    def __repr__(self) -> str:
        return f"RandomPolynomial(degree={self.degree}, field={self._field!r})"


# ── Lagrange coefficients ───────────────────────────────────────────────

def _index_elements(index_set: Iterable[IntLike], field: Zp) -> List[ZpElement]:
    points = [field.element(j) for j in index_set]
    if len(set(points)) != len(points):
        raise DegenerateInterpolationSet(
            "index set contains duplicate points (mod p)"
        )
    return points


def lagrange_coefficient(
    i: IntLike,
    index_set: Iterable[IntLike],
    x: IntLike,
    field: Zp,
) -> ZpElement:
    r"""
    Lagrange coefficient of point *i* in set *S*, evaluated at *x*:

    .. math::
        \lambda_i(x) = \prod_{j \in S,\; j \ne i} \frac{x - j}{i - j}

    Raises ``ValueError`` if *i* is not in *S* and
    ``DegenerateInterpolationSet`` if *S* has duplicates.
    """
    points = _index_elements(index_set, field)
    xi = field.element(i)
    if xi not in points:
        raise ValueError(f"index {i} not in index set")
    xe = field.element(x)
    num = field.one()
    den = field.one()
    for xj in points:
        if xj == xi:
            continue
        num = num * (xe - xj)
        den = den * (xi - xj)
    return num / den


def lagrange_coefficients(
    index_set: Iterable[int],
    x: IntLike,
    field: Zp,
) -> Dict[int, ZpElement]:
    """
    All coefficients  {i: λ_i(x)}  for  i ∈ S, using one inversion.

    Keys are the indices exactly as given.
    """
    indices = list(index_set)
    points = _index_elements(indices, field)
    xe = field.element(x)

    nums: List[ZpElement] = []
    dens: List[ZpElement] = []
    for xi in points:
        num = field.one()
        den = field.one()
        for xj in points:
            if xj == xi:
                continue
            num = num * (xe - xj)
            den = den * (xi - xj)
        nums.append(num)
        dens.append(den)

    inv_dens = batch_inverse(dens)
    return {
        idx: num * inv for idx, num, inv in zip(indices, nums, inv_dens)
    }


def interpolate_at(
    points: Mapping[int, ZpElement],
    x: IntLike,
    field: Zp,
) -> ZpElement:
    """
    Value at *x* of the unique polynomial of degree  < len(points)
    through ``{(i, points[i])}``.
    """
    coeffs = lagrange_coefficients(points.keys(), x, field)
    return sum((coeffs[i] * y for i, y in points.items()), field.zero())
