"""
Lagrange interpolation at x=0.

Two ways of computing the reconstruction coefficients are supported:

- "field": lambda_x is computed in the scalar field with modular inverses.
  Works for any set of distinct non-zero abscissas.
- "integer": lambda_x is computed as an exact rational and must be an
  integer, e.g. {8, 16} gives {8: 2, 16: -1}. Negative coefficients are
  applied as the additive inverse of the positive multiple. Sets such as
  {1, 2, 4} have fractional coefficients and are rejected.
"""

import logging
from fractions import Fraction
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

from bls_curve import GroupElement, add_points, curve_order, scalar_neg, scale, scale_signed
from threshold_errors import DuplicateOrZeroAbscissa, NonIntegerCoefficient

logger = logging.getLogger(__name__)

FIELD = "field"
INTEGER = "integer"
MODES = (FIELD, INTEGER)

T = TypeVar("T")
Shares = Union[Mapping[int, T], Iterable[Tuple[int, T]]]


def mod_inv(x: int) -> int:
    """Compute modular inverse of x modulo curve_order."""
    return pow(x, -1, curve_order)


def _check_abscissas(xs: Iterable[int]) -> List[int]:
    seen = set()
    ordered = []
    for x in xs:
        if x == 0 or x in seen:
            raise DuplicateOrZeroAbscissa(x)
        seen.add(x)
        ordered.append(x)
    return ordered


def _as_pairs(shares: Shares) -> List[Tuple[int, T]]:
    if isinstance(shares, Mapping):
        pairs = list(shares.items())
    else:
        pairs = [(x, value) for x, value in shares]
    _check_abscissas(x for x, _ in pairs)
    return pairs


def lagrange_coefficient(i: int, ids: List[int]) -> int:
    """Compute the field Lagrange coefficient for abscissa i given all abscissas."""
    num = den = 1
    for j in ids:
        if j == i:
            continue
        num = (num * j) % curve_order
        den = (den * (j - i)) % curve_order
    return (num * mod_inv(den)) % curve_order


def field_lagrange_coefficients(xs: Iterable[int]) -> Dict[int, int]:
    """Reconstruction coefficients in the scalar field, for any distinct non-zero xs."""
    ids = _check_abscissas(xs)
    return {x: lagrange_coefficient(x, ids) for x in ids}


def lagrange_coefficients(xs: Iterable[int]) -> Dict[int, int]:
    """
    Exact integer reconstruction coefficients.

    lambda_x = prod(x_j / (x_j - x)) over the other abscissas, evaluated with
    rationals. Raises NonIntegerCoefficient when any lambda_x is fractional.
    """
    ids = _check_abscissas(xs)
    coefficients = {}
    for x in ids:
        r = Fraction(1)
        for xm in ids:
            if xm != x:
                r *= Fraction(xm, xm - x)
        if r.denominator != 1:
            raise NonIntegerCoefficient(x, r)
        coefficients[x] = r.numerator
    return coefficients


def coefficients_for(xs: Iterable[int], mode: str = FIELD) -> Dict[int, int]:
    if mode == FIELD:
        return field_lagrange_coefficients(xs)
    if mode == INTEGER:
        return lagrange_coefficients(xs)
    raise ValueError(f"Unknown Lagrange mode {mode!r}, expected one of {MODES}")


def reconstruct_scalar(shares: Shares, mode: str = FIELD) -> int:
    """Recover f(0) from points (x, f(x))."""
    pairs = _as_pairs(shares)
    coeffs = coefficients_for([x for x, _ in pairs], mode)
    result = 0
    for x, y in pairs:
        m = coeffs[x]
        if m < 0:
            term = scalar_neg((-m) * y)
        else:
            term = m * y
        result = (result + term) % curve_order
    return result


def reconstruct_group(shares: Shares, mode: str = FIELD,
                      zero: Optional[GroupElement] = None) -> GroupElement:
    """
    Recover f(0)*P from points (x, f(x)*P).

    Args:
        shares: Mapping or pairs of abscissa to group element
        mode: "field" or "integer"
        zero: Identity of the group (Z1 or Z2), returned for an empty input
    """
    pairs = _as_pairs(shares)
    coeffs = coefficients_for([x for x, _ in pairs], mode)
    logger.debug(f"Interpolating {len(pairs)} group elements at 0 ({mode} coefficients)")
    if mode == INTEGER:
        terms = [scale_signed(point, coeffs[x]) for x, point in pairs]
    else:
        terms = [scale(point, coeffs[x]) for x, point in pairs]
    if not terms:
        if zero is None:
            raise ValueError("No shares to interpolate")
        return zero
    return add_points(terms[1:], terms[0])
