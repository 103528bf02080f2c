"""Secret polynomials over the BLS12-381 scalar field."""

import secrets
from typing import Optional, Sequence, Tuple

from bls_curve import Z1, GroupElement, add_points, curve_order, scale
from threshold_errors import DegreeMismatch

# Coefficients a_0..a_{t-1}; a_0 is the secret
Polynomial = Tuple[int, ...]


def generate_polynomial(threshold: int, secret: Optional[int] = None) -> Polynomial:
    """
    Generate a random polynomial of degree threshold-1.

    Args:
        threshold: Number of points needed to reconstruct (degree + 1)
        secret: Constant term; random when omitted

    Returns:
        Tuple of coefficients with the secret first
    """
    if threshold < 1:
        raise ValueError(f"Threshold {threshold} must be at least 1")
    if secret is None:
        secret = secrets.randbelow(curve_order)
    poly = [secret % curve_order]  # Constant term is the secret
    for _ in range(threshold - 1):
        poly.append(secrets.randbelow(curve_order))
    return tuple(poly)


def evaluate_polynomial(poly: Sequence[int], x: int) -> int:
    """Evaluate polynomial at point x using curve_order modular arithmetic."""
    if x < 0:
        raise ValueError(f"Abscissa {x} must be non-negative")
    result = 0
    for i, coef in enumerate(poly):
        term = (coef * pow(x, i, curve_order)) % curve_order
        result = (result + term) % curve_order
    return result


def sum_polynomials(poly_a: Sequence[int], poly_b: Sequence[int]) -> Polynomial:
    """Coefficient-wise sum of two polynomials with the same degree bound."""
    if len(poly_a) != len(poly_b):
        raise DegreeMismatch(len(poly_a), len(poly_b))
    return tuple((a + b) % curve_order for a, b in zip(poly_a, poly_b))


def evaluate_commitment(commitment: Sequence[GroupElement], x: int) -> GroupElement:
    """
    Evaluate a public commitment at x directly in G1.

    For commitment (a_0*G, a_1*G, ...) this is sum((a_i*G) * x^i) == f(x)*G,
    so a share can be checked without knowing the coefficients.
    """
    if x < 0:
        raise ValueError(f"Abscissa {x} must be non-negative")
    return add_points(
        (scale(c, pow(x, i, curve_order)) for i, c in enumerate(commitment)),
        Z1,
    )
