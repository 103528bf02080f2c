"""
BLS12-381 primitives used by the threshold scheme.

Public keys and commitments live in G1, messages and signatures in G2
(the "minimal public key" layout). Everything here delegates to py_ecc;
this module only fixes the conventions the rest of the code relies on:

1. Scalars are plain ints reduced modulo ``curve_order``
2. Points are py_ecc optimized (projective) tuples; compare them with ``points_equal``
3. ``pair(g1_point, g2_point)`` takes its arguments in G1, G2 order
"""

import hashlib
from typing import Any, Iterable, Tuple

from py_ecc.optimized_bls12_381.optimized_curve import (
    G1, G2, Z1, Z2, add, multiply, neg, eq, curve_order,
)
from py_ecc.optimized_bls12_381.optimized_pairing import pairing
from py_ecc.bls.hash_to_curve import hash_to_G2
from py_ecc.bls.g2_primitives import (
    G1_to_pubkey, G2_to_signature, pubkey_to_G1, signature_to_G2,
)

# Projective point as returned by py_ecc.optimized_bls12_381
GroupElement = Tuple[Any, Any, Any]

# Domain Separation Tag for BLS signatures (G2Basic compatible)
DST = b"BLS_SIG_BLS12381G2_XMD:SHA-256_SSWU_RO_NUL_"


def scalar(value: int) -> int:
    """Reduce an integer into the scalar field."""
    return value % curve_order


def scalar_neg(value: int) -> int:
    """Additive inverse in the scalar field."""
    return (-value) % curve_order


def scale(point: GroupElement, k: int) -> GroupElement:
    """Multiply a point by a non-negative scalar."""
    if k < 0:
        raise ValueError(f"Scalar {k} must be non-negative; use scale_signed")
    return multiply(point, k % curve_order)


def scale_signed(point: GroupElement, k: int) -> GroupElement:
    """Multiply a point by a signed integer: -k is the inverse of the k multiple."""
    if k < 0:
        return neg(multiply(point, (-k) % curve_order))
    return multiply(point, k % curve_order)


def add_points(points: Iterable[GroupElement], zero: GroupElement) -> GroupElement:
    """Sum points, starting from the identity of their group."""
    total = zero
    for point in points:
        total = add(total, point)
    return total


def points_equal(a: GroupElement, b: GroupElement) -> bool:
    return eq(a, b)


def pair(g1_point: GroupElement, g2_point: GroupElement):
    """Evaluate e(P, Q) for P in G1 and Q in G2."""
    return pairing(g2_point, g1_point)


def hash_to_curve(message: bytes, dst: bytes = DST) -> GroupElement:
    """Deterministically map a message to a G2 point."""
    return hash_to_G2(message, dst, hashlib.sha256)


def encode_public_key(point: GroupElement) -> bytes:
    """48-byte compressed G1 encoding."""
    return bytes(G1_to_pubkey(point))


def decode_public_key(data: bytes) -> GroupElement:
    return pubkey_to_G1(data)


def encode_signature(point: GroupElement) -> bytes:
    """96-byte compressed G2 encoding."""
    return bytes(G2_to_signature(point))


def decode_signature(data: bytes) -> GroupElement:
    return signature_to_G2(data)


__all__ = [
    "G1", "G2", "Z1", "Z2", "DST", "GroupElement", "curve_order",
    "scalar", "scalar_neg", "scale", "scale_signed", "add_points", "points_equal",
    "pair", "hash_to_curve",
    "encode_public_key", "decode_public_key", "encode_signature", "decode_signature",
]
