"""Feldman commitments to secret polynomials."""

from functools import reduce
from typing import Sequence, Tuple

from bls_curve import G1, Z1, GroupElement, add_points, scale
from polynomial import evaluate_commitment
from threshold_errors import DegreeMismatch

# (a_0*G, a_1*G, ...) for a polynomial (a_0, a_1, ...)
PublicCommitment = Tuple[GroupElement, ...]


def commit(poly: Sequence[int]) -> PublicCommitment:
    """Map each coefficient to coefficient*G."""
    return tuple(scale(G1, coef) for coef in poly)


def sum_commitments(commitment_a: Sequence[GroupElement],
                    commitment_b: Sequence[GroupElement]) -> PublicCommitment:
    """Coefficient-wise group addition, the public side of sum_polynomials."""
    if len(commitment_a) != len(commitment_b):
        raise DegreeMismatch(len(commitment_a), len(commitment_b))
    return tuple(add_points((a, b), Z1) for a, b in zip(commitment_a, commitment_b))


def combine_commitments(commitments: Sequence[Sequence[GroupElement]]) -> PublicCommitment:
    """Sum the commitments of every dealer."""
    if not commitments:
        raise ValueError("No commitments to combine")
    return reduce(sum_commitments, commitments[1:], tuple(commitments[0]))


def public_key(commitment: Sequence[GroupElement]) -> GroupElement:
    """The group public key f(0)*G, read from the commitment."""
    return evaluate_commitment(commitment, 0)
