"""
Threshold BLS signing over BLS12-381.

Private key = h(0), public key = h(0)*G (G1), signature = h(0)*M (G2) where
M is the message hashed to G2. Verification uses

    e(public key, M) = e(h(0)*G, M) = e(G, h(0)*M) = e(G, signature)

Participant x never uses h(0): it sends the signature share (x, h(x)*M).
The coordinator checks each share against the public commitment of h,

    e(h(x)*G, M) == e(G, share)

where h(x)*G is obtained by evaluating the commitment at x, drops the ones
that fail, and interpolates h(0)*M from any t that remain.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from bls_curve import (
    DST, G1, Z2, GroupElement, hash_to_curve, pair, points_equal, scale,
)
from dkg import SecretShare
from lagrange import FIELD, reconstruct_group
from polynomial import evaluate_commitment
from threshold_errors import InsufficientShares, InvalidShare

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignatureShare:
    """A point (x, h(x)*M) sent by participant x."""

    x: int
    point: GroupElement


def message_point(message: bytes, dst: bytes = DST) -> GroupElement:
    """Hash a message to the G2 point M that gets signed."""
    return hash_to_curve(message, dst)


def sign_share(share: SecretShare, m_point: GroupElement) -> SignatureShare:
    """Participant side: multiply M by the participant's share of the key."""
    return SignatureShare(share.x, scale(m_point, share.y))


def verify_share(x: int, signature_point: GroupElement,
                 commitment: Sequence[GroupElement], m_point: GroupElement) -> bool:
    """Check e(h(x)*G, M) == e(G, signature_point) with h(x)*G from the commitment."""
    y_g = evaluate_commitment(commitment, x)
    return pair(y_g, m_point) == pair(G1, signature_point)


def partition_shares(shares: Sequence[SignatureShare], commitment: Sequence[GroupElement],
                     m_point: GroupElement) -> Tuple[List[SignatureShare], List[InvalidShare]]:
    """
    Split shares into (valid, rejected).

    Shares with x <= 0 and repeats of an x already seen are rejected before
    the pairing check; the first share for each x is the one checked. Valid
    shares keep their original order.
    """
    candidates, rejected = _screen(shares)
    results = [verify_share(s.x, s.point, commitment, m_point) for s in candidates]
    return _split(candidates, results, rejected)


async def partition_shares_concurrently(
        shares: Sequence[SignatureShare], commitment: Sequence[GroupElement],
        m_point: GroupElement) -> Tuple[List[SignatureShare], List[InvalidShare]]:
    """Like partition_shares, checking every share in its own task and waiting for all of them."""
    candidates, rejected = _screen(shares)
    tasks = [
        asyncio.to_thread(verify_share, s.x, s.point, commitment, m_point)
        for s in candidates
    ]
    results = await asyncio.gather(*tasks)
    return _split(candidates, results, rejected)


def _screen(shares: Sequence[SignatureShare]) -> Tuple[List[SignatureShare], List[InvalidShare]]:
    seen = set()
    candidates, rejected = [], []
    for share in shares:
        if share.x <= 0:
            logger.debug(f"Participant {share.x}: abscissa is not positive")
            rejected.append(InvalidShare(share.x, "abscissa must be positive"))
        elif share.x in seen:
            logger.debug(f"Participant {share.x}: repeated signature share")
            rejected.append(InvalidShare(share.x, "duplicate abscissa"))
        else:
            seen.add(share.x)
            candidates.append(share)
    return candidates, rejected


def _split(shares: Sequence[SignatureShare], results: Sequence[bool],
           rejected: List[InvalidShare]) -> Tuple[List[SignatureShare], List[InvalidShare]]:
    valid = []
    for share, ok in zip(shares, results):
        if ok:
            valid.append(share)
        else:
            logger.debug(f"Participant {share.x}: signature share failed the pairing check")
            rejected.append(InvalidShare(share.x))
    return valid, rejected


def filter_valid(shares: Sequence[SignatureShare], commitment: Sequence[GroupElement],
                 m_point: GroupElement) -> List[SignatureShare]:
    """Keep the shares that pass verify_share, in their original order."""
    valid, _ = partition_shares(shares, commitment, m_point)
    return valid


async def filter_valid_concurrently(shares: Sequence[SignatureShare], commitment: Sequence[GroupElement],
                                    m_point: GroupElement) -> List[SignatureShare]:
    valid, _ = await partition_shares_concurrently(shares, commitment, m_point)
    return valid


def aggregate(valid_shares: Sequence[SignatureShare], threshold: Optional[int] = None,
              mode: str = FIELD) -> GroupElement:
    """
    Interpolate the signature h(0)*M from validated shares.

    Args:
        valid_shares: Shares that already passed verify_share
        threshold: When given, fewer shares raise InsufficientShares
        mode: Lagrange coefficient mode, "field" or "integer"

    Returns:
        The aggregated signature as a G2 point
    """
    if threshold is not None and len(valid_shares) < threshold:
        raise InsufficientShares(len(valid_shares), threshold)
    if not valid_shares:
        raise InsufficientShares(0, threshold or 1)
    return reconstruct_group([(s.x, s.point) for s in valid_shares], mode, zero=Z2)


def verify_signature(public_key: GroupElement, m_point: GroupElement, signature: GroupElement) -> bool:
    """Check e(public key, M) == e(G, signature)."""
    return pair(public_key, m_point) == pair(G1, signature)


def verify_key_consistency(private_key: int, public_key: GroupElement) -> bool:
    """Diagnostic check that private_key*G equals public_key."""
    return points_equal(scale(G1, private_key), public_key)
