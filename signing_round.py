"""
One signing round, from collected signature shares to a verified signature.

    collecting_shares -> validating -> insufficient_shares
                                    -> aggregating -> aggregated -> verification_failed
                                                                 -> verified

The round is a pure function of its inputs. Nothing is retried: a caller that
gets insufficient_shares may solicit more shares and run a new round.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from bls_curve import GroupElement, encode_signature
from commitment import public_key
from threshold_config import ThresholdConfig
from threshold_errors import InsufficientShares, InvalidShare, ThresholdError, VerificationFailed
from threshold_signing import (
    SignatureShare,
    aggregate,
    message_point,
    partition_shares,
    partition_shares_concurrently,
    verify_signature,
)

logger = logging.getLogger(__name__)


class RoundState(str, Enum):
    COLLECTING_SHARES = "collecting_shares"
    VALIDATING = "validating"
    INSUFFICIENT_SHARES = "insufficient_shares"
    AGGREGATING = "aggregating"
    AGGREGATED = "aggregated"
    VERIFICATION_FAILED = "verification_failed"
    VERIFIED = "verified"


TERMINAL_STATES = frozenset({
    RoundState.VERIFIED,
    RoundState.VERIFICATION_FAILED,
    RoundState.INSUFFICIENT_SHARES,
})


@dataclass(frozen=True)
class RoundResult:
    """Terminal outcome of a signing round."""

    state: RoundState
    transitions: Tuple[RoundState, ...]
    message: bytes
    valid_shares: Tuple[SignatureShare, ...] = ()
    rejected: Tuple[InvalidShare, ...] = ()
    signature: Optional[GroupElement] = None
    error: Optional[ThresholdError] = None

    @property
    def ok(self) -> bool:
        return self.state is RoundState.VERIFIED

    def raise_for_error(self) -> None:
        """Raise the recorded error, if the round did not verify."""
        if self.error is not None:
            raise self.error

    @property
    def signature_bytes(self) -> Optional[bytes]:
        if self.signature is None:
            return None
        return encode_signature(self.signature)


def run_signing_round(config: ThresholdConfig, commitment: Sequence[GroupElement], message: bytes,
                      shares: Sequence[SignatureShare]) -> RoundResult:
    """
    Validate, aggregate and verify the signature shares collected for a message.

    Args:
        config: Threshold, hash-to-curve DST and Lagrange mode
        commitment: Combined public commitment of the key polynomial
        message: The signed message
        shares: Signature shares as received from participants

    Returns:
        RoundResult in one of the terminal states
    """
    m_point = message_point(message, config.dst_bytes)
    valid, rejected = partition_shares(shares, commitment, m_point)
    return _finish(config, commitment, message, m_point, valid, rejected)


async def run_signing_round_async(config: ThresholdConfig, commitment: Sequence[GroupElement], message: bytes,
                                  shares: Sequence[SignatureShare]) -> RoundResult:
    """Same as run_signing_round, validating all shares concurrently."""
    m_point = message_point(message, config.dst_bytes)
    valid, rejected = await partition_shares_concurrently(shares, commitment, m_point)
    return _finish(config, commitment, message, m_point, valid, rejected)


def _finish(config: ThresholdConfig, commitment: Sequence[GroupElement], message: bytes,
            m_point: GroupElement, valid: List[SignatureShare], rejected: List[InvalidShare]) -> RoundResult:
    path = [RoundState.COLLECTING_SHARES, RoundState.VALIDATING]
    total = len(valid) + len(rejected)

    if rejected:
        logger.warning(
            f"Validated {len(valid)} of {total} shares, rejected participants {[r.x for r in rejected]}"
        )

    if len(valid) < config.t:
        path.append(RoundState.INSUFFICIENT_SHARES)
        error = InsufficientShares(len(valid), config.t)
        logger.warning(f"Signing round stopped: {error}")
        return RoundResult(
            RoundState.INSUFFICIENT_SHARES, tuple(path), message,
            tuple(valid), tuple(rejected), None, error,
        )

    path.append(RoundState.AGGREGATING)
    signature = aggregate(valid, config.t, config.lagrange_mode)
    path.append(RoundState.AGGREGATED)

    if not verify_signature(public_key(commitment), m_point, signature):
        path.append(RoundState.VERIFICATION_FAILED)
        error = VerificationFailed("Aggregated signature does not verify against the group public key")
        logger.warning(f"Signing round failed: {error}")
        return RoundResult(
            RoundState.VERIFICATION_FAILED, tuple(path), message,
            tuple(valid), tuple(rejected), signature, error,
        )

    path.append(RoundState.VERIFIED)
    logger.info(
        f"Signing round verified with {len(valid)} shares: {encode_signature(signature).hex()[:32]}..."
    )
    return RoundResult(
        RoundState.VERIFIED, tuple(path), message,
        tuple(valid), tuple(rejected), signature, None,
    )
