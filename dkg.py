"""
Shamir key shares and additive multi-dealer key generation.

Each dealer picks its own polynomial f_k of degree t-1, publishes the
commitment (a_0*G, a_1*G, ...) and privately sends f_k(x) to participant x.
Participant x checks every share against the dealer's commitment and adds
them up, obtaining h(x) for h = f_1 + ... + f_m. The group public key is
h(0)*G, taken from the sum of the commitments. As long as one dealer is
honest, nobody learns h(0).
"""

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import Dict, Iterable, List, Optional, Sequence

from bls_curve import G1, GroupElement, curve_order, encode_public_key, points_equal, scale
from commitment import PublicCommitment, combine_commitments, commit, public_key
from polynomial import Polynomial, evaluate_commitment, evaluate_polynomial, generate_polynomial
from threshold_config import ThresholdConfig
from threshold_errors import MismatchedAbscissa

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SecretShare:
    """A point (x, f(x)) held by participant x only."""

    x: int
    y: int


@dataclass(frozen=True)
class PublicShare:
    """A point (x, f(x)*G)."""

    x: int
    point: GroupElement


class Dealer:
    """A dealer contributing one secret polynomial to the key."""

    def __init__(self, index: int, threshold: int, polynomial: Optional[Sequence[int]] = None):
        if polynomial is None:
            polynomial = generate_polynomial(threshold)
        elif len(polynomial) != threshold:
            raise ValueError(
                f"Dealer {index}: polynomial has {len(polynomial)} coefficients, threshold is {threshold}"
            )
        self.index = index
        self.threshold = threshold
        self._polynomial: Polynomial = tuple(c % curve_order for c in polynomial)
        self.commitment: PublicCommitment = commit(self._polynomial)

    def share_for(self, x: int) -> SecretShare:
        if x <= 0:
            raise ValueError(f"Participant abscissa {x} must be positive")
        return SecretShare(x, evaluate_polynomial(self._polynomial, x))

    def shares_for(self, xs: Iterable[int]) -> Dict[int, SecretShare]:
        return {x: self.share_for(x) for x in xs}


def public_share(share: SecretShare) -> PublicShare:
    """(x, y*G) computed from the secret value."""
    return PublicShare(share.x, scale(G1, share.y))


def public_share_from_commitment(commitment: Sequence[GroupElement], x: int) -> PublicShare:
    """(x, y*G) computed from the public commitment alone."""
    return PublicShare(x, evaluate_commitment(commitment, x))


def verify_own_share(share: SecretShare, commitment: Sequence[GroupElement]) -> bool:
    """Check that a received share lies on the committed polynomial."""
    return points_equal(
        public_share(share).point,
        public_share_from_commitment(commitment, share.x).point,
    )


def combine_shares(shares: Sequence[SecretShare]) -> SecretShare:
    """Add up one participant's shares from every dealer."""
    if not shares:
        raise ValueError("No shares to combine")
    xs = {share.x for share in shares}
    if len(xs) != 1:
        raise MismatchedAbscissa(f"Cannot combine shares for different participants: {sorted(xs)}")
    return reduce(lambda a, b: SecretShare(a.x, (a.y + b.y) % curve_order), shares)


@dataclass(frozen=True)
class DKGResult:
    """Outcome of key generation: what each participant holds plus public data."""

    config: ThresholdConfig
    shares: Dict[int, SecretShare]
    commitment: PublicCommitment
    dealer_commitments: List[PublicCommitment] = field(default_factory=list)

    @property
    def public_key(self) -> GroupElement:
        return public_key(self.commitment)

    def public_share(self, x: int) -> PublicShare:
        return public_share_from_commitment(self.commitment, x)


def run_dkg(config: ThresholdConfig, dealers: Optional[Sequence[Dealer]] = None) -> DKGResult:
    """
    Run additive key generation for config.n participants.

    Args:
        config: Scheme parameters; config.dealers polynomials are generated when
            dealers is not given
        dealers: Explicit dealers, e.g. with fixed polynomials

    Returns:
        DKGResult with the combined share of every participant and the combined commitment
    """
    if dealers is None:
        dealers = [Dealer(k, config.t) for k in range(1, config.dealers + 1)]
    if not dealers:
        raise ValueError("At least one dealer is required")
    if len(dealers) != config.dealers:
        raise ValueError(f"Got {len(dealers)} dealers, config has {config.dealers}")
    for dealer in dealers:
        if dealer.threshold != config.t:
            raise ValueError(f"Dealer {dealer.index} uses threshold {dealer.threshold}, config has {config.t}")

    logger.info(f"Running key generation: {config}")

    combined = {}
    for x in config.participant_ids:
        received = [dealer.share_for(x) for dealer in dealers]
        for dealer, share in zip(dealers, received):
            if not verify_own_share(share, dealer.commitment):
                # Dealers are trusted; a mismatch here is reported but not acted on
                logger.warning(f"Participant {x}: share from dealer {dealer.index} does not match its commitment")
        combined[x] = combine_shares(received)

    dealer_commitments = [dealer.commitment for dealer in dealers]
    commitment = combine_commitments(dealer_commitments)
    result = DKGResult(config, combined, commitment, dealer_commitments)
    logger.info(f"Key generation complete, group public key {encode_public_key(result.public_key).hex()[:32]}...")
    return result
