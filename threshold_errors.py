"""Error types raised by the threshold BLS modules."""

from dataclasses import dataclass


class ThresholdError(ValueError):
    """Base class for threshold scheme errors."""


class DegreeMismatch(ThresholdError):
    """Two polynomials or commitments have different coefficient counts."""

    def __init__(self, left: int, right: int):
        super().__init__(f"Cannot combine sequences of {left} and {right} coefficients")
        self.left = left
        self.right = right


class DuplicateOrZeroAbscissa(ThresholdError):
    """An interpolation set contains x=0 or a repeated x."""

    def __init__(self, x: int):
        super().__init__(f"Abscissa {x} is zero or appears more than once")
        self.x = x


class NonIntegerCoefficient(ThresholdError):
    """A Lagrange coefficient is not an integer for the chosen abscissas."""

    def __init__(self, x: int, value):
        super().__init__(f"Lagrange coefficient for x={x} is {value}, not an integer")
        self.x = x
        self.value = value


class MismatchedAbscissa(ThresholdError):
    """Shares from different dealers were combined for different participants."""


class InsufficientShares(ThresholdError):
    """Fewer valid shares than the threshold."""

    def __init__(self, have: int, need: int):
        super().__init__(f"Need at least {need} valid shares, got {have}")
        self.have = have
        self.need = need


class VerificationFailed(ThresholdError):
    """The aggregated signature does not verify against the public key."""


@dataclass(frozen=True)
class InvalidShare:
    """A signature share that failed the pairing check.

    Recorded rather than raised: the round continues while the threshold is met.
    """

    x: int
    reason: str = "pairing check failed"
