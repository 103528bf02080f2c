import asyncio
import unittest
from unittest.mock import patch

from bls_curve import scale
from dkg import Dealer, run_dkg
from signing_round import TERMINAL_STATES, RoundState, run_signing_round, run_signing_round_async
from threshold_config import ThresholdConfig
from threshold_errors import InsufficientShares, InvalidShare, NonIntegerCoefficient, VerificationFailed
from threshold_signing import SignatureShare, message_point, sign_share

MESSAGE = b"rate change: -25 bps"


class TestSigningRound(unittest.TestCase):
    """2-of-3 key from a single dealer with h(x) = 4x + 10."""

    @classmethod
    def setUpClass(cls):
        cls.config = ThresholdConfig(n=3, t=2, dealers=1)
        cls.dkg = run_dkg(cls.config, [Dealer(1, 2, polynomial=(10, 4))])
        m = message_point(MESSAGE, cls.config.dst_bytes)
        cls.honest = [sign_share(cls.dkg.shares[x], m) for x in (1, 2, 3)]
        cls.forged = SignatureShare(2, scale(m, 5))

    def test_verified_round(self):
        result = run_signing_round(self.config, self.dkg.commitment, MESSAGE,
                                   [self.honest[0], self.forged, self.honest[2]])
        self.assertTrue(result.ok)
        self.assertEqual(result.state, RoundState.VERIFIED)
        self.assertEqual(result.transitions, (
            RoundState.COLLECTING_SHARES,
            RoundState.VALIDATING,
            RoundState.AGGREGATING,
            RoundState.AGGREGATED,
            RoundState.VERIFIED,
        ))
        self.assertEqual([s.x for s in result.valid_shares], [1, 3])
        self.assertEqual([r.x for r in result.rejected], [2])
        self.assertEqual(len(result.signature_bytes), 96)
        self.assertIsNone(result.error)
        result.raise_for_error()

    def test_insufficient_shares(self):
        result = run_signing_round(self.config, self.dkg.commitment, MESSAGE,
                                   [self.honest[0], self.forged])
        self.assertEqual(result.state, RoundState.INSUFFICIENT_SHARES)
        self.assertIn(result.state, TERMINAL_STATES)
        self.assertEqual(result.transitions[-1], RoundState.INSUFFICIENT_SHARES)
        self.assertNotIn(RoundState.AGGREGATING, result.transitions)
        self.assertIsNone(result.signature)
        self.assertIsNone(result.signature_bytes)
        self.assertFalse(result.ok)
        with self.assertRaises(InsufficientShares):
            result.raise_for_error()

    @patch('signing_round.verify_signature', return_value=False)
    def test_verification_failed(self, mock_verify):
        result = run_signing_round(self.config, self.dkg.commitment, MESSAGE, self.honest[:2])
        self.assertEqual(result.state, RoundState.VERIFICATION_FAILED)
        self.assertIsNotNone(result.signature)
        self.assertIsInstance(result.error, VerificationFailed)
        self.assertEqual(mock_verify.call_count, 1)

    def test_async_round(self):
        result = asyncio.run(run_signing_round_async(
            self.config, self.dkg.commitment, MESSAGE, [self.forged, self.honest[2], self.honest[0]],
        ))
        self.assertEqual(result.state, RoundState.VERIFIED)
        self.assertEqual([s.x for s in result.valid_shares], [3, 1])
        self.assertEqual(result.message, MESSAGE)


class TestMisbehavingSigners(unittest.TestCase):
    """3-of-5 key from two dealers; signers replay shares or send bad abscissas."""

    @classmethod
    def setUpClass(cls):
        cls.config = ThresholdConfig(n=5, t=3, dealers=2)
        dealers = [Dealer(1, 3, polynomial=(5, 8, 3)), Dealer(2, 3, polynomial=(19, 3, 9))]
        cls.dkg = run_dkg(cls.config, dealers)
        cls.m = message_point(MESSAGE, cls.config.dst_bytes)
        cls.honest = {x: sign_share(cls.dkg.shares[x], cls.m) for x in (1, 2, 3)}

    def test_replayed_share_is_rejected(self):
        h = self.honest
        result = run_signing_round(self.config, self.dkg.commitment, MESSAGE, [h[1], h[2], h[3], h[1]])
        self.assertEqual(result.state, RoundState.VERIFIED)
        self.assertEqual([s.x for s in result.valid_shares], [1, 2, 3])
        self.assertEqual(result.rejected, (InvalidShare(1, "duplicate abscissa"),))

    def test_replay_does_not_count_toward_threshold(self):
        h = self.honest
        result = run_signing_round(self.config, self.dkg.commitment, MESSAGE, [h[1], h[2], h[1]])
        self.assertEqual(result.state, RoundState.INSUFFICIENT_SHARES)
        self.assertEqual([s.x for s in result.valid_shares], [1, 2])
        self.assertIsInstance(result.error, InsufficientShares)

    def test_non_positive_abscissa_is_rejected(self):
        h = self.honest
        shares = [h[1], h[2], h[3], SignatureShare(-1, self.m), SignatureShare(0, self.m)]
        result = asyncio.run(run_signing_round_async(self.config, self.dkg.commitment, MESSAGE, shares))
        self.assertEqual(result.state, RoundState.VERIFIED)
        self.assertEqual([r.x for r in result.rejected], [-1, 0])
        self.assertEqual({r.reason for r in result.rejected}, {"abscissa must be positive"})


class TestIntegerModeRound(unittest.TestCase):
    """3-of-4 key, f(x) = 3x^2 + 8x + 5, with exact integer Lagrange coefficients."""

    @classmethod
    def setUpClass(cls):
        cls.config = ThresholdConfig(n=4, t=3, dealers=1, lagrange_mode="integer")
        cls.dkg = run_dkg(cls.config, [Dealer(1, 3, polynomial=(5, 8, 3))])
        m = message_point(MESSAGE, cls.config.dst_bytes)
        cls.honest = {x: sign_share(cls.dkg.shares[x], m) for x in (1, 2, 3, 4)}

    def test_consecutive_abscissas_verify(self):
        shares = [self.honest[x] for x in (1, 2, 3)]
        result = run_signing_round(self.config, self.dkg.commitment, MESSAGE, shares)
        self.assertEqual(result.state, RoundState.VERIFIED)

    def test_fractional_coefficients_raise(self):
        shares = [self.honest[x] for x in (1, 2, 4)]
        with self.assertRaises(NonIntegerCoefficient):
            run_signing_round(self.config, self.dkg.commitment, MESSAGE, shares)

if __name__ == "__main__":
    unittest.main()
