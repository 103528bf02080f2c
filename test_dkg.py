import unittest
from itertools import combinations

from bls_curve import G1, points_equal, scale
from commitment import commit
from dkg import (
    Dealer,
    SecretShare,
    combine_shares,
    public_share,
    public_share_from_commitment,
    run_dkg,
    verify_own_share,
)
from lagrange import INTEGER, reconstruct_scalar
from threshold_config import ThresholdConfig
from threshold_errors import MismatchedAbscissa
from threshold_signing import verify_key_consistency


class TestDealer(unittest.TestCase):
    """Unit tests for a single dealer."""

    def test_fixed_polynomial_shares(self):
        dealer = Dealer(1, 3, polynomial=(5, 8, 3))
        shares = dealer.shares_for(range(1, 6))
        self.assertEqual([s.y for s in shares.values()], [16, 33, 56, 85, 120])
        self.assertEqual(shares[2], SecretShare(2, 33))

    def test_polynomial_length_must_match_threshold(self):
        with self.assertRaises(ValueError):
            Dealer(1, 3, polynomial=(5, 8))

    def test_share_for_rejects_zero(self):
        dealer = Dealer(1, 2)
        with self.assertRaises(ValueError):
            dealer.share_for(0)

    def test_verify_own_share(self):
        dealer = Dealer(1, 3, polynomial=(5, 8, 3))
        share = dealer.share_for(4)
        self.assertTrue(verify_own_share(share, dealer.commitment))
        self.assertFalse(verify_own_share(SecretShare(4, share.y + 1), dealer.commitment))

    def test_public_share_derivations_agree(self):
        dealer = Dealer(1, 3, polynomial=(19, 3, 9))
        for x in range(1, 6):
            direct = public_share(dealer.share_for(x))
            derived = public_share_from_commitment(dealer.commitment, x)
            self.assertEqual(direct.x, derived.x)
            self.assertTrue(points_equal(direct.point, derived.point))


class TestCombineShares(unittest.TestCase):

    def test_combine(self):
        combined = combine_shares([SecretShare(3, 56), SecretShare(3, 109)])
        self.assertEqual(combined, SecretShare(3, 165))

    def test_combine_different_participants(self):
        with self.assertRaises(MismatchedAbscissa):
            combine_shares([SecretShare(1, 16), SecretShare(2, 30)])

    def test_combine_nothing(self):
        with self.assertRaises(ValueError):
            combine_shares([])


class TestRunDKG(unittest.TestCase):
    """Two dealers, f(x) = 3x^2 + 8x + 5 and g(x) = 9x^2 + 3x + 19, 3 of 5."""

    @classmethod
    def setUpClass(cls):
        cls.config = ThresholdConfig(n=5, t=3, dealers=2)
        cls.dealers = [Dealer(1, 3, polynomial=(5, 8, 3)), Dealer(2, 3, polynomial=(19, 3, 9))]
        cls.result = run_dkg(cls.config, cls.dealers)

    def test_combined_shares(self):
        self.assertEqual(
            {x: s.y for x, s in self.result.shares.items()},
            {1: 47, 2: 94, 3: 165, 4: 260, 5: 379},
        )

    def test_any_three_shares_reconstruct(self):
        shares = {x: s.y for x, s in self.result.shares.items()}
        for subset in combinations(shares, 3):
            self.assertEqual(reconstruct_scalar({x: shares[x] for x in subset}), 24)

    def test_integer_mode_on_consecutive_shares(self):
        shares = {x: self.result.shares[x].y for x in (1, 2, 3)}
        self.assertEqual(reconstruct_scalar(shares, INTEGER), 24)

    def test_combined_commitment(self):
        expected = commit((24, 11, 12))
        for a, b in zip(self.result.commitment, expected):
            self.assertTrue(points_equal(a, b))
        self.assertEqual(len(self.result.dealer_commitments), 2)

    def test_public_key(self):
        self.assertTrue(points_equal(self.result.public_key, scale(G1, 24)))
        self.assertTrue(verify_key_consistency(24, self.result.public_key))
        self.assertFalse(verify_key_consistency(23, self.result.public_key))

    def test_public_shares_match_combined_shares(self):
        for x, share in self.result.shares.items():
            self.assertTrue(points_equal(self.result.public_share(x).point, public_share(share).point))

    def test_dealer_threshold_must_match_config(self):
        with self.assertRaises(ValueError):
            run_dkg(self.config, [Dealer(1, 2, polynomial=(1, 1)), Dealer(2, 2, polynomial=(2, 2))])

    def test_dealer_count_must_match_config(self):
        with self.assertRaises(ValueError) as ctx:
            run_dkg(self.config, [Dealer(1, 3, polynomial=(5, 8, 3))])
        self.assertIn("1 dealers", str(ctx.exception))


class TestRandomDKG(unittest.TestCase):

    def test_generated_dealers(self):
        config = ThresholdConfig(n=4, t=2, dealers=3)
        result = run_dkg(config)
        self.assertEqual(sorted(result.shares), [1, 2, 3, 4])
        self.assertEqual(len(result.dealer_commitments), 3)
        secret = reconstruct_scalar({x: result.shares[x].y for x in (2, 4)})
        self.assertTrue(verify_key_consistency(secret, result.public_key))


if __name__ == "__main__":
    unittest.main()
