import math
import random
import unittest
from decimal import Decimal
from fractions import Fraction

from rate_vault.conversion import (
    U64_MAX,
    U128_MAX,
    checked_add_u64,
    checked_sub_u64,
    effective_rate,
    input_amount,
    output_amount,
    scale_factor,
)
from rate_vault.errors import ArithmeticOverflow, DivisionByZero


class TestOutputAmount(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures"""
        self.rng = random.Random(20240601)

    def test_matches_exact_floor(self):
        """Test floor(input * rate / 10^d) against exact rational arithmetic"""
        for _ in range(500):
            rate = self.rng.randint(1, U64_MAX)
            amount = self.rng.choice([self.rng.randint(0, 10**9), self.rng.randint(0, U64_MAX)])
            decimals = self.rng.randint(0, 19)

            product = amount * rate
            expected = math.floor(Fraction(product, 10**decimals))

            with self.subTest(rate=rate, amount=amount, decimals=decimals):
                if product > U128_MAX or expected > U64_MAX:
                    with self.assertRaises(ArithmeticOverflow):
                        output_amount(rate, amount, decimals)
                else:
                    self.assertEqual(output_amount(rate, amount, decimals), expected)

    def test_scenario_values(self):
        """Test integral and fractional multipliers"""
        self.assertEqual(output_amount(200, 1000, 2), 2000)
        self.assertEqual(output_amount(3, 1, 0), 3)
        self.assertEqual(output_amount(25, 3, 1), 7)   # 7.5 rounds down

    def test_zero_and_precision_floor(self):
        """Test zero input and inputs below 10^d / rate"""
        self.assertEqual(output_amount(1, 0, 0), 0)
        self.assertEqual(output_amount(U64_MAX, 0, 19), 0)

        # 10^2 / 3 = 33.3, so 33 units of input issue nothing
        self.assertEqual(output_amount(3, 33, 2), 0)
        self.assertEqual(output_amount(3, 34, 2), 1)

    def test_overflow_guard(self):
        """Test u64 max inputs fail instead of wrapping"""
        with self.assertRaises(ArithmeticOverflow):
            output_amount(U64_MAX, U64_MAX, 0)

        # Same product scaled back into range is fine
        self.assertEqual(output_amount(U64_MAX, U64_MAX, 20), (U64_MAX * U64_MAX) // 10**20)

    def test_decimals_beyond_u128_scale(self):
        """Test a scale divisor that cannot be represented"""
        self.assertEqual(scale_factor(38), 10**38)
        with self.assertRaises(ArithmeticOverflow):
            output_amount(1, 1, 39)

    def test_rejects_values_outside_domain(self):
        """Test negative, float and bool arguments"""
        with self.assertRaises(ValueError):
            output_amount(1, -1, 0)
        with self.assertRaises(ValueError):
            output_amount(1.5, 1, 0)
        with self.assertRaises(ValueError):
            output_amount(True, 1, 0)
        with self.assertRaises(ValueError):
            output_amount(1, U64_MAX + 1, 0)
        with self.assertRaises(ValueError):
            output_amount(1, 1, 256)


class TestInputAmount(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures"""
        self.rng = random.Random(77)

    def test_matches_exact_ceil(self):
        """Test ceil(output * 10^d / rate) against exact rational arithmetic"""
        for _ in range(500):
            rate = self.rng.randint(1, U64_MAX)
            amount = self.rng.choice([self.rng.randint(0, 10**9), self.rng.randint(0, U64_MAX)])
            decimals = self.rng.randint(0, 19)

            numerator = amount * 10**decimals
            expected = math.ceil(Fraction(numerator, rate))

            with self.subTest(rate=rate, amount=amount, decimals=decimals):
                if numerator > U128_MAX or expected > U64_MAX:
                    with self.assertRaises(ArithmeticOverflow):
                        input_amount(rate, amount, decimals)
                else:
                    self.assertEqual(input_amount(rate, amount, decimals), expected)

    def test_scenario_values(self):
        """Test ceil rounding favours the reserve"""
        self.assertEqual(input_amount(200, 2000, 2), 1000)
        self.assertEqual(input_amount(3, 1, 0), 1)
        self.assertEqual(input_amount(3, 4, 0), 2)

    def test_zero_rate(self):
        """Test division guard on the rate"""
        with self.assertRaises(DivisionByZero):
            input_amount(0, 10, 0)

    def test_overflow_guard(self):
        """Test results that do not narrow back to u64"""
        with self.assertRaises(ArithmeticOverflow):
            input_amount(1, U64_MAX, 1)
        with self.assertRaises(ArithmeticOverflow):
            input_amount(1, U64_MAX, 20)


class TestConversionProperties(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures"""
        self.rng = random.Random(4242)

    def test_round_trip_never_inflates(self):
        """Test mint-then-redeem never extracts more than was deposited"""
        for _ in range(1000):
            rate = self.rng.randint(1, 10**6)
            decimals = self.rng.randint(0, 6)
            amount = self.rng.randint(0, 10**12)

            issued = output_amount(rate, amount, decimals)
            with self.subTest(rate=rate, decimals=decimals, amount=amount):
                self.assertLessEqual(input_amount(rate, issued, decimals), amount)

    def test_monotonic_in_amount(self):
        """Test both conversions are non-decreasing in the amount"""
        for _ in range(50):
            rate = self.rng.randint(1, 10**9)
            decimals = self.rng.randint(0, 9)
            amounts = sorted(self.rng.randint(0, 10**9) for _ in range(20))

            outputs = [output_amount(rate, a, decimals) for a in amounts]
            inputs = [input_amount(rate, a, decimals) for a in amounts]

            self.assertEqual(outputs, sorted(outputs))
            self.assertEqual(inputs, sorted(inputs))

    def test_integral_rates_round_trip_exactly(self):
        """Test exact round trips when the multiplier is a whole number"""
        for amount in (0, 1, 7, 1000, 123_456_789):
            issued = output_amount(500, amount, 2)
            self.assertEqual(issued, amount * 5)
            self.assertEqual(input_amount(500, issued, 2), amount)


class TestHelpers(unittest.TestCase):

    def test_checked_arithmetic(self):
        """Test u64 add and subtract guards"""
        self.assertEqual(checked_add_u64(U64_MAX - 1, 1), U64_MAX)
        with self.assertRaises(ArithmeticOverflow):
            checked_add_u64(U64_MAX, 1)

        self.assertEqual(checked_sub_u64(5, 5), 0)
        with self.assertRaises(ArithmeticOverflow):
            checked_sub_u64(4, 5)

    def test_effective_rate(self):
        """Test decimal multiplier rendering"""
        self.assertEqual(effective_rate(200, 2), Decimal("2"))
        self.assertEqual(str(effective_rate(25, 1)), "2.5")
        self.assertEqual(effective_rate(1, 6), Decimal("0.000001"))


if __name__ == '__main__':
    unittest.main()
