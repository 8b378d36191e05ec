import unittest

from utils.number_utils import parse_rate, round_half_up


class TestParseRate(unittest.TestCase):
    def test_strips_thousands_separators(self):
        self.assertEqual(parse_rate("1,234.56"), 1234.56)

    def test_blank_and_missing_are_zero(self):
        self.assertEqual(parse_rate(None), 0.0)
        self.assertEqual(parse_rate("  "), 0.0)

    def test_numbers_pass_through(self):
        self.assertEqual(parse_rate(42), 42.0)

    def test_garbage_raises(self):
        with self.assertRaises(ValueError):
            parse_rate("n/a")


class TestRoundHalfUp(unittest.TestCase):
    def test_half_rounds_away_from_zero(self):
        self.assertEqual(round_half_up(2.345, 2), 2.35)
        self.assertEqual(round_half_up(0.125, 2), 0.13)

    def test_inverted_cross_rate(self):
        self.assertEqual(round_half_up(1 / 0.0235, 2), 42.55)


if __name__ == "__main__":
    unittest.main()
