# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest

from deal_scout.config.settings import Settings, clamp_number


class TestSettings(unittest.TestCase):
    """Verify Settings constants."""

    def test_request_delay_is_positive_float(self) -> None:
        """REQUEST_DELAY must be a positive number."""
        self.assertIsInstance(Settings.REQUEST_DELAY, float)
        self.assertGreater(Settings.REQUEST_DELAY, 0)

    def test_max_retries_is_positive(self) -> None:
        """MAX_RETRIES must be >= 1."""
        self.assertGreaterEqual(Settings.MAX_RETRIES, 1)

    def test_limits(self) -> None:
        """Defaults sit inside their hard caps."""
        self.assertLessEqual(Settings.DEFAULT_COUNT, Settings.MAX_PRODUCTS)
        self.assertEqual(Settings.MAX_PRODUCTS, 500)
        self.assertEqual(Settings.MAX_PAGES, 20)
        self.assertLessEqual(
            Settings.DEFAULT_CONCURRENCY, Settings.MAX_CONCURRENCY
        )
        self.assertEqual(Settings.MAX_CONCURRENCY, 10)

    def test_selectors_file_exists(self) -> None:
        """The selector cascade file ships with the package."""
        self.assertTrue(Settings.SELECTORS_PATH.exists())

    def test_relay_endpoint(self) -> None:
        """The relay endpoint is an HTTPS URL."""
        self.assertTrue(Settings.RELAY_ENDPOINT.startswith("https://"))


class TestClampNumber(unittest.TestCase):
    """Coercion of user-supplied numbers."""

    def test_in_range(self) -> None:
        """Values inside the range pass through."""
        self.assertEqual(clamp_number(25, 1, 500), 25)
        self.assertEqual(clamp_number("7", 1, 10), 7)

    def test_bounds(self) -> None:
        """Values outside the range are clamped."""
        self.assertEqual(clamp_number(0, 1, 500), 1)
        self.assertEqual(clamp_number(-4, 1, 500), 1)
        self.assertEqual(clamp_number(10_000, 1, 500), 500)

    def test_unusable_values_fall_back_to_low(self) -> None:
        """Non-numeric and non-finite values give the lower bound."""
        for value in ("abc", None, "", float("nan"), float("inf")):
            with self.subTest(value=value):
                self.assertEqual(clamp_number(value, 1, 500), 1)

    def test_fractions_truncated(self) -> None:
        """Fractional input is truncated to an int."""
        self.assertEqual(clamp_number(3.9, 1, 10), 3)
        self.assertEqual(clamp_number("2.5", 1, 10), 2)


if __name__ == "__main__":
    unittest.main()
