# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest
from pathlib import Path
from unittest.mock import patch

from dealscout.config.settings import Settings, _env_float, _env_int
from dealscout.scrapers.registry import PLATFORMS


class TestSettings(unittest.TestCase):
    """Verify Settings constants."""

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_max_retries_is_positive(self) -> None:
        """MAX_RETRIES must be >= 1."""
        self.assertGreaterEqual(Settings.MAX_RETRIES, 1)

    def test_cache_ttls_positive(self) -> None:
        self.assertGreater(Settings.SEARCH_CACHE_TTL, 0)
        self.assertGreater(Settings.ANALYSIS_CACHE_TTL, 0)

    def test_browser_mode_is_known(self) -> None:
        self.assertIn(Settings.BROWSER_MODE.lower(), ("shared", "isolated"))

    def test_worker_timeout_exceeds_navigation(self) -> None:
        """The worker deadline leaves room for navigation plus settling."""
        self.assertGreater(
            Settings.WORKER_TIMEOUT,
            Settings.NAVIGATION_TIMEOUT + Settings.SETTLE_DELAY,
        )

    def test_quick_platforms_registered(self) -> None:
        for platform in Settings.QUICK_PLATFORMS:
            with self.subTest(platform=platform):
                self.assertIn(platform, PLATFORMS)

    def test_default_headers_have_user_agent(self) -> None:
        """DEFAULT_HEADERS must include a User-Agent key."""
        self.assertIn("User-Agent", Settings.DEFAULT_HEADERS)
        self.assertEqual(
            Settings.DEFAULT_HEADERS["User-Agent"], Settings.USER_AGENT
        )

    def test_logs_dir_is_path(self) -> None:
        """LOGS_DIR must be a Path named 'logs'."""
        self.assertIsInstance(Settings.LOGS_DIR, Path)
        self.assertEqual(Settings.LOGS_DIR.name, "logs")


class TestEnvOverrides(unittest.TestCase):
    """Environment variable parsing helpers."""

    @patch.dict("os.environ", {"DEALSCOUT_TEST_VALUE": "2.5"})
    def test_env_float_override(self) -> None:
        self.assertEqual(_env_float("DEALSCOUT_TEST_VALUE", 1.0), 2.5)

    @patch.dict("os.environ", {"DEALSCOUT_TEST_VALUE": "42"})
    def test_env_int_override(self) -> None:
        self.assertEqual(_env_int("DEALSCOUT_TEST_VALUE", 1), 42)

    @patch.dict("os.environ", {"DEALSCOUT_TEST_VALUE": ""})
    def test_empty_value_uses_default(self) -> None:
        self.assertEqual(_env_int("DEALSCOUT_TEST_VALUE", 7), 7)


if __name__ == "__main__":
    unittest.main()
