"""
Unit tests for application configuration.
"""

import unittest
from src.core import config

class TestConfig(unittest.TestCase):
    """Test cases for global configuration constants."""

    def test_default_endpoints(self):
        """Both endpoints live on the same HTTPS host."""
        self.assertTrue(config.DEFAULT_UPLOAD_URL.startswith("https://"))
        self.assertTrue(config.DEFAULT_FETCH_URL.endswith("/assets.php"))
        self.assertTrue(config.DEFAULT_UPLOAD_URL.endswith("/upload.php"))

    def test_archive_extensions_are_lowercase(self):
        """Classification lowercases names before matching, so extensions must be lowercase."""
        for ext in config.PACKAGE_ARCHIVE_EXTENSIONS + config.ZIP_ARCHIVE_EXTENSIONS:
            self.assertEqual(ext, ext.lower())
            self.assertTrue(ext.startswith("."))

    def test_network_limits(self):
        self.assertGreater(config.NETWORK_TIMEOUT_SECONDS, 0)
        self.assertGreater(config.MAX_PARALLEL_TRANSFERS, 1)

    def test_user_agent_carries_version(self):
        self.assertIn(config.APP_VERSION, config.USER_AGENT)

if __name__ == "__main__":
    unittest.main()
