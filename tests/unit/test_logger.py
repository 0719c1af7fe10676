"""
Unit Tests - Logging and Masking
================================

Tests for src/utils/logger.py
"""

import logging
import tempfile
import unittest
from pathlib import Path

from src.utils.logger import (
    LOG_FILE_NAME,
    SensitiveDataFilter,
    mask_sensitive_data,
    mask_string,
    setup_logging,
)


class TestMasking(unittest.TestCase):

    def test_bearer_token(self):
        self.assertEqual(mask_string("Authorization: Bearer abc.def"), "Authorization: Bearer ***")

    def test_signed_url_query_parameters(self):
        masked = mask_string("GET https://cdn/a.zip?sig=s3cr3t&expires=99&token=t0k")
        self.assertNotIn("s3cr3t", masked)
        self.assertNotIn("t0k", masked)
        self.assertIn("expires=99", masked)

    def test_long_token_keeps_last_four(self):
        token = "a" * 36 + "WXYZ"
        self.assertEqual(mask_string(f"key {token}"), "key ***WXYZ")

    def test_ordinary_text_is_unchanged(self):
        text = "Downloading rocks.zip from https://cdn/rocks.zip"
        self.assertEqual(mask_string(text), text)

    def test_dictionary_keys(self):
        masked = mask_sensitive_data({
            "fetch_url": "https://host/assets.php",
            "password": "hunter2",
            "api_token": "abcdef123",
            "nested": {"secret": "x"},
        })
        self.assertEqual(masked["fetch_url"], "https://host/assets.php")
        self.assertEqual(masked["password"], "***")
        self.assertEqual(masked["api_token"], "***f123")
        self.assertEqual(masked["nested"], {"secret": "***"})


class TestSensitiveDataFilter(unittest.TestCase):

    def test_filter_masks_message_and_args(self):
        record = logging.LogRecord(
            "test", logging.INFO, __file__, 1,
            "url %s", ("https://cdn/a.png?token=abc",), None
        )
        self.assertTrue(SensitiveDataFilter().filter(record))
        self.assertNotIn("abc", record.getMessage())


class TestSetupLogging(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = logging.getLogger()
        self.saved_handlers = list(self.root.handlers)
        self.saved_level = self.root.level

    def tearDown(self):
        for handler in list(self.root.handlers):
            self.root.removeHandler(handler)
            handler.close()
        for handler in self.saved_handlers:
            self.root.addHandler(handler)
        self.root.setLevel(self.saved_level)
        self._tmp.cleanup()

    def test_writes_masked_log_file(self):
        log_file = setup_logging(log_dir=Path(self._tmp.name))
        logging.getLogger("toolbox.test").info("fetch https://host/a.php?key=topsecret")
        for handler in self.root.handlers:
            handler.flush()

        self.assertEqual(log_file.name, LOG_FILE_NAME)
        content = log_file.read_text(encoding="utf-8")
        self.assertIn("https://host/a.php?key=***", content)
        self.assertNotIn("topsecret", content)

    def test_reinitialization_does_not_duplicate_handlers(self):
        setup_logging(log_dir=Path(self._tmp.name))
        setup_logging(log_dir=Path(self._tmp.name))
        self.assertEqual(len(self.root.handlers), 2)


if __name__ == "__main__":
    unittest.main()
