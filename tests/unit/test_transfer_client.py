"""
Unit Tests - TransferClient
===========================

Tests for src/core/transfer_client.py. HTTP is mocked at the
requests.Session level.
"""

import unittest
from unittest.mock import MagicMock, PropertyMock

import requests
from urllib3.exceptions import ReadTimeoutError

from src.core import config
from src.core.errors import TransferError, TransferErrorKind
from src.core.transfer_client import TransferClient


def _response(status_code=200, content=b"", reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    response.reason = reason
    return response


class TransferClientTestCase(unittest.TestCase):

    def setUp(self):
        self.session = MagicMock()
        self.client = TransferClient(timeout=12, session=self.session)


class TestFetchAndDownload(TransferClientTestCase):

    def test_fetch_returns_body(self):
        self.session.request.return_value = _response(content=b'{"assets": []}')
        self.assertEqual(self.client.fetch("https://host/assets.php"), b'{"assets": []}')
        self.session.request.assert_called_once_with("GET", "https://host/assets.php", timeout=12)

    def test_download_returns_raw_bytes(self):
        payload = bytes(range(256))
        self.session.request.return_value = _response(content=payload)
        self.assertEqual(self.client.download("https://cdn/file.bin"), payload)

    def test_user_agent_is_set(self):
        self.session.headers.update.assert_called_with({"User-Agent": config.USER_AGENT})

    def test_http_error_status(self):
        for code in (404, 500, 503):
            with self.subTest(code=code):
                self.session.request.return_value = _response(status_code=code, reason="Nope")
                with self.assertRaises(TransferError) as ctx:
                    self.client.fetch("https://host/assets.php")
                self.assertEqual(ctx.exception.kind, TransferErrorKind.HTTP_STATUS)
                self.assertEqual(ctx.exception.status_code, code)
                self.assertIn(str(code), ctx.exception.message)

    def test_redirect_status_is_not_success(self):
        self.session.request.return_value = _response(status_code=304, reason="Not Modified")
        with self.assertRaises(TransferError) as ctx:
            self.client.download("https://cdn/a.png")
        self.assertEqual(ctx.exception.status_code, 304)

    def test_timeout(self):
        self.session.request.side_effect = requests.exceptions.ReadTimeout("slow")
        with self.assertRaises(TransferError) as ctx:
            self.client.fetch("https://host/assets.php")
        self.assertEqual(ctx.exception.kind, TransferErrorKind.TIMEOUT)
        self.assertIsNone(ctx.exception.status_code)

    def test_connect_timeout_is_timeout(self):
        self.session.request.side_effect = requests.exceptions.ConnectTimeout("no route")
        with self.assertRaises(TransferError) as ctx:
            self.client.fetch("https://host/assets.php")
        self.assertEqual(ctx.exception.kind, TransferErrorKind.TIMEOUT)

    def test_body_read_timeout_is_timeout(self):
        # requests re-raises a stalled body read as ConnectionError(ReadTimeoutError)
        stalled = requests.exceptions.ConnectionError(ReadTimeoutError(None, "https://cdn/a.png", "Read timed out."))
        self.session.request.side_effect = stalled
        with self.assertRaises(TransferError) as ctx:
            self.client.download("https://cdn/a.png")
        self.assertEqual(ctx.exception.kind, TransferErrorKind.TIMEOUT)
        self.assertIs(ctx.exception.__cause__, stalled)

    def test_lazy_body_read_timeout_is_timeout(self):
        response = MagicMock(status_code=200, reason="OK")
        type(response).content = PropertyMock(
            side_effect=requests.exceptions.ConnectionError(ReadTimeoutError(None, "u", "Read timed out."))
        )
        self.session.request.return_value = response
        with self.assertRaises(TransferError) as ctx:
            self.client.fetch("https://host/assets.php")
        self.assertEqual(ctx.exception.kind, TransferErrorKind.TIMEOUT)

    def test_connection_failure(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(TransferError) as ctx:
            self.client.download("https://cdn/a.png")
        self.assertEqual(ctx.exception.kind, TransferErrorKind.NETWORK_FAILURE)
        self.assertIsInstance(ctx.exception.__cause__, requests.exceptions.ConnectionError)

    def test_truncated_body_is_network_failure(self):
        self.session.request.side_effect = requests.exceptions.ChunkedEncodingError("incomplete read")
        with self.assertRaises(TransferError) as ctx:
            self.client.download("https://cdn/a.png")
        self.assertEqual(ctx.exception.kind, TransferErrorKind.NETWORK_FAILURE)

    def test_error_message_masks_url_secrets(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(TransferError) as ctx:
            self.client.download("https://cdn/a.png?token=abc123secret")
        self.assertNotIn("abc123secret", ctx.exception.message)


class TestUpload(TransferClientTestCase):

    def test_upload_posts_multipart_file_field(self):
        self.session.request.return_value = _response(status_code=201)
        self.client.upload("https://host/upload.php", b"data", "rock.png")

        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("POST", "https://host/upload.php"))
        self.assertEqual(kwargs["timeout"], 12)
        field_name, (file_name, body, content_type) = next(iter(kwargs["files"].items()))
        self.assertEqual(field_name, "file")
        self.assertEqual(file_name, "rock.png")
        self.assertEqual(body, b"data")
        self.assertEqual(content_type, "application/octet-stream")

    def test_upload_server_error(self):
        self.session.request.return_value = _response(status_code=500, reason="Internal Server Error")
        with self.assertRaises(TransferError) as ctx:
            self.client.upload("https://host/upload.php", b"data", "rock.png")
        self.assertEqual(ctx.exception.kind, TransferErrorKind.HTTP_STATUS)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.qualified_kind, "TransferError.HTTP_STATUS")


class TestLifecycle(unittest.TestCase):

    def test_context_manager_closes_session(self):
        session = MagicMock()
        with TransferClient(session=session) as client:
            self.assertEqual(client.timeout, config.NETWORK_TIMEOUT_SECONDS)
        session.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
