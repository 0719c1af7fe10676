"""
Transfer Client
===============

Thin HTTP layer used by the toolbox for every network operation. It knows
nothing about catalogs or assets: it sends a request, returns the response
body, and converts transport failures into ``TransferError``.

No retries happen here; a failed transfer is reported once to the caller.

Usage:
------
    >>> with TransferClient(timeout=30) as client:
    ...     body = client.fetch("https://quantumleapstudios.org/assets.php")
    ...     client.upload("https://quantumleapstudios.org/upload.php", data, "rock.png")

Author: Quantum Asset Toolbox Project
"""

import logging
import time
from typing import Optional

import requests
from urllib3.exceptions import ReadTimeoutError

from src.core import config
from src.core.errors import TransferError, TransferErrorKind
from src.utils.logger import log_api_request, log_api_response, mask_string


class TransferClient:
    """
    HTTP client for catalog fetches, asset downloads and uploads.

    Attributes:
        timeout (float): Seconds to wait for the server before giving up.
        session (requests.Session): Shared connection pool; safe to use from
            the orchestrator's worker threads for independent requests.
    """

    def __init__(self, timeout: float = config.NETWORK_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": config.USER_AGENT})

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self):
        self.session.close()

    # ------------------------------------------------------------------------
    # PUBLIC OPERATIONS
    # ------------------------------------------------------------------------

    def upload(self, url: str, file_bytes: bytes, file_name: str) -> None:
        """
        Upload a file as a multipart form POST.

        Args:
            url: Upload endpoint.
            file_bytes: File content.
            file_name: File name reported to the server.

        Raises:
            TransferError: On network failure, timeout or non-2xx status.
        """
        files = {config.UPLOAD_FORM_FIELD: (file_name, file_bytes, "application/octet-stream")}
        self.logger.debug(f"Uploading {file_name} ({len(file_bytes)} bytes)")
        self._request("POST", url, files=files)

    def fetch(self, url: str) -> bytes:
        """
        GET ``url`` and return the full response body.

        Raises:
            TransferError: On network failure, timeout or non-2xx status.
        """
        return self._request("GET", url).content

    def download(self, url: str) -> bytes:
        """Same contract as ``fetch``; used for asset payloads."""
        return self._request("GET", url).content

    # ------------------------------------------------------------------------
    # REQUEST HANDLING
    # ------------------------------------------------------------------------

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        log_api_request(self.logger, method, url)
        safe_url = mask_string(url)
        start_time = time.time()

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            body = response.content
        except requests.exceptions.Timeout as e:
            raise TransferError(
                TransferErrorKind.TIMEOUT,
                f"{method} {safe_url} timed out after {self.timeout}s"
            ) from e
        except requests.exceptions.RequestException as e:
            if _is_read_timeout(e):
                # Body stalled after the headers arrived
                raise TransferError(
                    TransferErrorKind.TIMEOUT,
                    f"{method} {safe_url} timed out after {self.timeout}s while reading the body"
                ) from e
            # ConnectionError, ChunkedEncodingError (truncated body), invalid URL, ...
            raise TransferError(
                TransferErrorKind.NETWORK_FAILURE,
                mask_string(f"{method} {url} failed: {e}")
            ) from e

        elapsed = time.time() - start_time
        log_api_response(self.logger, response.status_code,
                         content_length=len(body), elapsed_time=elapsed)

        if not 200 <= response.status_code < 300:
            raise TransferError(
                TransferErrorKind.HTTP_STATUS,
                f"HTTP {response.status_code}: {response.reason} ({method} {safe_url})",
                status_code=response.status_code
            )

        return response


def _is_read_timeout(error: requests.exceptions.RequestException) -> bool:
    """True for a read timeout that requests re-raised as ConnectionError."""
    if not isinstance(error, requests.exceptions.ConnectionError):
        return False
    if isinstance(error.__context__, ReadTimeoutError):
        return True
    return any(isinstance(arg, ReadTimeoutError) for arg in error.args)
