"""
Sync Orchestrator
=================

Coordinates the transfer client, the catalog repository and the asset
materializer into the operations the presentation shell can trigger:

- Upload(path):   read file -> POST -> on success, Refresh
- Refresh():      GET catalog -> replace catalog -> CatalogUpdated
- Download(asset): GET asset -> materialize into the workspace

Each command returns immediately with a ``concurrent.futures.Future``; the
work runs on a daemon transfer pool so downloads, uploads and refreshes never
wait on each other. Results reach the shell twice: through the future (value
or typed exception) and as events delivered to registered listeners on a
single notification thread.

The ``perform_*`` methods are the synchronous forms of the same operations
and raise the typed errors from ``src.core.errors`` directly.

Author: Quantum Asset Toolbox Project
"""

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from src.core import config
from src.core.catalog import AssetCatalog, AssetInfo, CatalogRepository
from src.core.errors import LocalFileError, ToolboxError
from src.core.events import (
    CatalogUpdated,
    OperationFailed,
    OperationSucceeded,
    SyncEvent,
    SyncListener,
)
from src.core.materializer import AssetMaterializer, MaterializationOutcome
from src.core.transfer_client import TransferClient
from src.utils.background_worker import BackgroundWorker
from src.utils.concurrency import DaemonThreadPoolExecutor

OPERATION_UPLOAD = "upload"
OPERATION_REFRESH = "refresh"
OPERATION_DOWNLOAD = "download"


@dataclass(frozen=True)
class UploadReport:
    """Result of a successful upload."""
    file_name: str
    size_bytes: int
    refreshed: bool  # False if the follow-up refresh failed


class SyncOrchestrator:
    """
    Command interface between the presentation shell and the toolbox core.

    Attributes:
        transfer: HTTP client used for all network I/O
        repository: Owner of the current catalog
        materializer: Places downloaded assets into the workspace
        upload_url: Endpoint receiving multipart uploads
        fetch_url: Endpoint returning the JSON catalog
    """

    def __init__(
        self,
        transfer: TransferClient,
        repository: CatalogRepository,
        materializer: AssetMaterializer,
        upload_url: str = config.DEFAULT_UPLOAD_URL,
        fetch_url: str = config.DEFAULT_FETCH_URL,
        max_workers: int = config.MAX_PARALLEL_TRANSFERS
    ):
        self.transfer = transfer
        self.repository = repository
        self.materializer = materializer
        self.upload_url = upload_url
        self.fetch_url = fetch_url
        self.logger = logging.getLogger(__name__)

        self._executor = DaemonThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="TransferWorker")
        self._notifier = BackgroundWorker(name="SyncNotifier")

        self._listeners: List[SyncListener] = []
        self._listeners_lock = threading.Lock()
        self._search_query = ""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False

    # ------------------------------------------------------------------------
    # LISTENERS
    # ------------------------------------------------------------------------

    def add_listener(self, listener: SyncListener) -> None:
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: SyncListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def flush_notifications(self, timeout: Optional[float] = None) -> bool:
        """Wait until every event emitted so far has been delivered."""
        return self._notifier.flush(timeout)

    def _emit(self, event: SyncEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            self._notifier.submit(listener, event)

    def _report_failure(self, operation: str, error: Exception) -> None:
        if isinstance(error, ToolboxError):
            kind, message = error.qualified_kind, error.message
            self.logger.error(f"{operation} failed: {error}")
        else:
            kind, message = type(error).__name__, str(error)
            self.logger.error(f"{operation} failed unexpectedly: {kind}: {message}", exc_info=True)
        self._emit(OperationFailed(operation=operation, kind=kind, message=message))

    # ------------------------------------------------------------------------
    # SEARCH
    # ------------------------------------------------------------------------

    @property
    def search_query(self) -> str:
        return self._search_query

    def set_search_query(self, query: str) -> None:
        self._search_query = query or ""

    def current_filtered_view(self) -> List[AssetInfo]:
        """Assets of the current catalog matching the active search query."""
        return self.repository.search(self._search_query)

    @property
    def catalog(self) -> AssetCatalog:
        return self.repository.current

    # ------------------------------------------------------------------------
    # ASYNC COMMANDS
    # ------------------------------------------------------------------------

    def upload(self, path: Union[str, Path]) -> Future:
        """Start an upload; the future resolves to an UploadReport."""
        return self._executor.submit(self.perform_upload, path)

    def refresh_catalog(self) -> Future:
        """Start a catalog refresh; the future resolves to the new AssetCatalog."""
        return self._executor.submit(self.perform_refresh)

    def download(self, asset: AssetInfo) -> Future:
        """Start a download; the future resolves to a MaterializationOutcome."""
        return self._executor.submit(self.perform_download, asset)

    # ------------------------------------------------------------------------
    # SYNCHRONOUS OPERATIONS
    # ------------------------------------------------------------------------

    def perform_refresh(self) -> AssetCatalog:
        """
        Fetch the catalog and replace the stored one.

        Raises:
            TransferError: The fetch failed; the previous catalog is kept.
            ParseError: The payload was malformed; the previous catalog is kept.
        """
        self.logger.info("Refreshing asset catalog")
        try:
            raw = self.transfer.fetch(self.fetch_url)
            catalog = self.repository.refresh(raw)
        except Exception as e:
            self._report_failure(OPERATION_REFRESH, e)
            raise

        self._emit(CatalogUpdated(catalog=catalog))
        self._emit(OperationSucceeded(
            operation=OPERATION_REFRESH,
            summary=f"Catalog refreshed: {len(catalog)} assets"
        ))
        return catalog

    def perform_upload(self, path: Union[str, Path]) -> UploadReport:
        """
        Upload a local file, then refresh the catalog.

        A refresh failure after a successful upload is reported on its own
        and does not fail the upload.

        Raises:
            LocalFileError: The file could not be read.
            TransferError: The upload failed; no refresh is attempted.
        """
        path = Path(path)
        self.logger.info(f"Uploading {path}")
        try:
            try:
                data = path.read_bytes()
            except OSError as e:
                raise LocalFileError(f"Cannot read {path}: {e}") from e
            self.transfer.upload(self.upload_url, data, path.name)
        except Exception as e:
            self._report_failure(OPERATION_UPLOAD, e)
            raise

        self._emit(OperationSucceeded(
            operation=OPERATION_UPLOAD,
            summary=f"Uploaded {path.name} ({len(data)} bytes)"
        ))

        try:
            self.perform_refresh()
            refreshed = True
        except Exception:
            # Already reported as a refresh failure
            refreshed = False

        return UploadReport(file_name=path.name, size_bytes=len(data), refreshed=refreshed)

    def perform_download(self, asset: AssetInfo) -> MaterializationOutcome:
        """
        Download an asset and place it into the workspace.

        Only the given AssetInfo is used, never the live catalog, so a refresh
        running at the same time cannot affect the download.

        Raises:
            TransferError: The download failed; nothing was written.
            MaterializationError: The payload could not be placed.
        """
        self.logger.info(f"Downloading {asset.name}")
        try:
            data = self.transfer.download(asset.url)
            outcome = self.materializer.materialize(asset.name, data)
        except Exception as e:
            self._report_failure(OPERATION_DOWNLOAD, e)
            raise

        self._emit(OperationSucceeded(
            operation=OPERATION_DOWNLOAD,
            summary=f"{asset.name} {outcome.action.value} to {outcome.destination_path}"
        ))
        return outcome

    # ------------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------------

    def shutdown(self, wait: bool = True) -> None:
        """Stop the transfer pool, deliver pending events and stop the notifier."""
        self._executor.shutdown(wait=wait)
        self._notifier.shutdown()
