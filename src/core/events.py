"""
Shell Notifications
===================

Events pushed from the toolbox core to the presentation shell. A shell
registers a callable with ``SyncOrchestrator.add_listener`` and receives
these objects, in the order they were produced, on the orchestrator's
notification thread.
"""

from dataclasses import dataclass
from typing import Callable, Union

from src.core.catalog import AssetCatalog


@dataclass(frozen=True)
class CatalogUpdated:
    """A refresh replaced the catalog."""
    catalog: AssetCatalog


@dataclass(frozen=True)
class OperationSucceeded:
    """An upload, refresh or download finished."""
    operation: str
    summary: str


@dataclass(frozen=True)
class OperationFailed:
    """An upload, refresh or download failed.

    ``kind`` is the qualified error kind, e.g. ``"TransferError.HTTP_STATUS"``.
    """
    operation: str
    kind: str
    message: str


SyncEvent = Union[CatalogUpdated, OperationSucceeded, OperationFailed]
SyncListener = Callable[[SyncEvent], None]
