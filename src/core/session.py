"""
Session Management Module
=========================

This module defines the settings structure for the Quantum Asset Toolbox and
the Session that wires the core components together from those settings:

    TransferClient + CatalogRepository + AssetMaterializer -> SyncOrchestrator

Package archives are imported through UnityPackageImporter.

Settings are persisted between runs by ``src.utils.config_manager``.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from src.core import config
from src.core.catalog import CatalogRepository
from src.core.materializer import AssetMaterializer
from src.core.sync import SyncOrchestrator
from src.core.transfer_client import TransferClient
from src.integrations.unity_package_importer import UnityPackageImporter

# ============================================================================
# CONFIGURATION DATACLASSES
# ============================================================================

@dataclass
class ToolboxSettings:
    """
    User-adjustable toolbox settings.

    Attributes:
        upload_url: Endpoint receiving multipart uploads
        fetch_url: Endpoint returning the JSON asset catalog
        workspace_root: Folder downloads are placed under (a Unity project's
                        Assets folder when used with Unity)
        timeout_seconds: Network timeout for every transfer
        max_parallel_transfers: Transfers allowed to run at the same time
        unity_executable: Unity editor binary used to import packages
                          (empty = UNITY_EXECUTABLE env var)
        unity_project_path: Unity project root (empty = derived from workspace_root)
    """
    upload_url: str = config.DEFAULT_UPLOAD_URL
    fetch_url: str = config.DEFAULT_FETCH_URL
    workspace_root: str = config.DEFAULT_WORKSPACE_ROOT
    timeout_seconds: float = config.NETWORK_TIMEOUT_SECONDS
    max_parallel_transfers: int = config.MAX_PARALLEL_TRANSFERS
    unity_executable: str = ""
    unity_project_path: str = ""

    def resolved_project_path(self) -> Path:
        """Unity project root: explicit setting, or the parent of an Assets workspace."""
        if self.unity_project_path:
            return Path(self.unity_project_path)
        workspace = Path(self.workspace_root).resolve()
        if workspace.name == "Assets":
            return workspace.parent
        return workspace

# ============================================================================
# SESSION CLASS
# ============================================================================

class Session:
    """
    Owns one set of core components built from ToolboxSettings.

    Attributes:
        settings: Settings the session was built from
        transfer: HTTP client
        repository: Catalog repository
        materializer: Workspace writer
        orchestrator: Command interface for the shell
    """

    def __init__(self, settings: Optional[ToolboxSettings] = None):
        self.logger = logging.getLogger(__name__)
        self.settings = settings or ToolboxSettings()

        self.transfer = TransferClient(timeout=self.settings.timeout_seconds)
        self.repository = CatalogRepository()

        importer = UnityPackageImporter(
            project_path=self.settings.resolved_project_path(),
            unity_executable=self.settings.unity_executable or None
        )
        if not importer.is_available():
            self.logger.info("Unity editor not configured; .unitypackage assets cannot be imported")

        self.materializer = AssetMaterializer(
            workspace_root=self.settings.workspace_root,
            package_importer=importer
        )

        self.orchestrator = SyncOrchestrator(
            transfer=self.transfer,
            repository=self.repository,
            materializer=self.materializer,
            upload_url=self.settings.upload_url,
            fetch_url=self.settings.fetch_url,
            max_workers=self.settings.max_parallel_transfers
        )

        self.logger.debug(
            f"Session initialized - fetch: {self.settings.fetch_url}, "
            f"workspace: {self.settings.workspace_root}"
        )

    def close(self):
        """Shut down the orchestrator and release network resources."""
        self.logger.info("Closing session")
        self.orchestrator.shutdown()
        self.transfer.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
