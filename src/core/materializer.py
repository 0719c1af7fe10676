"""
Asset Materializer
==================

Turns downloaded bytes into files in the local workspace. The asset's name
decides what happens to it:

    PACKAGE_ARCHIVE  (.unitypackage)  -> handed to the package importer
    ZIP_ARCHIVE      (.zip)           -> extracted into <toolbox>/<stem>/
    PLAIN_FILE       (anything else)  -> written to <toolbox>/DownloadedAssets/<name>

Nothing is written to a final destination directly. Bytes go to a temporary
location first and are then moved or extracted into place, and every
temporary artifact is removed on the way out whether the step succeeded or
not. A failure therefore leaves either the previous content or nothing at
the destination, never a partial file.

Author: Quantum Asset Toolbox Project
"""

import logging
import os
import shutil
import tempfile
import threading
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Callable, Iterator, Optional, Union

from src.core import config
from src.core.catalog import is_safe_asset_name
from src.core.errors import MaterializationError, MaterializationErrorKind

# Imports a package file into the host project; raises on failure
PackageImporter = Callable[[Path], None]

# Hidden prefix for staging files, staging folders and backups. Must stay short:
# asset names close to the file name limit still need room for a suffix.
TEMP_PREFIX = ".qat-"


# ============================================================================
# CLASSIFICATION
# ============================================================================

class AssetKind(Enum):
    """How a downloaded asset must be placed into the workspace."""
    PACKAGE_ARCHIVE = "package_archive"
    ZIP_ARCHIVE = "zip_archive"
    PLAIN_FILE = "plain_file"


class MaterializationAction(Enum):
    """What was done with a downloaded asset."""
    IMPORTED = "imported"
    EXTRACTED = "extracted"
    WRITTEN_RAW = "written_raw"


@dataclass(frozen=True)
class MaterializationOutcome:
    """Result of a successful materialization."""
    destination_path: Path
    action: MaterializationAction


def classify_asset(name: str) -> AssetKind:
    """Classify an asset by its file extension (case-insensitive)."""
    lowered = name.lower()
    if lowered.endswith(config.PACKAGE_ARCHIVE_EXTENSIONS):
        return AssetKind.PACKAGE_ARCHIVE
    if lowered.endswith(config.ZIP_ARCHIVE_EXTENSIONS):
        return AssetKind.ZIP_ARCHIVE
    return AssetKind.PLAIN_FILE


def _archive_folder_name(name: str) -> str:
    """Archive name without its extension, e.g. "Rocks.zip" -> "Rocks"."""
    lowered = name.lower()
    for extension in config.ZIP_ARCHIVE_EXTENSIONS:
        if lowered.endswith(extension):
            return name[:-len(extension)]
    return os.path.splitext(name)[0]


# ============================================================================
# MATERIALIZER
# ============================================================================

class AssetMaterializer:
    """
    Places downloaded assets into a workspace.

    Attributes:
        workspace_root: Host project folder (e.g. a Unity project's Assets).
        toolbox_root: <workspace_root>/QuantumAssetToolbox
        downloads_dir: <toolbox_root>/DownloadedAssets
        package_importer: Collaborator used for package archives, or None.
        temp_dir: Parent for temporary download files (system default if None).
    """

    def __init__(
        self,
        workspace_root: Union[str, Path],
        package_importer: Optional[PackageImporter] = None,
        temp_dir: Optional[Union[str, Path]] = None
    ):
        self.workspace_root = Path(workspace_root)
        self.toolbox_root = self.workspace_root / config.TOOLBOX_DIR_NAME
        self.downloads_dir = self.toolbox_root / config.DOWNLOADED_ASSETS_DIR_NAME
        self.package_importer = package_importer
        self.temp_dir = Path(temp_dir) if temp_dir is not None else None
        self.logger = logging.getLogger(__name__)

    def materialize(self, name: str, data: bytes) -> MaterializationOutcome:
        """
        Place ``data`` for the asset called ``name`` into the workspace.

        Args:
            name: Asset name as advertised by the catalog.
            data: Downloaded payload.

        Returns:
            MaterializationOutcome describing where the asset ended up.

        Raises:
            MaterializationError: IO_FAILURE, ARCHIVE_CORRUPT or IMPORT_FAILED.
        """
        if not is_safe_asset_name(name):
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Refusing to write asset with unsafe name: {name!r}"
            )

        kind = classify_asset(name)
        self.logger.debug(f"Materializing {name} ({len(data)} bytes) as {kind.name}")

        if kind is AssetKind.PACKAGE_ARCHIVE:
            outcome = self._import_package(name, data)
        elif kind is AssetKind.ZIP_ARCHIVE:
            outcome = self._extract_zip(name, data)
        else:
            outcome = self._write_plain(name, data)

        self.logger.info(f"{name}: {outcome.action.value} -> {outcome.destination_path}")
        return outcome

    # ------------------------------------------------------------------------
    # STRATEGIES
    # ------------------------------------------------------------------------

    def _import_package(self, name: str, data: bytes) -> MaterializationOutcome:
        if self.package_importer is None:
            raise MaterializationError(
                MaterializationErrorKind.IMPORT_FAILED,
                f"No package importer configured, cannot import {name}"
            )

        with self._scratch_dir() as scratch:
            package_path = scratch / name
            self._write_bytes(package_path, data)
            try:
                self.package_importer(package_path)
            except Exception as e:
                raise MaterializationError(
                    MaterializationErrorKind.IMPORT_FAILED,
                    f"Package import failed for {name}: {e}"
                ) from e

        return MaterializationOutcome(self.workspace_root, MaterializationAction.IMPORTED)

    def _extract_zip(self, name: str, data: bytes) -> MaterializationOutcome:
        stem = _archive_folder_name(name)
        if not stem or not is_safe_asset_name(stem):
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Cannot derive an extraction folder from {name!r}"
            )
        if stem.startswith(".") or stem.lower() == config.DOWNLOADED_ASSETS_DIR_NAME.lower():
            # Reserved: plain-file folder, staging and backup folders
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Extraction folder for {name!r} would clash with a toolbox folder"
            )
        destination = self.toolbox_root / stem
        self._ensure_dir(self.toolbox_root)

        with self._scratch_dir() as scratch:
            archive_path = scratch / name
            self._write_bytes(archive_path, data)

            # Stage next to the destination so the final move is a rename
            staging = Path(self._make_temp_dir(self.toolbox_root, prefix=TEMP_PREFIX))
            try:
                self._extract_members(archive_path, staging, name)
                self._replace_dir(staging, destination)
            finally:
                if staging.exists():
                    shutil.rmtree(staging, ignore_errors=True)

        return MaterializationOutcome(destination, MaterializationAction.EXTRACTED)

    def _write_plain(self, name: str, data: bytes) -> MaterializationOutcome:
        destination = self.downloads_dir / name
        self._ensure_dir(self.downloads_dir)

        try:
            fd, temp_name = tempfile.mkstemp(dir=self.downloads_dir, prefix=TEMP_PREFIX, suffix=".part")
        except OSError as e:
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Cannot create temporary file in {self.downloads_dir}: {e}"
            ) from e

        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(temp_path, destination)
        except OSError as e:
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Failed to write {destination}: {e}"
            ) from e
        finally:
            if temp_path.exists():
                temp_path.unlink()

        return MaterializationOutcome(destination, MaterializationAction.WRITTEN_RAW)

    # ------------------------------------------------------------------------
    # HELPERS
    # ------------------------------------------------------------------------

    @contextmanager
    def _scratch_dir(self) -> Iterator[Path]:
        """Private temp directory, removed on exit even when the body raises."""
        try:
            if self.temp_dir is not None:
                self.temp_dir.mkdir(parents=True, exist_ok=True)
            scratch = tempfile.mkdtemp(prefix="qat-", dir=self.temp_dir)
        except OSError as e:
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Cannot create temporary directory: {e}"
            ) from e

        try:
            yield Path(scratch)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)

    @staticmethod
    def _make_temp_dir(parent: Path, prefix: str) -> str:
        try:
            return tempfile.mkdtemp(prefix=prefix, dir=parent)
        except OSError as e:
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Cannot create staging directory in {parent}: {e}"
            ) from e

    @staticmethod
    def _ensure_dir(path: Path):
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Cannot create directory {path}: {e}"
            ) from e

    @staticmethod
    def _write_bytes(path: Path, data: bytes):
        try:
            path.write_bytes(data)
        except OSError as e:
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Failed to write temporary file {path}: {e}"
            ) from e

    def _extract_members(self, archive_path: Path, target: Path, name: str):
        try:
            with zipfile.ZipFile(archive_path) as archive:
                for member in archive.namelist():
                    if not _is_safe_member(member):
                        raise MaterializationError(
                            MaterializationErrorKind.ARCHIVE_CORRUPT,
                            f"{name} contains an unsafe path: {member!r}"
                        )
                bad_member = archive.testzip()
                if bad_member is not None:
                    raise MaterializationError(
                        MaterializationErrorKind.ARCHIVE_CORRUPT,
                        f"{name} failed CRC check at {bad_member!r}"
                    )
                archive.extractall(target)
        except zipfile.BadZipFile as e:
            raise MaterializationError(
                MaterializationErrorKind.ARCHIVE_CORRUPT,
                f"{name} is not a valid zip archive: {e}"
            ) from e
        except OSError as e:
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Failed to extract {name}: {e}"
            ) from e

    @staticmethod
    def _replace_dir(source: Path, destination: Path):
        """Move ``source`` to ``destination``, replacing any previous content."""
        backup = None
        try:
            if destination.exists():
                backup = destination.with_name(f"{TEMP_PREFIX}old-{os.getpid()}-{threading.get_ident()}")
                if backup.exists():
                    shutil.rmtree(backup)
                os.replace(destination, backup)
            os.replace(source, destination)
        except OSError as e:
            # Put the previous content back if it was moved aside
            if backup is not None and backup.exists() and not destination.exists():
                os.replace(backup, destination)
            raise MaterializationError(
                MaterializationErrorKind.IO_FAILURE,
                f"Failed to move extracted files into {destination}: {e}"
            ) from e

        if backup is not None:
            shutil.rmtree(backup, ignore_errors=True)


def _is_safe_member(member: str) -> bool:
    """Reject zip members that would land outside the extraction folder."""
    normalized = member.replace("\\", "/")
    if normalized.startswith("/") or (len(normalized) > 1 and normalized[1] == ":"):
        return False
    return ".." not in PurePosixPath(normalized).parts
