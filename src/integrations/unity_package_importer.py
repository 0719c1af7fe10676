"""
Unity Package Importer
======================

Package-import collaborator for ``.unitypackage`` assets. It drives the Unity
editor in batch mode::

    Unity -batchmode -projectPath <project> -importPackage <package> -quit

The editor refuses to open a project that is already open in another editor
instance, so this importer is meant for headless use (CI, the command-line
shell). Inside a running editor the host's own importer should be passed to
the materializer instead.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from src.core import config


class UnityPackageImporter:
    """
    Imports Unity packages by running the editor's command line.

    Attributes:
        unity_executable (str): Path or command name of the Unity editor.
        project_path (Path): Unity project root (the folder containing Assets/).
        timeout (float): Seconds to wait for the editor to finish.
    """

    def __init__(
        self,
        project_path: Union[str, Path],
        unity_executable: Optional[str] = None,
        timeout: float = config.PACKAGE_IMPORT_TIMEOUT_SECONDS
    ):
        """Initialize the importer.

        Args:
            project_path: Unity project root.
            unity_executable: Editor binary. If None, looks for the
                UNITY_EXECUTABLE env var.
            timeout: Seconds to wait for the import.
        """
        self.project_path = Path(project_path)
        self.unity_executable = unity_executable or os.environ.get(config.UNITY_EXECUTABLE_ENV, "")
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def is_available(self) -> bool:
        """Check that the editor binary is configured and can be found."""
        if not self.unity_executable:
            return False
        return Path(self.unity_executable).is_file() or shutil.which(self.unity_executable) is not None

    def build_command(self, package_path: Path) -> List[str]:
        return [
            self.unity_executable,
            "-batchmode",
            "-projectPath", str(self.project_path),
            "-importPackage", str(package_path),
            "-quit",
        ]

    def __call__(self, package_path: Path) -> None:
        """Import ``package_path`` into the project.

        Raises:
            RuntimeError: If the editor is unavailable, times out or exits
                with a non-zero status.
        """
        if not self.is_available():
            raise RuntimeError(
                f"Unity editor not found (set {config.UNITY_EXECUTABLE_ENV} or unity_executable)"
            )

        command = self.build_command(package_path)
        self.logger.info(f"Importing {Path(package_path).name} into {self.project_path}")
        self.logger.debug(f"Unity command: {command}")

        try:
            result = subprocess.run(command, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise RuntimeError(f"Unity import timed out after {self.timeout}s") from e
        except OSError as e:
            raise RuntimeError(f"Could not start Unity editor: {e}") from e

        if result.returncode != 0:
            output = (result.stderr or result.stdout or "").strip().splitlines()
            tail = output[-1] if output else "no output"
            raise RuntimeError(f"Unity exited with status {result.returncode}: {tail}")

        self.logger.info(f"Package {Path(package_path).name} imported")
