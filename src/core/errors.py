"""
Error Taxonomy
==============

Every failure the toolbox core can report is one of the exceptions below.
Each carries a ``kind`` (an Enum member) and a human-readable ``message`` so
the presentation shell can tell failures apart without parsing text.

    ToolboxError
    ├── TransferError         network I/O (NETWORK_FAILURE, HTTP_STATUS, TIMEOUT)
    ├── ParseError            catalog payload (MALFORMED)
    ├── MaterializationError  local placement (IO_FAILURE, ARCHIVE_CORRUPT, IMPORT_FAILED)
    └── LocalFileError        upload source (UNREADABLE)
"""

from enum import Enum
from typing import Optional


class TransferErrorKind(Enum):
    """Transport failure categories."""
    NETWORK_FAILURE = "network_failure"
    HTTP_STATUS = "http_status"
    TIMEOUT = "timeout"


class ParseErrorKind(Enum):
    """Catalog payload failure categories."""
    MALFORMED = "malformed"


class MaterializationErrorKind(Enum):
    """Local placement failure categories."""
    IO_FAILURE = "io_failure"
    ARCHIVE_CORRUPT = "archive_corrupt"
    IMPORT_FAILED = "import_failed"


class LocalFileErrorKind(Enum):
    """Local source file failure categories."""
    UNREADABLE = "unreadable"


class ToolboxError(Exception):
    """Base exception for all Quantum Asset Toolbox errors."""

    def __init__(self, kind: Enum, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def qualified_kind(self) -> str:
        """Kind label that is unique across error classes, e.g. 'TransferError.TIMEOUT'."""
        return f"{type(self).__name__}.{self.kind.name}"

    def __str__(self) -> str:
        return f"{self.qualified_kind}: {self.message}"


class TransferError(ToolboxError):
    """Raised when an HTTP transfer fails."""

    def __init__(self, kind: TransferErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(kind, message)
        self.status_code = status_code


class ParseError(ToolboxError):
    """Raised when a catalog payload does not have the expected shape."""

    def __init__(self, message: str, kind: ParseErrorKind = ParseErrorKind.MALFORMED):
        super().__init__(kind, message)


class MaterializationError(ToolboxError):
    """Raised when downloaded bytes cannot be placed into the workspace."""

    def __init__(self, kind: MaterializationErrorKind, message: str):
        super().__init__(kind, message)


class LocalFileError(ToolboxError):
    """Raised when a local file selected for upload cannot be read."""

    def __init__(self, message: str, kind: LocalFileErrorKind = LocalFileErrorKind.UNREADABLE):
        super().__init__(kind, message)
