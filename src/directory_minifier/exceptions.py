"""Errors raised by directory-minifier."""

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

if TYPE_CHECKING:  # pragma: no cover
    from directory_minifier.pipeline import MinifyReport


class MinifierError(Exception):
    """Base exception for directory-minifier."""

    pass


class ConfigurationError(MinifierError):
    """Raised before any I/O when a run is misconfigured."""

    pass


class ScanError(MinifierError):
    """Raised when the directory tree could not be fully scanned.

    Carries the files that were found before the failure.
    """

    def __init__(self, error: Exception, files: Optional[List[Path]] = None):
        self.error = error
        self.files = list(files or [])
        super().__init__(f"Failed to scan directory: {error}")


class TransformError(MinifierError):
    """Raised when a single file could not be transformed."""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"Failed to transform {path}: {message}")


class FingerprintPersistError(MinifierError):
    """Raised when the fingerprint store cannot be written at the end of a run."""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = Path(path)
        self.message = message
        self.report: Optional["MinifyReport"] = None
        super().__init__(f"Failed to save checksum file {path}: {message}")
