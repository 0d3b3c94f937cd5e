"""Error taxonomy for the combine pipeline.

``CombineError`` subclasses are "known" failures whose message is shown to
the user as-is. Anything else reaching the CLI is reported as unknown.
"""

from __future__ import annotations

from pathlib import Path


class CombineError(Exception):
    """Base class for failures with a user-facing message."""


class ConfigurationError(CombineError):
    """Invalid arguments or source location."""


class SourceNotFoundError(ConfigurationError):
    """Source directory does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Source directory not found: {path}")
        self.path = path


class SourceNotDirectoryError(ConfigurationError):
    """Source path exists but is not a directory."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Source path is not a directory: {path}")
        self.path = path


class CombineIOError(CombineError):
    """Filesystem failure while reading inputs or writing the output."""


class SourceReadError(CombineIOError):
    def __init__(self, path: Path, reason: object) -> None:
        super().__init__(f"Failed to read {path}: {reason}")
        self.path = path


class OutputWriteError(CombineIOError):
    def __init__(self, path: Path, reason: object) -> None:
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = path


__all__ = [
    "CombineError",
    "ConfigurationError",
    "SourceNotFoundError",
    "SourceNotDirectoryError",
    "CombineIOError",
    "SourceReadError",
    "OutputWriteError",
]
