"""Source validation and recursive file discovery."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import SourceNotDirectoryError, SourceNotFoundError, SourceReadError
from .types import FileEntry


def validate_source_directory(path: Path) -> Path:
    """Return ``path`` when it is an existing directory, raise otherwise."""
    if not path.exists():
        raise SourceNotFoundError(path)
    if not path.is_dir():
        raise SourceNotDirectoryError(path)
    return path


def _is_regular_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file()
    except OSError:
        return False


def _is_walkable_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def walk_files(root: Path) -> list[FileEntry]:
    """Recursively list regular files under ``root`` in traversal order.

    Symlinked directories are listed but never descended, which keeps link
    cycles from recursing forever. An unreadable directory aborts the walk
    with ``SourceReadError``.
    """
    found: list[FileEntry] = []

    def scan(directory: Path, parent: str) -> None:
        try:
            with os.scandir(directory) as entries:
                children = list(entries)
        except OSError as exc:
            raise SourceReadError(directory, exc) from exc

        for child in children:
            if _is_walkable_dir(child):
                child_parent = f"{parent}/{child.name}" if parent else child.name
                scan(Path(child.path), child_parent)
                continue
            if _is_regular_file(child):
                found.append(FileEntry(parent=parent, name=child.name))

    scan(root, "")
    return found


__all__ = [
    "validate_source_directory",
    "walk_files",
]
