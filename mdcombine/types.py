"""Transient datatypes passed between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_SOURCE = "."
DEFAULT_OUTPUT = "./combined.md"
DEFAULT_POLICY = "markdown"


@dataclass(frozen=True)
class CombineArguments:
    """Raw flag values, already defaulted but not yet resolved to paths."""

    src: str = DEFAULT_SOURCE
    out: str = DEFAULT_OUTPUT
    policy: str = DEFAULT_POLICY


@dataclass(frozen=True, order=True)
class FileEntry:
    """One discovered regular file.

    ``parent`` is the POSIX path of the containing directory relative to the
    source root, ``""`` for files directly in the root. Default ordering is
    ``(parent, name)``.
    """

    parent: str
    name: str

    @property
    def relative_path(self) -> str:
        if not self.parent:
            return self.name
        return f"{self.parent}/{self.name}"


@dataclass(frozen=True)
class CombinedDocument:
    """Ordered output fragments; joined with newlines when written."""

    fragments: tuple[str, ...]
    file_count: int

    def text(self) -> str:
        return "\n".join(self.fragments)


__all__ = [
    "DEFAULT_SOURCE",
    "DEFAULT_OUTPUT",
    "DEFAULT_POLICY",
    "CombineArguments",
    "FileEntry",
    "CombinedDocument",
]
