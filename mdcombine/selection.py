"""Candidate selection policies.

Two policies are available and each is applied on its own:

- ``markdown`` (allowlist): keep files with a markdown extension, sorted by
  relative path string. Bodies are copied verbatim.
- ``denylist``: drop files below denylisted folders or with denylisted
  names, sorted by ``(parent, name)``. Non-markdown bodies are fenced.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .errors import ConfigurationError
from .fencing import MARKDOWN_EXTENSIONS, is_markdown_name
from .types import FileEntry

CONTENT_UNIFORM = "uniform"
CONTENT_MIXED = "mixed"

DENYLISTED_FOLDERS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        ".venv",
        "venv",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".idea",
        ".vscode",
        "dist",
        "build",
        "tmp",
        "temp",
        ".next",
        ".cache",
        "coverage",
    }
)

DENYLISTED_NAME_PATTERNS = (
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    "*.lock",
    "package-lock.json",
    "pnpm-lock.yaml",
    "*.log",
    "*.tmp",
    "*.swp",
    "*~",
    "*.pyc",
)


def compile_name_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a filename pattern where ``*`` matches zero or more characters.

    Every other character, including ``?`` and ``[``, matches literally, which
    is why ``fnmatch.fnmatchcase`` (wildcards ``?`` and ``[...]``) is not used.
    Matching is case-sensitive on every platform.
    """
    parts = (re.escape(chunk) for chunk in pattern.split("*"))
    return re.compile(".*".join(parts), re.DOTALL)


_DENYLISTED_NAME_RES = tuple(compile_name_pattern(pattern) for pattern in DENYLISTED_NAME_PATTERNS)


def in_denylisted_folder(entry: FileEntry) -> bool:
    if not entry.parent:
        return False
    return any(part in DENYLISTED_FOLDERS for part in entry.parent.split("/"))


def has_denylisted_name(entry: FileEntry) -> bool:
    return any(regex.fullmatch(entry.name) for regex in _DENYLISTED_NAME_RES)


def _include_denylist(entry: FileEntry) -> bool:
    return not in_denylisted_folder(entry) and not has_denylisted_name(entry)


def _include_markdown(entry: FileEntry) -> bool:
    return is_markdown_name(entry.name)


def _relative_path_key(entry: FileEntry) -> str:
    return entry.relative_path


def _entry_key(entry: FileEntry) -> FileEntry:
    return entry


@dataclass(frozen=True)
class SelectionPolicy:
    """Filter plus sort order plus body handling for one combine variant."""

    name: str
    description: str
    content_mode: str
    include: Callable[[FileEntry], bool]
    sort_key: Callable[[FileEntry], object]

    def select(self, entries: Iterable[FileEntry], exclude: str | None = None) -> list[FileEntry]:
        """Return included entries in deterministic order.

        ``exclude`` is a relative path (usually the output file) that is never
        selected, so rerunning over a previous result does not fold it in.
        """
        kept = [
            entry
            for entry in entries
            if self.include(entry) and (exclude is None or entry.relative_path != exclude)
        ]
        kept.sort(key=self.sort_key)
        return kept


MARKDOWN_POLICY = SelectionPolicy(
    name="markdown",
    description=f"only files ending in {', '.join(MARKDOWN_EXTENSIONS)}, copied verbatim",
    content_mode=CONTENT_UNIFORM,
    include=_include_markdown,
    sort_key=_relative_path_key,
)

DENYLIST_POLICY = SelectionPolicy(
    name="denylist",
    description="every file outside denylisted folders and names; non-markdown files fenced",
    content_mode=CONTENT_MIXED,
    include=_include_denylist,
    sort_key=_entry_key,
)

POLICIES: dict[str, SelectionPolicy] = {
    MARKDOWN_POLICY.name: MARKDOWN_POLICY,
    DENYLIST_POLICY.name: DENYLIST_POLICY,
}


def get_policy(name: str) -> SelectionPolicy:
    """Look up a policy by name, raising ``ConfigurationError`` when unknown."""
    policy = POLICIES.get(name)
    if policy is None:
        choices = ", ".join(sorted(POLICIES))
        raise ConfigurationError(f"Unknown policy: {name!r} (choose from {choices})")
    return policy


__all__ = [
    "CONTENT_UNIFORM",
    "CONTENT_MIXED",
    "DENYLISTED_FOLDERS",
    "DENYLISTED_NAME_PATTERNS",
    "compile_name_pattern",
    "in_denylisted_folder",
    "has_denylisted_name",
    "SelectionPolicy",
    "MARKDOWN_POLICY",
    "DENYLIST_POLICY",
    "POLICIES",
    "get_policy",
]
