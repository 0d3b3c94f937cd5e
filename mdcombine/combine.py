"""Combine selected files into one markdown document and write it out.

``combine`` runs the whole pipeline for a resolved request: validate the
source, walk it, select candidates, build the document and write it in one
atomic replace. Nothing is written when no candidates survive selection.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import OutputWriteError, SourceReadError
from .fencing import fence, fence_language, is_markdown_name
from .selection import CONTENT_MIXED, SelectionPolicy
from .types import CombinedDocument, FileEntry
from .walker import validate_source_directory, walk_files

logger = logging.getLogger(__name__)

TITLE = "# Combined Documentation\n"


@dataclass(frozen=True)
class CombineRequest:
    """Resolved absolute paths plus the selection policy to apply."""

    source: Path
    output: Path
    policy: SelectionPolicy


@dataclass(frozen=True)
class CombineResult:
    output: Path
    files: tuple[FileEntry, ...]


def section_header(label: str) -> str:
    return f"\n---\n## Source: {label}\n---\n"


def read_entry(source: Path, entry: FileEntry) -> str:
    """Read one candidate as strict UTF-8, keeping its line endings as-is."""
    path = source / entry.relative_path
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(path, exc) from exc


def render_body(entry: FileEntry, content: str, content_mode: str) -> str:
    """Return ``content`` verbatim, or fenced for non-markdown in mixed mode."""
    if content_mode != CONTENT_MIXED or is_markdown_name(entry.name):
        return content
    return fence(content, fence_language(entry.name))


def build_document(
    source: Path,
    entries: Sequence[FileEntry],
    content_mode: str,
    progress: Callable[[FileEntry], None] | None = None,
) -> CombinedDocument:
    """Read ``entries`` in order and assemble title, headers and bodies."""
    fragments: list[str] = [TITLE]
    for entry in entries:
        if progress is not None:
            progress(entry)
        content = read_entry(source, entry)
        fragments.append(section_header(entry.relative_path))
        fragments.append(render_body(entry, content, content_mode))
    return CombinedDocument(fragments=tuple(fragments), file_count=len(entries))


def _output_mode(path: Path) -> int:
    """Return the existing target's permission bits, or the umask default."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_document(path: Path, document: CombinedDocument) -> None:
    """Write ``document`` to ``path`` through a sibling temp file.

    Parent directories are created as needed. The target is either fully
    replaced or left untouched, and keeps its permissions when it existed.
    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(document.text())
        os.chmod(tmp_name, _output_mode(path))
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise OutputWriteError(path, exc) from exc


def _output_relative_to(source: Path, output: Path) -> str | None:
    """Return ``output`` as a POSIX path under ``source``, if it is inside it."""
    try:
        return output.relative_to(source).as_posix()
    except ValueError:
        return None


def _log_progress(entry: FileEntry) -> None:
    logger.info("  -> Combining: %s", entry.relative_path)


def combine(request: CombineRequest) -> CombineResult | None:
    """Run discovery, selection and writing for ``request``.

    Returns ``None`` without touching the output when no file is selected.
    """
    source = validate_source_directory(request.source)
    logger.info("Searching for files in '%s' (policy: %s)...", source, request.policy.name)

    entries = walk_files(source)
    candidates = request.policy.select(entries, exclude=_output_relative_to(source, request.output))
    if not candidates:
        logger.warning("No matching files found in '%s'. Exiting.", source)
        return None

    logger.info("Found %d files to combine.", len(candidates))
    document = build_document(source, candidates, request.policy.content_mode, progress=_log_progress)
    write_document(request.output, document)
    logger.info("Successfully combined all files into '%s'!", request.output)
    return CombineResult(output=request.output, files=tuple(candidates))


__all__ = [
    "TITLE",
    "CombineRequest",
    "CombineResult",
    "section_header",
    "read_entry",
    "render_body",
    "build_document",
    "write_document",
    "combine",
]
