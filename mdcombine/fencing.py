"""Markdown detection and fenced literal blocks for non-markdown bodies.

The fence info string comes from the Pygments lexer registered for the file
name, so a rendered combined document still highlights embedded sources.
"""

from __future__ import annotations

import re
from functools import lru_cache

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

MARKDOWN_EXTENSIONS = (".md", ".mdx", ".markdown")
MIN_FENCE_LENGTH = 3

_BACKTICK_RUN_RE = re.compile(r"`+")


def is_markdown_name(name: str) -> bool:
    """Return whether ``name`` carries a markdown extension."""
    return name.endswith(MARKDOWN_EXTENSIONS)


@lru_cache(maxsize=256)
def fence_language(name: str) -> str:
    """Return the first Pygments alias for ``name``, or ``""`` when unknown."""
    try:
        lexer = get_lexer_for_filename(name)
    except ClassNotFound:
        return ""
    aliases = getattr(lexer, "aliases", None) or ()
    return aliases[0] if aliases else ""


def fence(content: str, language: str = "") -> str:
    """Wrap ``content`` in a backtick fence it cannot close early.

    The fence is one backtick longer than the longest run inside ``content``
    and never shorter than three.
    """
    longest = max((len(run) for run in _BACKTICK_RUN_RE.findall(content)), default=0)
    marker = "`" * max(MIN_FENCE_LENGTH, longest + 1)
    body = content if content.endswith("\n") or not content else content + "\n"
    return f"{marker}{language}\n{body}{marker}"


__all__ = [
    "MARKDOWN_EXTENSIONS",
    "is_markdown_name",
    "fence_language",
    "fence",
]
