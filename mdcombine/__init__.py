"""Documentation aggregation: merge a tree of notes into one markdown file.

``main`` is the programmatic CLI entry; the pipeline itself lives in
``mdcombine.combine`` and the selection policies in ``mdcombine.selection``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Run the command line; imported lazily so ``import mdcombine`` stays cheap."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
