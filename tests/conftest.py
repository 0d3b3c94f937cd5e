"""Make ``import mdcombine`` resolve to this checkout when running pytest.

The ``pytest`` console script may start with a sys.path that lacks the
repository root, e.g. when the package is not installed in editable mode.
"""

from __future__ import annotations

import sys
from pathlib import Path


REPO_ROOT = str(Path(__file__).resolve().parent.parent)

if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)
