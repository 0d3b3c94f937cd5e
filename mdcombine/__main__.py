"""Run ``python -m mdcombine`` exactly like the ``mdcombine`` console script.

Combines the files under ``--src`` into ``--out``; see ``mdcombine.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
