"""Module entrypoint for ``python -m gridwalk``.

All argument parsing and runtime setup happen in ``gridwalk.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
