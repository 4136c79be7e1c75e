"""Module entrypoint for ``python -m traverse``.

All argument parsing and runtime setup happen in ``traverse.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
