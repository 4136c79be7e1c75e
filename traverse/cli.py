"""Command-line front door for traverse.

Parses CLI options, validates the start directory, and configures logging.
Then runs the interactive browser and prints where it ended up.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import config as config_mod
from .app import run_app
from .logs import configure_logging

LAST_DIRECTORY_HINT = "To navigate to traverse's last directory: cd {}"


def _is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="traverse",
        description="Browse, preview, and manage files in a terminal UI.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to start in. Defaults to current directory.")
    parser.add_argument("--style", default="monokai", help="Pygments style name for file previews.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--config", metavar="FILE", type=Path, default=None, help="Config file to use.")
    parser.add_argument("--log-file", metavar="FILE", type=Path, default=None, help="Write logs to FILE.")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages.")
    return parser


def main(argv: list[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch the browser.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    args = build_parser().parse_args(argv)

    if default_path is None:
        default_path = Path.cwd()
    path = Path(args.path or default_path).expanduser()
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")
    if not path.is_dir():
        raise SystemExit(f"Not a directory: {path}")
    if not _is_interactive():
        raise SystemExit("traverse needs an interactive terminal.")

    configure_logging(args.log_file or config_mod.LOG_PATH, verbose=args.verbose)
    last_dir = run_app(path.resolve(), style=args.style, no_color=args.no_color, config_path=args.config)
    print(LAST_DIRECTORY_HINT.format(last_dir))


if __name__ == "__main__":
    main()
