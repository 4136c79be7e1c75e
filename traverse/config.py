"""Persistent key=value config and on-disk locations.

The config file is created with defaults on first run. Parsing is lenient:
unknown keys and malformed lines are skipped rather than rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir, user_log_dir

from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

APP_NAME = "traverse"
CONFIG_FILENAME = "config.txt"
BOOKMARKS_FILENAME = "bookmarks.txt"
LOG_FILENAME = "traverse.log"

CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
BOOKMARKS_PATH = Path(user_data_dir(APP_NAME, appauthor=False)) / BOOKMARKS_FILENAME
LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME

DEFAULT_EXCLUDED_DIRECTORIES: tuple[str, ...] = (".git", ".idea", ".vscode", "target")
DEFAULT_CONFIG_TEXT = "show_hidden=false\nexcluded_directories=" + ",".join(DEFAULT_EXCLUDED_DIRECTORIES) + "\n"


@dataclass(frozen=True)
class AppConfig:
    """Listing preferences shared by the snapshot and the fuzzy locator."""

    show_hidden: bool = False
    excluded_directories: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_EXCLUDED_DIRECTORIES))


def _parse_bool(value: str) -> bool | None:
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def parse_config(text: str) -> AppConfig:
    """Build an ``AppConfig`` from config file text.

    Keys missing from ``text`` keep their defaults. Blank lines and ``#``
    comments are skipped; anything else that is not ``key=value`` is logged
    at debug level and ignored.
    """
    show_hidden = False
    excluded = frozenset(DEFAULT_EXCLUDED_DIRECTORIES)
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            LOGGER.debug("Ignoring malformed config line %d: %r", lineno, raw_line)
            continue
        key = key.strip()
        if key == "show_hidden":
            parsed = _parse_bool(value)
            if parsed is None:
                LOGGER.debug("Ignoring invalid show_hidden value %r", value)
                continue
            show_hidden = parsed
        elif key == "excluded_directories":
            excluded = frozenset(name.strip() for name in value.split(",") if name.strip())
        else:
            LOGGER.debug("Ignoring unknown config key %r", key)
    return AppConfig(show_hidden=show_hidden, excluded_directories=excluded)


def ensure_config_file(path: Path | None = None) -> Path:
    """Create the config file with default contents when it does not exist."""
    config_path = path if path is not None else CONFIG_PATH
    if config_path.exists():
        return config_path
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot create {config_path}: {exc.strerror or exc}") from exc
    LOGGER.info("Created default config at %s", config_path)
    return config_path


def load_config(path: Path | None = None) -> AppConfig:
    """Load the config, writing defaults first on a fresh install.

    Failures to create or read the file fall back to built-in defaults.
    """
    config_path = path if path is not None else CONFIG_PATH
    try:
        ensure_config_file(config_path)
        text = config_path.read_text(encoding="utf-8")
    except ConfigError as exc:
        LOGGER.warning("%s; using defaults", exc)
        return AppConfig()
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.warning("Cannot read %s (%s); using defaults", config_path, exc)
        return AppConfig()
    return parse_config(text)
