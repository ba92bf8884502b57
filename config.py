#!/usr/bin/env python3
"""Goal board settings, read from the environment (and ``.env`` on request)."""
import logging
import os
from pathlib import Path
from typing import Iterator, Optional, Tuple

import pytz
from dotenv import load_dotenv

# ─── Environment helpers ───────────────────────────────────────────────────────

PROJECT_DIR = Path(__file__).resolve().parent

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get_first_env_var(*names: str):
    """Return the first populated environment variable from *names.*"""

    for name in names:
        value = os.environ.get(name)
        if value:
            return value

    return None


def _get_bool_env(name: str, default: bool) -> bool:
    """Parse boolean feature flags from environment variables."""

    raw = os.environ.get(name)
    if raw is None:
        return default

    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def _dotenv_paths() -> Iterator[Path]:
    """The project's ``.env``, then the working directory's if it differs."""

    project_env = PROJECT_DIR / ".env"
    yield project_env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.resolve() != project_env.resolve():
        yield cwd_env


_DOTENV_LOADED = False


def load_dotenv_if_requested(force: bool = False) -> bool:
    """Load ``.env`` files when ``CONFIG_LOAD_DOTENV`` is set.

    Values already in the environment win over the file. Returns True when
    at least one file was read.
    """

    global _DOTENV_LOADED

    if _DOTENV_LOADED and not force:
        return False
    _DOTENV_LOADED = True

    if not _get_bool_env("CONFIG_LOAD_DOTENV", False):
        return False

    loaded = False
    for path in _dotenv_paths():
        if path.is_file():
            load_dotenv(path, override=False)
            logging.debug("Loaded settings from %s", path)
            loaded = True
    return loaded


load_dotenv_if_requested()


def _get_seconds_env(name: str, default: float, minimum: float = 0.0) -> float:
    """Parse a positive duration in seconds, falling back to *default*."""

    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default

    try:
        value = float(raw)
    except (TypeError, ValueError):
        logging.warning(
            "Invalid %s value %r; defaulting to %s seconds.", name, raw, default
        )
        return default

    if value <= minimum:
        logging.warning(
            "%s must be greater than %s; defaulting to %s seconds.",
            name,
            minimum,
            default,
        )
        return default
    return value


def _parse_goals(raw: Optional[str]) -> Tuple[str, ...]:
    """Split the ``GOALS`` variable on ``|`` or newlines into goal titles."""

    if not raw:
        return ()
    parts = raw.replace("\n", "|").split("|")
    return tuple(part.strip() for part in parts if part.strip())


# ─── Remote board (Trello) ────────────────────────────────────────────────────
TRELLO_API_URL  = os.environ.get("TRELLO_API_URL", "https://api.trello.com/1")
TRELLO_LIST_ID  = _get_first_env_var("TRELLO_LIST_ID", "TRELLO_LIST")
TRELLO_API_KEY  = _get_first_env_var("TRELLO_API_KEY", "TRELLO_KEY")
TRELLO_TOKEN    = _get_first_env_var("TRELLO_TOKEN")

REMOTE_SOURCE_ENABLED = bool(TRELLO_LIST_ID and TRELLO_API_KEY and TRELLO_TOKEN)

HTTP_TIMEOUT = _get_seconds_env("HTTP_TIMEOUT_SECONDS", 10.0)

# ─── Local content ────────────────────────────────────────────────────────────
GOALS       = _parse_goals(os.environ.get("GOALS"))
PHOTOS_PATH = os.environ.get("PHOTOS_PATH", str(PROJECT_DIR / "photos.jsonl"))

# ─── Rotation & refresh timing ────────────────────────────────────────────────
TICK_PERIOD          = _get_seconds_env("TICK_PERIOD_SECONDS", 10.0)
POLL_PERIOD          = _get_seconds_env("POLL_PERIOD_SECONDS", 300.0)
HOLD_DURATION        = _get_seconds_env("HOLD_DURATION_SECONDS", 2.0)
AUTO_REFRESH_DEFAULT = _get_bool_env("AUTO_REFRESH_DEFAULT", False)

# Progress sampling while the refresh key is held, and how long the completed
# indicator stays up after a long press.
HOLD_SAMPLE_INTERVAL = 0.03
HOLD_COMPLETE_LINGER = 0.7

CLOCK_TICK_INTERVAL = 1.0

# ─── Clock ────────────────────────────────────────────────────────────────────
try:
    CLOCK_TIMEZONE = pytz.timezone(os.environ.get("CLOCK_TIMEZONE", "Etc/GMT-7"))
except pytz.UnknownTimeZoneError:
    logging.warning("Unknown CLOCK_TIMEZONE; defaulting to GMT+7.")
    CLOCK_TIMEZONE = pytz.timezone("Etc/GMT-7")

# ─── Web surface ──────────────────────────────────────────────────────────────
DISPLAY_HOST = os.environ.get("DISPLAY_HOST", "0.0.0.0")
try:
    DISPLAY_PORT = int(os.environ.get("DISPLAY_PORT", "5000"))
except (TypeError, ValueError):
    logging.warning("Invalid DISPLAY_PORT value; defaulting to 5000.")
    DISPLAY_PORT = 5000

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
