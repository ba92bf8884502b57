"""Shared ``requests`` session with retry behaviour for remote sources."""
from __future__ import annotations

import threading
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_HEADERS = {
    "User-Agent": "goalboard-display/1.0",
    "Accept": "application/json",
}

_SESSION: Optional[requests.Session] = None
_SESSION_LOCK = threading.Lock()


def build_session() -> requests.Session:
    """Create a session that retries idempotent requests on 5xx responses."""

    session = requests.Session()
    retry_strategy = Retry(
        total=3,
        backoff_factor=1,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update(DEFAULT_HEADERS)
    return session


def get_session() -> requests.Session:
    """Return the process-wide session, creating it on first use."""

    global _SESSION

    with _SESSION_LOCK:
        if _SESSION is None:
            _SESSION = build_session()
        return _SESSION
