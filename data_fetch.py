#!/usr/bin/env python3
"""
data_fetch.py

Remote board fetchers: Trello list cards plus per-card checklist detail,
via the shared requests.Session with retries.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from config import HTTP_TIMEOUT, TRELLO_API_URL
from models import Card, card_from_trello
from services.http_client import get_session

CARD_QUERY_PARAMS = {
    "fields": "all",
    "members": "true",
    "member_fields": "all",
    "checklists": "all",
    "attachments": "true",
    "cover": "true",
}


class SourceUnavailable(Exception):
    """The remote card source could not be reached or returned bad data."""


def _get_json(session: requests.Session, url: str, params: Dict[str, Any]) -> Any:
    r = session.get(url, params=params, timeout=HTTP_TIMEOUT)
    r.raise_for_status()
    return r.json()


def _fetch_checklist(
    session: requests.Session, checklist_id: str, auth: Dict[str, str]
) -> Optional[Dict[str, Any]]:
    """Return one checklist payload, or None when the lookup fails."""

    url = f"{TRELLO_API_URL}/checklists/{checklist_id}"
    try:
        payload = _get_json(session, url, auth)
    except (requests.exceptions.RequestException, ValueError) as exc:
        logging.warning("⚠️ Checklist %s unavailable: %s", checklist_id, exc)
        return None
    if not isinstance(payload, dict):
        logging.warning("⚠️ Checklist %s returned unexpected payload", checklist_id)
        return None
    return payload


def fetch_trello_cards(
    list_id: str,
    api_key: str,
    token: str,
    *,
    session: Optional[requests.Session] = None,
) -> List[Card]:
    """
    Fetch every card on a Trello list with its checklists resolved.

    Raises SourceUnavailable when the list itself cannot be fetched. A failing
    checklist lookup only drops that checklist; the card is still returned.
    """
    session = session or get_session()
    auth = {"key": api_key, "token": token}
    url = f"{TRELLO_API_URL}/lists/{list_id}/cards"

    try:
        raw_cards = _get_json(session, url, {**auth, **CARD_QUERY_PARAMS})
    except requests.exceptions.HTTPError as http_err:
        status = http_err.response.status_code if http_err.response is not None else "?"
        raise SourceUnavailable(f"Trello API error: HTTP {status}") from http_err
    except requests.exceptions.RequestException as exc:
        raise SourceUnavailable(f"Trello request failed: {exc}") from exc
    except ValueError as exc:
        raise SourceUnavailable(f"Trello returned invalid JSON: {exc}") from exc

    if not isinstance(raw_cards, list):
        raise SourceUnavailable("Trello returned an unexpected payload for the card list")

    cards: List[Card] = []
    for raw in raw_cards:
        if isinstance(raw, dict):
            checklist_ids = raw.get("idChecklists") or []
            if isinstance(checklist_ids, list) and checklist_ids:
                embedded = {
                    str(c.get("id")): c
                    for c in raw.get("checklists") or []
                    if isinstance(c, dict) and c.get("id")
                }
                checklists = []
                for cid in checklist_ids:
                    checklist = _fetch_checklist(session, str(cid), auth)
                    if checklist is None:
                        # Fall back to the copy returned with checklists=all.
                        checklist = embedded.get(str(cid))
                    if checklist is not None:
                        checklists.append(checklist)
                raw = {**raw, "checklists": checklists}
        card = card_from_trello(raw)
        if card is not None:
            cards.append(card)

    logging.debug("Fetched %d card(s) from Trello list %s", len(cards), list_id)
    return cards


class TrelloCardSource:
    """Card source bound to one Trello list and its credentials."""

    def __init__(
        self,
        list_id: str,
        api_key: str,
        token: str,
        session: Optional[requests.Session] = None,
    ):
        self.list_id = list_id
        self._api_key = api_key
        self._token = token
        self._session = session

    def fetch(self) -> List[Card]:
        return fetch_trello_cards(
            self.list_id, self._api_key, self._token, session=self._session
        )

    def __repr__(self) -> str:
        return f"TrelloCardSource(list_id={self.list_id!r})"
