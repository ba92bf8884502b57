"""Queue item types shown by the display: board cards and stored photos."""
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Label:
    name: str = ""
    color: Optional[str] = None


@dataclass(frozen=True)
class Member:
    name: str = ""
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class ChecklistItem:
    text: str = ""
    complete: bool = False


@dataclass(frozen=True)
class Checklist:
    title: str = ""
    items: Tuple[ChecklistItem, ...] = ()

    @property
    def completed_count(self) -> int:
        return sum(1 for item in self.items if item.complete)


@dataclass(frozen=True)
class Card:
    """A remote board card, or a plain text goal when ``is_simple`` is set."""

    title: str
    description: str = ""
    labels: Tuple[Label, ...] = ()
    due_at: Optional[datetime.datetime] = None
    members: Tuple[Member, ...] = ()
    checklists: Tuple[Checklist, ...] = ()
    is_simple: bool = False

    kind = "card"


@dataclass(frozen=True)
class Photo:
    """A locally stored image; ``image_data`` is a self-contained data URI."""

    name: str
    image_data: str
    added_at: Optional[datetime.datetime] = field(default=None, compare=False)

    kind = "photo"


QueueItem = Union[Card, Photo]


def simple_card(title: str) -> Card:
    """Return a text goal card carrying only its title."""

    return Card(title=str(title), is_simple=True)


# ─── Parsing helpers ──────────────────────────────────────────────────────────

def _text(value: Any, default: str = "") -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return default
    return str(value)


def _dicts(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [entry for entry in value if isinstance(entry, Mapping)]


def parse_timestamp(value: Any) -> Optional[datetime.datetime]:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into an aware datetime."""

    if not isinstance(value, str) or not value.strip():
        return None
    cleaned = value.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"
    try:
        parsed = datetime.datetime.fromisoformat(cleaned)
    except ValueError:
        _LOGGER.debug("Unparseable timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def _parse_member(raw: Mapping[str, Any]) -> Member:
    name = _text(raw.get("fullName") or raw.get("username"))
    avatar = raw.get("avatarUrl")
    avatar_url = f"{avatar}/50.png" if isinstance(avatar, str) and avatar else None
    return Member(name=name, avatar_url=avatar_url)


def _parse_checklist(raw: Mapping[str, Any]) -> Checklist:
    items = tuple(
        ChecklistItem(
            text=_text(item.get("name")),
            complete=item.get("state") == "complete",
        )
        for item in _dicts(raw.get("checkItems"))
    )
    return Checklist(title=_text(raw.get("name")), items=items)


def card_from_trello(payload: Any) -> Optional[Card]:
    """Build a :class:`Card` from a Trello card payload.

    Missing or mistyped fields fall back to empty defaults so one odd card
    never prevents the rest of the board from showing. Only a payload that
    is not a mapping at all is rejected (``None``).
    """

    if not isinstance(payload, Mapping):
        _LOGGER.warning("Skipping malformed card payload of type %s", type(payload).__name__)
        return None

    labels = tuple(
        Label(name=_text(label.get("name")), color=label.get("color") or None)
        for label in _dicts(payload.get("labels"))
    )
    return Card(
        title=_text(payload.get("name")),
        description=_text(payload.get("desc")),
        labels=labels,
        due_at=parse_timestamp(payload.get("due")),
        members=tuple(_parse_member(member) for member in _dicts(payload.get("members"))),
        checklists=tuple(
            _parse_checklist(checklist) for checklist in _dicts(payload.get("checklists"))
        ),
    )


def photo_from_record(record: Any) -> Optional[Photo]:
    """Build a :class:`Photo` from a stored record; ``None`` if unusable."""

    if not isinstance(record, Mapping):
        return None
    data = record.get("data_url") or record.get("dataUrl")
    if not isinstance(data, str) or not data:
        _LOGGER.warning("Skipping photo record without image data: %r", record.get("name"))
        return None

    added_at = None
    timestamp = record.get("timestamp")
    if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        try:
            added_at = datetime.datetime.fromtimestamp(
                timestamp / 1000.0, tz=datetime.timezone.utc
            )
        except (OverflowError, OSError, ValueError):
            added_at = None

    return Photo(name=_text(record.get("name"), "photo"), image_data=data, added_at=added_at)


def photo_to_record(photo: Photo) -> Dict[str, Any]:
    timestamp = int(photo.added_at.timestamp() * 1000) if photo.added_at else None
    return {"name": photo.name, "data_url": photo.image_data, "timestamp": timestamp}
