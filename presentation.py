"""Serialisable view of queue items for the browser page."""
from __future__ import annotations

import datetime
import logging
import math
import re
from typing import Any, Dict, List, Optional, Tuple

from models import Card, Label, Photo, QueueItem

_LOGGER = logging.getLogger(__name__)

NO_TITLE_LABEL = "no title"
DUE_SOON_DAYS = 2
DEFAULT_LABEL_COLOR = "#667eea"

# Trello label colour names → hex.
LABEL_COLORS = {
    "green": "#61bd4f",
    "yellow": "#f2d600",
    "orange": "#ff9f1a",
    "red": "#eb5a46",
    "purple": "#c377e0",
    "blue": "#0079bf",
    "sky": "#00c2e0",
    "lime": "#51e898",
    "pink": "#ff78cb",
    "black": "#344563",
}

_COVER_RE = re.compile(r"Cover:\s*\[?(https?://[^\s\[\]\(\)]+)", re.IGNORECASE)
_COVER_LINE_RE = re.compile(
    r"Cover:\s*(\[)?https?://[^\s\[\]\(\)]+(\]?)(\([^)]*\))?(\s*\"[^\"]*\")?(\s*\))?",
    re.IGNORECASE,
)
_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]*)\]\((https?://[^\)]+)\)")
_BARE_PAREN_URL_RE = re.compile(r"\(\s*https?://[^\)]+\s*\)")


def label_hex(color: Optional[str]) -> str:
    return LABEL_COLORS.get(color or "", DEFAULT_LABEL_COLOR)


def is_light_color(hex_color: str) -> bool:
    rgb = int(hex_color.lstrip("#"), 16)
    r, g, b = (rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF
    return 0.2126 * r + 0.7152 * g + 0.0722 * b > 180


def _is_no_title(label: Label) -> bool:
    return label.name.strip().lower() == NO_TITLE_LABEL


def split_cover(description: str) -> Tuple[Optional[str], str]:
    """Pull a ``Cover: <url>`` image out of a card description.

    Returns the cover URL (if any) and the description with the cover line,
    markdown links and parenthesised URLs removed.
    """

    cover = None
    text = description or ""
    match = _COVER_RE.search(text)
    if match:
        cover = match.group(1)
        text = _COVER_LINE_RE.sub("", text, count=1).strip()
    text = _MARKDOWN_LINK_RE.sub("", text).strip()
    text = _BARE_PAREN_URL_RE.sub("", text).strip()
    return cover, text


def due_status(
    due_at: datetime.datetime, now: datetime.datetime
) -> Tuple[str, int]:
    """Classify a due date as ``overdue``, ``due-soon`` or ``due``."""

    delta = due_at - now
    days = math.ceil(delta.total_seconds() / 86400)
    if delta.total_seconds() < 0:
        return "overdue", days
    if days <= DUE_SOON_DAYS:
        return "due-soon", days
    return "due", days


def _card_payload(card: Card, now: datetime.datetime) -> Dict[str, Any]:
    if card.is_simple:
        return {"kind": "card", "simple": True, "title": card.title, "show_title": True}

    visible_labels = [label for label in card.labels if not _is_no_title(label)]
    labels: List[Dict[str, Any]] = []
    for label in visible_labels:
        background = label_hex(label.color)
        labels.append(
            {
                "name": label.name or label.color or "",
                "color": background,
                "text_color": "#333" if is_light_color(background) else "#fff",
            }
        )

    due = None
    if card.due_at is not None:
        status, days = due_status(card.due_at, now)
        due = {"at": card.due_at.isoformat(), "status": status, "days": days}

    cover, description = split_cover(card.description)
    return {
        "kind": "card",
        "simple": False,
        "title": card.title,
        "show_title": not any(_is_no_title(label) for label in card.labels),
        "description": description,
        "cover_url": cover,
        "labels": labels,
        "due": due,
        "members": [
            {"name": member.name, "avatar_url": member.avatar_url} for member in card.members
        ],
        "checklists": [
            {
                "title": checklist.title,
                "completed": checklist.completed_count,
                "total": len(checklist.items),
                "items": [
                    {"text": item.text, "complete": item.complete} for item in checklist.items
                ],
            }
            for checklist in card.checklists
        ],
    }


def _photo_payload(photo: Photo) -> Dict[str, Any]:
    return {
        "kind": "photo",
        "name": photo.name,
        "src": photo.image_data,
        "added_at": photo.added_at.isoformat() if photo.added_at else None,
    }


def item_payload(
    item: Optional[QueueItem], now: Optional[datetime.datetime] = None
) -> Dict[str, Any]:
    """Return the JSON-ready view of *item*; ``None`` gives the empty state."""

    if item is None:
        return {"kind": "empty"}
    if isinstance(item, Photo):
        return _photo_payload(item)
    return _card_payload(item, now or datetime.datetime.now(datetime.timezone.utc))


class SnapshotRenderer:
    """Renderer that keeps the latest payload for the page to poll."""

    def __init__(self):
        self.payload: Dict[str, Any] = item_payload(None)
        self.render_count = 0

    def render(self, item: Optional[QueueItem]) -> None:
        self.payload = item_payload(item)
        self.render_count += 1
        if item is None:
            _LOGGER.info("Nothing to show; displaying empty state.")
        else:
            _LOGGER.debug("Rendered %s %r", item.kind, getattr(item, "title", getattr(item, "name", "")))
