import datetime

import pytest

from models import Card, Checklist, ChecklistItem, Label, Member, Photo, simple_card
from presentation import (
    SnapshotRenderer,
    due_status,
    is_light_color,
    item_payload,
    label_hex,
    split_cover,
)

NOW = datetime.datetime(2024, 3, 11, 12, 0, tzinfo=datetime.timezone.utc)


def test_split_cover_extracts_url_and_cleans_text():
    cover, text = split_cover("Cover: https://img.example.com/a.jpg\nKeep going!")
    assert cover == "https://img.example.com/a.jpg"
    assert text == "Keep going!"


def test_split_cover_markdown_variant():
    cover, text = split_cover(
        "Cover: [https://img.example.com/b.png](https://img.example.com/b.png)\nDaily"
    )
    assert cover == "https://img.example.com/b.png"
    assert text == "Daily"


def test_split_cover_without_cover_strips_links():
    cover, text = split_cover("See [docs](https://example.com) now (https://example.com/x)")
    assert cover is None
    assert "https://" not in text
    assert text.startswith("See")


@pytest.mark.parametrize(
    "delta, expected",
    [
        (datetime.timedelta(hours=-1), "overdue"),
        (datetime.timedelta(days=1), "due-soon"),
        (datetime.timedelta(days=2), "due-soon"),
        (datetime.timedelta(days=5), "due"),
    ],
)
def test_due_status(delta, expected):
    status, _ = due_status(NOW + delta, NOW)
    assert status == expected


def test_label_colours():
    assert label_hex("green") == "#61bd4f"
    assert label_hex(None) == "#667eea"
    assert is_light_color("#f2d600")
    assert not is_light_color("#344563")


def test_empty_payload():
    assert item_payload(None) == {"kind": "empty"}


def test_simple_card_payload():
    assert item_payload(simple_card("Walk")) == {
        "kind": "card",
        "simple": True,
        "title": "Walk",
        "show_title": True,
    }


def test_full_card_payload():
    card = Card(
        title="Launch",
        description="Cover: https://img.example.com/c.png\nBig day",
        labels=(Label("Work", "yellow"), Label("No Title", "red")),
        due_at=NOW + datetime.timedelta(days=1),
        members=(Member("Ada", "https://a/50.png"),),
        checklists=(
            Checklist("Prep", (ChecklistItem("a", True), ChecklistItem("b", False))),
        ),
    )

    payload = item_payload(card, now=NOW)

    assert payload["show_title"] is False
    assert payload["cover_url"] == "https://img.example.com/c.png"
    assert payload["description"] == "Big day"
    assert payload["labels"] == [{"name": "Work", "color": "#f2d600", "text_color": "#333"}]
    assert payload["due"]["status"] == "due-soon"
    assert payload["members"] == [{"name": "Ada", "avatar_url": "https://a/50.png"}]
    assert payload["checklists"][0]["completed"] == 1
    assert payload["checklists"][0]["total"] == 2


def test_photo_payload():
    payload = item_payload(Photo("p.png", "data:image/png;base64,AA"))
    assert payload == {
        "kind": "photo",
        "name": "p.png",
        "src": "data:image/png;base64,AA",
        "added_at": None,
    }


def test_snapshot_renderer_keeps_latest():
    renderer = SnapshotRenderer()
    assert renderer.payload == {"kind": "empty"}

    renderer.render(simple_card("One"))
    renderer.render(None)

    assert renderer.payload == {"kind": "empty"}
    assert renderer.render_count == 2
