import asyncio
import logging

import main
from data_fetch import TrelloCardSource
from services import http_client


def _patch_config(monkeypatch, tmp_path, **overrides):
    settings = {
        "REMOTE_SOURCE_ENABLED": False,
        "TRELLO_LIST_ID": None,
        "TRELLO_API_KEY": None,
        "TRELLO_TOKEN": None,
        "GOALS": (),
        "PHOTOS_PATH": str(tmp_path / "photos.jsonl"),
        "AUTO_REFRESH_DEFAULT": False,
    }
    settings.update(overrides)
    for name, value in settings.items():
        monkeypatch.setattr(main.config, name, value)


def test_build_board_uses_goals_without_remote(monkeypatch, tmp_path):
    _patch_config(monkeypatch, tmp_path, GOALS=("Ship v1", "Write docs"))

    async def scenario():
        board = main.build_board(asyncio.get_running_loop())
        await board.start()
        try:
            assert board.card_source is None
            assert [card.title for card in board.refresh.cards] == ["Ship v1", "Write docs"]
            assert all(card.is_simple for card in board.refresh.cards)
            assert board.rotation.is_rotating
        finally:
            board.close()

    asyncio.run(scenario())


def test_build_board_prefers_trello_when_configured(monkeypatch, tmp_path):
    _patch_config(
        monkeypatch,
        tmp_path,
        REMOTE_SOURCE_ENABLED=True,
        TRELLO_LIST_ID="L1",
        TRELLO_API_KEY="k",
        TRELLO_TOKEN="t",
        GOALS=("ignored",),
    )

    async def scenario():
        return main.build_board(asyncio.get_running_loop())

    board = asyncio.run(scenario())
    assert isinstance(board.card_source, TrelloCardSource)
    assert board.card_source.list_id == "L1"
    assert board.refresh.has_remote_source
    assert board.refresh.cards == []


def test_configure_logging_quietens_http_libraries():
    main.configure_logging("DEBUG")
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING
    main.configure_logging("INFO")


def test_shared_session_is_reused_and_retries():
    session = http_client.get_session()
    assert http_client.get_session() is session
    adapter = session.get_adapter("https://api.trello.com/1")
    assert adapter.max_retries.total == 3
    assert session.headers["Accept"] == "application/json"
