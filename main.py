#!/usr/bin/env python3
"""
Goal board display service.

Loads the board cards (or the configured text goals) and the stored photos,
rotates through them on a timer and serves the browser page that shows the
current item with a live date/time and Hijri date readout.

Controls on the page:
- Right / Left arrows step through the queue and restart the rotation timer.
- Space tap refreshes the board once; holding Space for the hold duration
  toggles automatic refresh.
"""
import asyncio
import logging
import signal
import threading
from typing import Optional

from waitress.server import create_server

import config
from board import GoalBoard
from data_fetch import TrelloCardSource
from photo_store import PhotoStore
from web import LoopBridge, create_app


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or config.LOG_LEVEL), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("waitress").setLevel(logging.WARNING)


def build_board(loop) -> GoalBoard:
    """Create the board from the environment configuration."""

    card_source = None
    if config.REMOTE_SOURCE_ENABLED:
        card_source = TrelloCardSource(
            config.TRELLO_LIST_ID, config.TRELLO_API_KEY, config.TRELLO_TOKEN
        )
    elif config.GOALS:
        logging.info("📝 No Trello list configured; showing %d goal(s).", len(config.GOALS))
    else:
        logging.warning(
            "No Trello list or GOALS configured; only stored photos will be shown."
        )

    return GoalBoard(
        loop,
        photo_store=PhotoStore(config.PHOTOS_PATH),
        card_source=card_source,
        goals=config.GOALS,
        tick_period=config.TICK_PERIOD,
        poll_period=config.POLL_PERIOD,
        hold_duration=config.HOLD_DURATION,
        auto_refresh_default=config.AUTO_REFRESH_DEFAULT,
        clock_tz=config.CLOCK_TIMEZONE,
        sample_interval=config.HOLD_SAMPLE_INTERVAL,
        complete_linger=config.HOLD_COMPLETE_LINGER,
        clock_interval=config.CLOCK_TICK_INTERVAL,
    )


def _start_web_server(app, host: str, port: int):
    server = create_server(app, host=host, port=port)
    thread = threading.Thread(target=server.run, name="web-server", daemon=True)
    thread.start()
    logging.info("🌐 Serving display on http://%s:%s/", host, port)
    return server, thread


async def run() -> None:
    loop = asyncio.get_running_loop()
    shutdown = asyncio.Event()

    def _request_shutdown(reason: str) -> None:
        if not shutdown.is_set():
            logging.info("✋ Shutdown requested (%s).", reason)
            shutdown.set()

    for sig, name in ((signal.SIGTERM, "SIGTERM"), (signal.SIGINT, "CTRL-C")):
        try:
            loop.add_signal_handler(sig, _request_shutdown, name)
        except (NotImplementedError, RuntimeError):
            logging.debug("Signal handler for %s unavailable.", name)

    board = build_board(loop)
    server = None
    try:
        await board.start()
        app = create_app(board, LoopBridge(loop))
        server, _ = _start_web_server(app, config.DISPLAY_HOST, config.DISPLAY_PORT)
        await shutdown.wait()
    finally:
        board.close()
        if server is not None:
            server.close()
        logging.info("👋 Shutdown cleanup finished.")


def main() -> None:
    configure_logging()
    logging.info("🖥️  Starting goal board display…")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logging.info("✋ CTRL-C caught, shutting down…")


if __name__ == "__main__":
    main()
