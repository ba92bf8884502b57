#!/usr/bin/env python3
"""Browser surface for the goal board: the page, its state feed and key input."""
from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Callable

from flask import Flask, jsonify, render_template, request

_logger = logging.getLogger(__name__)

BRIDGE_TIMEOUT = 2.0


class LoopBridge:
    """Run board calls on the event loop thread from web worker threads."""

    def __init__(self, loop, timeout: float = BRIDGE_TIMEOUT):
        self._loop = loop
        self._timeout = timeout

    def call(self, func: Callable[..., Any], *args: Any) -> Any:
        future: concurrent.futures.Future = concurrent.futures.Future()

        def _run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(func(*args))
            except Exception as exc:
                future.set_exception(exc)

        self._loop.call_soon_threadsafe(_run)
        try:
            return future.result(self._timeout)
        except concurrent.futures.TimeoutError:
            # A timed-out call must not run later on the loop.
            future.cancel()
            raise


def create_app(board, bridge) -> Flask:
    """Build the Flask app serving *board* through *bridge*."""

    app = Flask(__name__)

    @app.route("/")
    def index() -> str:
        return render_template("index.html")

    @app.route("/api/state")
    def api_state():
        return jsonify(status="ok", state=bridge.call(board.snapshot))

    @app.route("/api/keys", methods=["POST"])
    def api_keys():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify(status="error", message="JSON body is required"), 400

        event_type = payload.get("type")
        key = payload.get("key")
        if event_type not in ("down", "up") or not isinstance(key, str):
            return (
                jsonify(status="error", message="Expected {type: down|up, key: <string>}"),
                400,
            )

        handler = board.handle_key_down if event_type == "down" else board.handle_key_up
        handled = bridge.call(handler, key)
        return jsonify(status="ok", handled=bool(handled))

    @app.route("/api/focus", methods=["POST"])
    def api_focus():
        payload = request.get_json(silent=True) or {}
        state = payload.get("state") if isinstance(payload, dict) else None
        if state not in ("blur", "hidden"):
            return jsonify(status="error", message="Expected {state: blur|hidden}"), 400
        bridge.call(board.handle_focus_lost)
        return jsonify(status="ok")

    @app.errorhandler(concurrent.futures.TimeoutError)
    def _loop_timeout(exc):
        _logger.warning("⚠️ Display loop did not answer in time.")
        return jsonify(status="error", message="display loop busy"), 503

    return app
