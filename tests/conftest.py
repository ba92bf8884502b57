"""Shared fixtures: a manual-clock stand-in for the asyncio event loop."""

import asyncio

import pytest


class FakeHandle:
    def __init__(self, when, seq, callback, args):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def cancelled(self):
        return self._cancelled


class FakeTask:
    """Holds a coroutine until :meth:`FakeLoop.run_tasks` runs it."""

    def __init__(self, coro):
        self.coro = coro
        self.result = None
        self._callbacks = []

    def add_done_callback(self, callback):
        self._callbacks.append(callback)

    def run(self):
        self.result = asyncio.run(self.coro)
        for callback in self._callbacks:
            callback(self)
        return self.result

    def close(self):
        self.coro.close()


class FakeLoop:
    """Implements the slice of the loop API the controllers use.

    Timers only fire from :meth:`advance`; tasks are collected and run on
    demand with :meth:`run_tasks`.
    """

    def __init__(self):
        self.now = 0.0
        self._timers = []
        self._seq = 0
        self.tasks = []

    def time(self):
        return self.now

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, self._seq, callback, args)
        self._seq += 1
        self._timers.append(handle)
        return handle

    def create_task(self, coro):
        task = FakeTask(coro)
        self.tasks.append(task)
        return task

    def pending_timers(self):
        return [handle for handle in self._timers if not handle.cancelled()]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [
                handle
                for handle in self._timers
                if not handle.cancelled() and handle.when <= target + 1e-9
            ]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._timers.remove(handle)
            self.now = max(self.now, handle.when)
            handle.callback(*handle.args)
        self.now = target

    def run_tasks(self):
        results = []
        while self.tasks:
            results.append(self.tasks.pop(0).run())
        return results

    def discard_tasks(self):
        for task in self.tasks:
            task.close()
        self.tasks.clear()


@pytest.fixture
def fake_loop():
    loop = FakeLoop()
    yield loop
    loop.discard_tasks()


class RenderSpy:
    def __init__(self):
        self.items = []

    def __call__(self, item):
        self.items.append(item)

    @property
    def last(self):
        return self.items[-1] if self.items else None


@pytest.fixture
def render_spy():
    return RenderSpy()
