"""Tick sources: the injected clock that drives countdown controllers.

A tick source delivers one call per (possibly virtual) second to each active
subscription. Subscriptions are cancelled through the handle returned by
``subscribe``; a cancelled subscription never receives another tick.
"""

import itertools
import logging
import threading
from typing import Callable, Dict, Optional


TickCallback = Callable[[], None]


class TickSubscription:
    """Handle for one repeating tick stream."""

    def __init__(self, on_cancel: Optional[Callable[['TickSubscription'], None]] = None):
        self._active = True
        self._on_cancel = on_cancel

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._on_cancel is not None:
            self._on_cancel(self)


class ManualTickSource:
    """Virtual clock. Ticks only fire when ``advance`` is called."""

    def __init__(self):
        self._ids = itertools.count()
        self._subscribers: Dict[int, tuple] = {}

    def subscribe(self, callback: TickCallback) -> TickSubscription:
        sub_id = next(self._ids)
        sub = TickSubscription(on_cancel=lambda _s: self._subscribers.pop(sub_id, None))
        self._subscribers[sub_id] = (sub, callback)
        return sub

    @property
    def active_count(self) -> int:
        return len(self._subscribers)

    def advance(self, seconds: int = 1) -> None:
        for _ in range(seconds):
            # Streams created during this tick start on the next one
            for sub, callback in list(self._subscribers.values()):
                if sub.active:
                    callback()


class BackgroundTickSource:
    """One-second ticks on a Flask-SocketIO background task per subscription."""

    def __init__(self, socketio, app=None, interval: float = 1.0, heartbeat: int = 0,
                 logger: Optional[logging.Logger] = None):
        self._socketio = socketio
        self._app = app
        self.interval = interval
        self.heartbeat = heartbeat
        self._logger = logger or (app.logger if app is not None else logging.getLogger(__name__))

    def subscribe(self, callback: TickCallback) -> TickSubscription:
        sub = TickSubscription()
        self._socketio.start_background_task(self._worker, sub, callback)
        return sub

    def _deliver(self, callback: TickCallback) -> None:
        if self._app is not None:
            with self._app.app_context():
                callback()
        else:
            callback()

    def _worker(self, sub: TickSubscription, callback: TickCallback) -> None:
        ticks = 0
        while sub.active:
            self._socketio.sleep(self.interval)
            if not sub.active:
                break
            ticks += 1
            if self.heartbeat and ticks % self.heartbeat == 0:
                self._logger.info(f"[timer-heartbeat] ticks={ticks}")
            try:
                self._deliver(callback)
            except Exception:
                self._logger.exception('[timer-error] tick callback failed; stopping stream')
                sub.cancel()
                raise


class LockedTickSource:
    """Wraps another tick source so every delivery runs under ``lock``."""

    def __init__(self, inner, lock=None):
        self._inner = inner
        self.lock = lock if lock is not None else threading.RLock()

    def subscribe(self, callback: TickCallback) -> TickSubscription:
        def locked():
            with self.lock:
                callback()
        return self._inner.subscribe(locked)
