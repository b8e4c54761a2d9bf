"""Countdown controller.

Owns one timer's remaining time. Ticks arrive from an injected tick source,
one at a time; the controller never blocks. Every start, stop and reset moves
the controller to a new generation, and a tick that belongs to an older
generation is dropped, so a stale tick can never touch a restarted timer.
"""

import logging
from typing import Callable, Optional

from gameshow.errors import ValidationError


def percent_of(remaining: int, total: int) -> float:
    if total == 0:
        return 0
    return max(0, remaining / total * 100)


def _check_seconds(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError('total_seconds', 'must be a non-negative integer')
    return value


class CountdownController:

    def __init__(self, tick_source, on_tick: Optional[Callable[[int], None]] = None,
                 logger: Optional[logging.Logger] = None):
        self._ticks = tick_source
        self._on_tick = on_tick
        self._logger = logger or logging.getLogger(__name__)
        self._on_expire: Optional[Callable[[], None]] = None
        self._subscription = None
        self._generation = 0
        self.total_seconds = 0
        self.remaining_seconds = 0
        self.running = False
        self.expired = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def percent_remaining(self) -> float:
        return percent_of(self.remaining_seconds, self.total_seconds)

    def start(self, total_seconds: int, on_expire: Optional[Callable[[], None]] = None) -> None:
        total_seconds = _check_seconds(total_seconds)
        self._halt()
        self.total_seconds = total_seconds
        self.remaining_seconds = total_seconds
        self.expired = False
        self._on_expire = on_expire
        self._subscribe()
        self._logger.debug(f"[timer-set] total={total_seconds}s generation={self._generation}")

    def stop(self) -> None:
        """Halt ticking. Stopping a stopped controller is a no-op."""
        if not self.running and self._subscription is None:
            return
        self._halt()

    def reset(self, total_seconds: int) -> None:
        """Adopt a new total; remaining restarts from it with no carried-over time."""
        total_seconds = _check_seconds(total_seconds)
        was_running = self.running
        self._halt()
        self.total_seconds = total_seconds
        self.remaining_seconds = total_seconds
        self.expired = False
        if was_running:
            self._subscribe()

    def _subscribe(self) -> None:
        self._generation += 1
        generation = self._generation
        self.running = True
        self._subscription = self._ticks.subscribe(lambda: self._tick(generation))

    def _halt(self) -> None:
        self._generation += 1
        self.running = False
        sub, self._subscription = self._subscription, None
        if sub is not None:
            sub.cancel()

    def _tick(self, generation: int) -> None:
        if generation != self._generation or not self.running:
            return
        if self.remaining_seconds <= 1:
            self.remaining_seconds = 0
            self.expired = True
            callback, self._on_expire = self._on_expire, None
            self._halt()
            self._logger.debug(f"[timer-fire] total={self.total_seconds}s")
            if self._on_tick is not None:
                self._on_tick(0)
            if callback is not None:
                callback()
            return
        self.remaining_seconds -= 1
        if self._on_tick is not None:
            self._on_tick(self.remaining_seconds)

    def to_dict(self):
        return {
            'total_seconds': self.total_seconds,
            'remaining_seconds': self.remaining_seconds,
            'running': self.running,
            'percent_remaining': self.percent_remaining,
        }
