"""Round state machine: ``idle -> running -> finished``.

A round holds only the id of its question and owns its countdown. Finishing
happens exactly once, by timer expiry or by ``force_finish``; the outcome
records which one it was.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from gameshow.errors import InvalidStateTransition
from .countdown import CountdownController


class RoundStatus(str, Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    FINISHED = 'finished'


class RoundOutcome(str, Enum):
    EXPIRED = 'expired'
    MANUAL = 'manual'


class Round:

    def __init__(self, question: Dict[str, Any], duration: int, tick_source,
                 on_complete: Optional[Callable[['Round'], None]] = None,
                 on_tick: Optional[Callable[['Round', int], None]] = None,
                 logger: Optional[logging.Logger] = None):
        self.question_id = question['id']
        self.duration = duration
        self.status = RoundStatus.IDLE
        self.outcome: Optional[RoundOutcome] = None
        self.elapsed_seconds = 0
        self._tick_source = tick_source
        self._on_complete = on_complete
        self._on_tick = on_tick
        self._logger = logger or logging.getLogger(__name__)
        self.timer: Optional[CountdownController] = None

    @property
    def expired(self) -> bool:
        return self.outcome is RoundOutcome.EXPIRED

    @property
    def manual(self) -> bool:
        return self.outcome is RoundOutcome.MANUAL

    def start(self) -> None:
        if self.status is not RoundStatus.IDLE:
            raise InvalidStateTransition('start round', self.status.value)
        on_tick = None
        if self._on_tick is not None:
            on_tick = lambda remaining: self._on_tick(self, remaining)
        self.timer = CountdownController(self._tick_source, on_tick=on_tick, logger=self._logger)
        self.status = RoundStatus.RUNNING
        self.timer.start(self.duration, self._timer_expired)

    def force_finish(self) -> None:
        if self.status is not RoundStatus.RUNNING:
            raise InvalidStateTransition('force finish round', self.status.value)
        self.timer.stop()
        self._finish(RoundOutcome.MANUAL)

    def _timer_expired(self) -> None:
        if self.status is not RoundStatus.RUNNING:
            return
        self._finish(RoundOutcome.EXPIRED)

    def _finish(self, outcome: RoundOutcome) -> None:
        self.status = RoundStatus.FINISHED
        self.outcome = outcome
        self.elapsed_seconds = self.duration - self.timer.remaining_seconds
        self._logger.debug(
            f"[round-finish] question={self.question_id} outcome={outcome.value} elapsed={self.elapsed_seconds}s"
        )
        if self._on_complete is not None:
            self._on_complete(self)

    def snapshot(self) -> Dict[str, Any]:
        timer = self.timer.to_dict() if self.timer else {
            'total_seconds': self.duration,
            'remaining_seconds': self.duration,
            'running': False,
            'percent_remaining': 100 if self.duration else 0,
        }
        return {
            'question_id': self.question_id,
            'status': self.status.value,
            'outcome': self.outcome.value if self.outcome else None,
            'expired': self.expired,
            'manual': self.manual,
            'elapsed_seconds': self.elapsed_seconds,
            'timer': timer,
        }
