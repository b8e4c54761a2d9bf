"""Round sessions: consecutive timed rounds for one tournament.

A session walks an ordered question set, keeps exactly one round running,
persists a result for every completed round and finishes after the last one.
Tick deliveries and caller operations share one lock, so an expiry and a
manual finish can never both complete the same round.
"""

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from gameshow.errors import InvalidStateTransition, NotFoundError, ValidationError
from .clock import LockedTickSource
from .countdown import percent_of
from .round import Round, RoundStatus


Emitter = Callable[[str, Dict[str, Any]], None]


class SessionStatus(str, Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    FINISHED = 'finished'


def _public_question(question: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'id': question['id'],
        'category': question.get('category'),
        'text': question.get('text'),
        'choices': list(question.get('choices') or []),
        'points': question.get('points'),
    }


class RoundSession:

    def __init__(self, tournament_id: str, questions: Sequence[Dict[str, Any]], store, tick_source,
                 duration: int = 30, max_rounds: int = 10, emit: Optional[Emitter] = None,
                 logger: Optional[logging.Logger] = None):
        if isinstance(duration, bool) or not isinstance(duration, int) or duration < 1:
            raise ValidationError('duration', 'must be a positive integer')
        if isinstance(max_rounds, bool) or not isinstance(max_rounds, int) or max_rounds < 1:
            raise ValidationError('max_rounds', 'must be a positive integer')
        questions = [dict(q) for q in questions][:max_rounds]
        if not questions:
            raise ValidationError('question_ids', 'at least one question is required')
        self.tournament_id = tournament_id
        self.duration = duration
        self.status = SessionStatus.IDLE
        self.score = 0
        self.results: List[Dict[str, Any]] = []
        self.current_round: Optional[Round] = None
        self._questions = questions
        self._index = -1
        self._store = store
        self._ticks = LockedTickSource(tick_source)
        self._lock = self._ticks.lock
        self._emit_fn = emit
        self._logger = logger or logging.getLogger(__name__)
        self._pending_answer: Optional[Dict[str, Any]] = None
        self._stopping = False

    @property
    def total_rounds(self) -> int:
        return len(self._questions)

    @property
    def round_number(self) -> int:
        return self._index + 1

    @property
    def current_question(self) -> Optional[Dict[str, Any]]:
        if 0 <= self._index < len(self._questions):
            return self._questions[self._index]
        return None

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        if self._emit_fn is None:
            return
        payload = dict(payload, tournament_id=self.tournament_id)
        self._emit_fn(event, payload)

    # ---- operations ----

    def start(self) -> Dict[str, Any]:
        with self._lock:
            if self.status is not SessionStatus.IDLE:
                raise InvalidStateTransition('start session', self.status.value)
            self.status = SessionStatus.RUNNING
            self._logger.info(
                f"[session-start] tournament={self.tournament_id} rounds={self.total_rounds} duration={self.duration}s"
            )
            self._start_next_round()
            return self.state()

    def submit_answer(self, choice: str) -> Dict[str, Any]:
        """Answer the running round; ends it early with the manual flag."""
        with self._lock:
            rnd = self._require_running_round('submit answer')
            if not isinstance(choice, str) or not choice:
                raise ValidationError('choice', 'must be a non-empty string')
            question = self.current_question
            correct = choice == question.get('answer')
            self._pending_answer = {
                'selected_answer': choice,
                'correct': correct,
                'points_awarded': int(question.get('points') or 0) if correct else 0,
            }
            rnd.force_finish()
            return self.results[-1]

    def force_finish(self) -> Dict[str, Any]:
        with self._lock:
            rnd = self._require_running_round('force finish round')
            rnd.force_finish()
            return self.results[-1]

    def stop(self) -> Dict[str, Any]:
        """End the session now; the interrupted round is not recorded."""
        with self._lock:
            if self.status is SessionStatus.FINISHED:
                return self.state()
            rnd = self.current_round
            if rnd is not None and rnd.status is RoundStatus.RUNNING:
                self._stopping = True
                try:
                    rnd.force_finish()
                finally:
                    self._stopping = False
            self._finish_session(stopped=True)
            return self.state()

    def state(self) -> Dict[str, Any]:
        with self._lock:
            rnd = self.current_round
            question = self.current_question
            return {
                'tournament_id': self.tournament_id,
                'status': self.status.value,
                'round_number': self.round_number,
                'total_rounds': self.total_rounds,
                'duration': self.duration,
                'score': self.score,
                'question': _public_question(question) if question else None,
                'round': rnd.snapshot() if rnd else None,
                'results': [dict(r) for r in self.results],
            }

    # ---- internals ----

    def _require_running_round(self, operation: str) -> Round:
        if self.status is not SessionStatus.RUNNING:
            raise InvalidStateTransition(operation, self.status.value)
        rnd = self.current_round
        if rnd is None or rnd.status is not RoundStatus.RUNNING:
            state = rnd.status.value if rnd else 'idle'
            raise InvalidStateTransition(operation, state)
        return rnd

    def _start_next_round(self) -> None:
        self._index += 1
        question = self._questions[self._index]
        rnd = Round(
            question,
            self.duration,
            self._ticks,
            on_complete=self._round_completed,
            on_tick=self._timer_tick,
            logger=self._logger,
        )
        self.current_round = rnd
        rnd.start()
        self._logger.info(
            f"[round-start] tournament={self.tournament_id} round={self.round_number}/{self.total_rounds} question={rnd.question_id}"
        )
        self._emit('round:started', {
            'round_number': self.round_number,
            'total_rounds': self.total_rounds,
            'duration': self.duration,
            'question': _public_question(question),
        })

    def _timer_tick(self, rnd: Round, remaining: int) -> None:
        self._emit('timer:update', {
            'round_number': self.round_number,
            'remaining': remaining,
            'percent': percent_of(remaining, rnd.duration),
        })
        if remaining == 0:
            self._emit('timer:end', {'round_number': self.round_number})

    def _round_completed(self, rnd: Round) -> None:
        if self._stopping:
            return
        try:
            self._record_and_advance(rnd)
        except Exception:
            # No round is left running; close the session instead of stranding it
            self._logger.error(
                f"[round-complete-failed] tournament={self.tournament_id} round={self.round_number}; finishing session"
            )
            self._abort()
            raise

    def _abort(self) -> None:
        current = self.current_round
        if current is not None and current.timer is not None:
            current.timer.stop()
        self._pending_answer = None
        self._finish_session(stopped=True)

    def _record_and_advance(self, rnd: Round) -> None:
        answer = self._pending_answer or {}
        self._pending_answer = None
        question = self.current_question
        result = self._store.record_round_result(
            tournament_id=self.tournament_id,
            question_id=rnd.question_id,
            round_number=self.round_number,
            outcome=rnd.outcome.value,
            elapsed_seconds=rnd.elapsed_seconds,
            selected_answer=answer.get('selected_answer'),
            correct=answer.get('correct'),
            points_awarded=answer.get('points_awarded', 0),
        )
        self.results.append(result)
        self.score += result['points_awarded']
        self._logger.info(
            f"[round-complete] tournament={self.tournament_id} round={self.round_number} outcome={rnd.outcome.value} elapsed={rnd.elapsed_seconds}s"
        )
        self._emit('round:complete', {
            'round_number': self.round_number,
            'question_id': rnd.question_id,
            'answer': question.get('answer'),
            'outcome': rnd.outcome.value,
            'expired': rnd.expired,
            'manual': rnd.manual,
            'elapsed_seconds': rnd.elapsed_seconds,
            'result': dict(result),
            'score': self.score,
        })
        if self._index + 1 < len(self._questions):
            self._start_next_round()
        else:
            self._finish_session(stopped=False)

    def _finish_session(self, stopped: bool) -> None:
        self.status = SessionStatus.FINISHED
        self._logger.info(
            f"[session-finish] tournament={self.tournament_id} rounds_played={len(self.results)} score={self.score} stopped={stopped}"
        )
        self._emit('session:finished', {
            'stopped': stopped,
            'score': self.score,
            'results': [dict(r) for r in self.results],
        })
        self._emit('state_update', {'status': self.status.value})


class SessionRegistry:
    """Active round sessions, at most one per tournament."""

    def __init__(self):
        self._sessions: Dict[str, RoundSession] = {}
        self._lock = threading.Lock()

    def start(self, session: RoundSession) -> Dict[str, Any]:
        tournament_id = session.tournament_id
        with self._lock:
            existing = self._sessions.get(tournament_id)
            # An idle session is mid-start and already holds the slot
            if existing is not None and existing.status is not SessionStatus.FINISHED:
                raise InvalidStateTransition('start session', existing.status.value)
            self._sessions[tournament_id] = session
        try:
            return session.start()
        except Exception:
            with self._lock:
                if self._sessions.get(tournament_id) is session:
                    del self._sessions[tournament_id]
            raise

    def get(self, tournament_id: str) -> RoundSession:
        with self._lock:
            session = self._sessions.get(tournament_id)
        if session is None:
            raise NotFoundError('session', tournament_id)
        return session

    def stop_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.stop()
