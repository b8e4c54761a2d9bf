"""Authoritative entity store for users, tournaments, questions and round results.

All reads and writes go through a single re-entrant lock, so every
check-then-insert sequence is atomic with respect to concurrent request
handlers. Each operation ends in a commit or a rollback and returns plain
dicts, never ORM instances, so callers cannot mutate stored state.
"""

import json
import logging
import random
import threading
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError

from gameshow.errors import DuplicateKeyError, NotFoundError, StoreIntegrityError, ValidationError
from gameshow.models import Question, RoundResult, Tournament, User
from gameshow.services.questions import DEFAULT_QUESTIONS


MIN_CHOICES = 2
MAX_CHOICES = 6
MIN_POINTS = 1
MAX_POINTS = 1000
ROUND_OUTCOMES = ('expired', 'manual')


def validate_question_fields(category, text, answer, choices, points) -> None:
    """Raise ValidationError naming the first field that breaks a constraint."""
    if not isinstance(category, str):
        raise ValidationError('category', 'must be a string')
    if not isinstance(text, str) or not text.strip():
        raise ValidationError('text', 'must be a non-empty string')
    if not isinstance(answer, str) or not answer:
        raise ValidationError('answer', 'must be a non-empty string')
    if not isinstance(choices, (list, tuple)) or not all(isinstance(c, str) for c in choices):
        raise ValidationError('choices', 'must be a list of strings')
    if not MIN_CHOICES <= len(choices) <= MAX_CHOICES:
        raise ValidationError(
            'choices',
            f'length must be between {MIN_CHOICES} and {MAX_CHOICES}',
        )
    # bool is an int subclass; reject it explicitly
    if isinstance(points, bool) or not isinstance(points, int):
        raise ValidationError('points', 'must be an integer')
    if not MIN_POINTS <= points <= MAX_POINTS:
        raise ValidationError('points', f'must be between {MIN_POINTS} and {MAX_POINTS}')


class EntityStore:
    """Transactional store over the SQLAlchemy session of the given ``db``."""

    def __init__(self, db, password_hasher=None, logger: Optional[logging.Logger] = None):
        self._db = db
        self._hash_password = password_hasher
        self._lock = threading.RLock()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def session(self):
        return self._db.session

    def _commit(self, operation: str) -> None:
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            self._logger.error(f"[store-rollback] op={operation}")
            raise

    # ---- lifecycle ----

    def initialize(self, admin_username: str = 'admin', admin_password: str = 'password',
                   seed_questions: bool = True) -> None:
        """Create tables and seed defaults. Safe to call repeatedly."""
        with self._lock:
            self._db.create_all()
            if not User.query.filter_by(username=admin_username).first():
                if self._hash_password is None:
                    raise StoreIntegrityError('No password hasher configured for seeding')
                self.session.add(User(username=admin_username, password_hash=self._hash_password(admin_password)))
                self._commit('seed-admin')
                self._logger.info(f"[store-seed] admin user '{admin_username}' created")
            if seed_questions and Question.query.count() == 0:
                for q in DEFAULT_QUESTIONS:
                    self.session.add(Question(
                        category=q['category'],
                        text=q['text'],
                        answer=q['answer'],
                        choices=json.dumps(list(q['choices'])),
                        points=q['points'],
                    ))
                self._commit('seed-questions')
                self._logger.info(f"[store-seed] {len(DEFAULT_QUESTIONS)} default questions added")

    # ---- users ----

    def create_user(self, username: str, password_hash: str) -> Dict[str, Any]:
        if not isinstance(username, str) or not username:
            raise ValidationError('username', 'must be a non-empty string')
        if not isinstance(password_hash, str) or not password_hash:
            raise ValidationError('password_hash', 'must be a non-empty string')
        with self._lock:
            if User.query.filter_by(username=username).first() is not None:
                raise DuplicateKeyError('username', username)
            user = User(username=username, password_hash=password_hash)
            self.session.add(user)
            try:
                self.session.commit()
            except IntegrityError as exc:
                self.session.rollback()
                # The locked lookup said absent but the unique index disagrees
                raise StoreIntegrityError(
                    f"username index rejected '{username}' after lookup reported it absent",
                    {'entity': 'user', 'field': 'username'},
                ) from exc
            return user.to_dict()

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            user = User.query.filter_by(id=user_id).first()
            return user.to_dict() if user else None

    def find_user_by_username(self, username: str, include_hash: bool = False) -> Optional[Dict[str, Any]]:
        with self._lock:
            user = User.query.filter_by(username=username).first()
            if not user:
                return None
            data = user.to_dict()
            if include_hash:
                data['password_hash'] = user.password_hash
            return data

    def load_user(self, user_id: str) -> Optional[User]:
        """Return the ORM user for Flask-Login; everything else gets dicts."""
        with self._lock:
            return User.query.filter_by(id=user_id).first()

    # ---- tournaments ----

    def create_tournament(self, name: str, owner_user_id: str) -> Dict[str, Any]:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError('name', 'must be a non-empty string')
        with self._lock:
            if User.query.filter_by(id=owner_user_id).first() is None:
                raise NotFoundError('user', owner_user_id)
            tournament = Tournament(name=name, owner_user_id=owner_user_id)
            self.session.add(tournament)
            self._commit('create-tournament')
            return tournament.to_dict()

    def get_tournament(self, tournament_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            t = Tournament.query.filter_by(id=tournament_id).first()
            return t.to_dict() if t else None

    def list_tournaments(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [t.to_dict() for t in Tournament.query.order_by(Tournament.seq).all()]

    # ---- questions ----

    def add_question(self, category: str, text: str, answer: str, choices: Sequence[str],
                     points: int) -> Dict[str, Any]:
        validate_question_fields(category, text, answer, choices, points)
        with self._lock:
            question = Question(
                category=category,
                text=text,
                answer=answer,
                choices=json.dumps(list(choices)),
                points=points,
            )
            self.session.add(question)
            self._commit('add-question')
            return question.to_dict()

    def delete_question(self, question_id: str) -> bool:
        """Delete by id. Missing ids are a no-op and still report success."""
        with self._lock:
            Question.query.filter_by(id=question_id).delete()
            self._commit('delete-question')
            return True

    def get_question(self, question_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            q = Question.query.filter_by(id=question_id).first()
            return q.to_dict() if q else None

    def get_all_questions(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [q.to_dict() for q in Question.query.order_by(Question.seq).all()]

    def get_random_question(self) -> Optional[Dict[str, Any]]:
        questions = self.get_all_questions()
        return random.choice(questions) if questions else None

    def get_question_by_category(self, category: str) -> Optional[Dict[str, Any]]:
        """Random question from ``category``; any random question if it has none."""
        matching = [q for q in self.get_all_questions() if q['category'] == category]
        if not matching:
            return self.get_random_question()
        return random.choice(matching)

    def list_categories(self) -> List[str]:
        """Distinct question categories in first-seen order."""
        return list(dict.fromkeys(q['category'] for q in self.get_all_questions()))

    # ---- round results ----

    def record_round_result(self, tournament_id: str, question_id: str, round_number: int,
                            outcome: str, elapsed_seconds: int, selected_answer: Optional[str] = None,
                            correct: Optional[bool] = None, points_awarded: int = 0) -> Dict[str, Any]:
        if outcome not in ROUND_OUTCOMES:
            raise ValidationError('outcome', f"must be one of {', '.join(ROUND_OUTCOMES)}")
        with self._lock:
            if Tournament.query.filter_by(id=tournament_id).first() is None:
                raise NotFoundError('tournament', tournament_id)
            result = RoundResult(
                tournament_id=tournament_id,
                question_id=question_id,
                round_number=round_number,
                outcome=outcome,
                elapsed_seconds=elapsed_seconds,
                selected_answer=selected_answer,
                correct=correct,
                points_awarded=points_awarded,
            )
            self.session.add(result)
            self._commit('record-round-result')
            return result.to_dict()

    def list_round_results(self, tournament_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            rows = RoundResult.query.filter_by(tournament_id=tournament_id).order_by(RoundResult.seq).all()
            return [r.to_dict() for r in rows]
