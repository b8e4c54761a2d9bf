from gameshow import db
from flask_login import UserMixin
from datetime import datetime, timezone
import json
import uuid


def generate_id():
    """Generate a fresh, never reused entity id."""
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    # Insertion order for listings
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(36), unique=True, nullable=False, index=True, default=generate_id)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def get_id(self):
        return self.id

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Tournament(db.Model):
    __tablename__ = 'tournament'
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(36), unique=True, nullable=False, index=True, default=generate_id)
    name = db.Column(db.String(128), nullable=False)
    owner_user_id = db.Column(db.String(36), db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self):
        created = self.created_at
        if created is not None and created.tzinfo is None:
            # sqlite drops tzinfo on the way back
            created = created.replace(tzinfo=timezone.utc)
        return {
            'id': self.id,
            'name': self.name,
            'owner_user_id': self.owner_user_id,
            'created_at': created.isoformat() if created else None,
        }


class Question(db.Model):
    __tablename__ = 'question'
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(36), unique=True, nullable=False, index=True, default=generate_id)
    category = db.Column(db.String(128), nullable=False, default='')
    text = db.Column(db.Text, nullable=False)
    answer = db.Column(db.Text, nullable=False)
    choices = db.Column(db.Text, nullable=False)  # JSON-encoded list of strings
    points = db.Column(db.Integer, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'category': self.category,
            'text': self.text,
            'answer': self.answer,
            'choices': json.loads(self.choices) if self.choices else [],
            'points': self.points,
        }


class RoundResult(db.Model):
    __tablename__ = 'round_result'
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(36), unique=True, nullable=False, index=True, default=generate_id)
    tournament_id = db.Column(db.String(36), db.ForeignKey('tournament.id'), nullable=False, index=True)
    # Not a foreign key: the question may be deleted after the round was played
    question_id = db.Column(db.String(36), nullable=False)
    round_number = db.Column(db.Integer, nullable=False)
    outcome = db.Column(db.String(16), nullable=False)  # expired, manual
    elapsed_seconds = db.Column(db.Integer, nullable=False, default=0)
    selected_answer = db.Column(db.Text, nullable=True)
    correct = db.Column(db.Boolean, nullable=True)
    points_awarded = db.Column(db.Integer, nullable=False, default=0)
    finished_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self):
        finished = self.finished_at
        if finished is not None and finished.tzinfo is None:
            finished = finished.replace(tzinfo=timezone.utc)
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'question_id': self.question_id,
            'round_number': self.round_number,
            'outcome': self.outcome,
            'elapsed_seconds': self.elapsed_seconds,
            'selected_answer': self.selected_answer,
            'correct': self.correct,
            'points_awarded': self.points_awarded,
            'finished_at': finished.isoformat() if finished else None,
        }
