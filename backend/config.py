import os


def _env_flag(name, default):
    return (os.environ.get(name) or default).lower() in ('true', '1', 't', 'yes')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///gameshow.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Round timers (seconds)
    QUESTION_DURATION_SEC = int(os.environ.get('QUESTION_DURATION_SEC', '30'))
    ROUNDS_PER_GAME = int(os.environ.get('ROUNDS_PER_GAME', '10'))
    # Signed credential lifetime (seconds)
    TOKEN_MAX_AGE_SEC = int(os.environ.get('TOKEN_MAX_AGE_SEC', '43200'))
    # Seeded organizer account
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME') or 'admin'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'password'
    SEED_QUESTIONS = _env_flag('SEED_QUESTIONS', 'true')
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', '12'))
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
