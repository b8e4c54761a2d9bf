from flask import Flask, current_app, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


def get_store():
    return current_app.extensions['entity_store']


def get_gate():
    return current_app.extensions['access_gate']


def get_sessions():
    return current_app.extensions['round_sessions']


def get_tick_source():
    return current_app.extensions['tick_source']


def initialize_store(flask_app):
    """Create tables and seed the organizer account and question bank."""
    with flask_app.app_context():
        flask_app.extensions['entity_store'].initialize(
            admin_username=flask_app.config.get('ADMIN_USERNAME', 'admin'),
            admin_password=flask_app.config.get('ADMIN_PASSWORD', 'password'),
            seed_questions=flask_app.config.get('SEED_QUESTIONS', True),
        )


def create_app(config_class=Config, tick_source=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Core services live on the app so their lifetime follows it
    from gameshow.services.store import EntityStore
    from gameshow.services.auth import AccessGate, CredentialSigner
    from gameshow.services.rounds import BackgroundTickSource, SessionRegistry

    def hash_password(password):
        return bcrypt.generate_password_hash(password).decode('utf-8')

    store = EntityStore(db, password_hasher=hash_password, logger=flask_app.logger)
    signer = CredentialSigner(flask_app.config['SECRET_KEY'], max_age=int(flask_app.config.get('TOKEN_MAX_AGE_SEC', 43200)))
    flask_app.extensions['entity_store'] = store
    flask_app.extensions['access_gate'] = AccessGate(store, bcrypt, signer, logger=flask_app.logger)
    flask_app.extensions['round_sessions'] = SessionRegistry()
    if tick_source is None:
        tick_source = BackgroundTickSource(
            socketio,
            app=flask_app,
            heartbeat=int(flask_app.config.get('TIMER_HEARTBEAT_SEC', 0)),
            logger=flask_app.logger,
        )
    flask_app.extensions['tick_source'] = tick_source

    # Import and register blueprints here
    from gameshow.error_handlers import error_handlers
    flask_app.register_blueprint(error_handlers)

    from gameshow.api.auth import auth
    flask_app.register_blueprint(auth, url_prefix='/api/auth')

    from gameshow.api.questions import questions
    flask_app.register_blueprint(questions, url_prefix='/api/questions')

    from gameshow.api.tournaments import tournaments
    # Session control routes hang off the tournament blueprint
    flask_app.register_blueprint(tournaments, url_prefix='/api/tournaments')

    @flask_app.route('/')
    def index():
        return jsonify({'message': 'Welcome to the game show server!'})

    # Register Socket.IO event handlers
    from gameshow.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Bearer credentials instead of session cookies
    from gameshow.errors import UnauthorizedError

    @login_manager.request_loader
    def load_user_from_request(request):
        header = request.headers.get('Authorization', '')
        scheme, _, token = header.partition(' ')
        if scheme.lower() != 'bearer' or not token:
            return None
        try:
            payload = get_gate().verify(token.strip())
        except UnauthorizedError:
            return None
        user = get_store().load_user(payload['sub'])
        if user is None or user.username != payload.get('username'):
            return None
        return user

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': UnauthorizedError('Login required').to_dict()}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
        initialize_store(flask_app)
        print('Database has been reset and seeded!')

    @click.command('db-init')
    def db_init_command():
        """Creates missing tables and seeds defaults (idempotent)."""
        initialize_store(flask_app)
        print('Database initialized.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(db_init_command)

    return flask_app
