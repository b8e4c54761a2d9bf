from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from gameshow import get_sessions, get_store, get_tick_source, socketio
from gameshow.errors import ForbiddenError, NotFoundError, ValidationError
from gameshow.services.rounds import RoundSession

tournaments = Blueprint('tournaments', __name__)


def tournament_room(tournament_id):
    return f"tournament:{tournament_id}"


def _room_emitter(tournament_id):
    room = tournament_room(tournament_id)

    def emit(event, payload):
        socketio.emit(event, payload, to=room, namespace='/ws')

    return emit


def _get_tournament_or_404(tournament_id):
    tournament = get_store().get_tournament(tournament_id)
    if tournament is None:
        raise NotFoundError('tournament', tournament_id)
    return tournament


def _require_owner(tournament):
    if tournament['owner_user_id'] != current_user.id:
        raise ForbiddenError('Only the tournament owner may control its rounds')


@tournaments.route('', methods=['GET'])
def list_tournaments():
    return jsonify(get_store().list_tournaments())


@tournaments.route('', methods=['POST'])
@login_required
def create_tournament():
    data = request.get_json(silent=True) or {}
    tournament = get_store().create_tournament(data.get('name'), current_user.id)
    current_app.logger.info(f"[tournament-create] id={tournament['id']} owner={current_user.id}")
    return jsonify(tournament), 201


@tournaments.route('/<string:tournament_id>', methods=['GET'])
def get_tournament(tournament_id):
    return jsonify(_get_tournament_or_404(tournament_id))


@tournaments.route('/<string:tournament_id>/results', methods=['GET'])
def list_results(tournament_id):
    _get_tournament_or_404(tournament_id)
    return jsonify(get_store().list_round_results(tournament_id))


# ---- round session control ----

@tournaments.route('/<string:tournament_id>/session/start', methods=['POST'])
@login_required
def start_session(tournament_id):
    tournament = _get_tournament_or_404(tournament_id)
    _require_owner(tournament)
    data = request.get_json(silent=True) or {}
    store = get_store()
    cfg = current_app.config

    question_ids = data.get('question_ids')
    if question_ids is None:
        question_set = store.get_all_questions()
    else:
        if not isinstance(question_ids, list) or not all(isinstance(q, str) for q in question_ids):
            raise ValidationError('question_ids', 'must be a list of question ids')
        question_set = []
        for qid in question_ids:
            question = store.get_question(qid)
            if question is None:
                raise NotFoundError('question', qid)
            question_set.append(question)

    session = RoundSession(
        tournament_id,
        question_set,
        store,
        get_tick_source(),
        duration=data.get('duration', int(cfg.get('QUESTION_DURATION_SEC', 30))),
        max_rounds=data.get('rounds', int(cfg.get('ROUNDS_PER_GAME', 10))),
        emit=_room_emitter(tournament_id),
        logger=current_app.logger,
    )
    state = get_sessions().start(session)
    return jsonify(state), 201


@tournaments.route('/<string:tournament_id>/session', methods=['GET'])
def session_state(tournament_id):
    return jsonify(get_sessions().get(tournament_id).state())


@tournaments.route('/<string:tournament_id>/session/answer', methods=['POST'])
@login_required
def submit_answer(tournament_id):
    _require_owner(_get_tournament_or_404(tournament_id))
    data = request.get_json(silent=True) or {}
    session = get_sessions().get(tournament_id)
    result = session.submit_answer(data.get('choice'))
    return jsonify({'result': result, 'state': session.state()})


@tournaments.route('/<string:tournament_id>/session/finish', methods=['POST'])
@login_required
def finish_round(tournament_id):
    _require_owner(_get_tournament_or_404(tournament_id))
    session = get_sessions().get(tournament_id)
    result = session.force_finish()
    return jsonify({'result': result, 'state': session.state()})


@tournaments.route('/<string:tournament_id>/session/stop', methods=['POST'])
@login_required
def stop_session(tournament_id):
    _require_owner(_get_tournament_or_404(tournament_id))
    session = get_sessions().get(tournament_id)
    return jsonify(session.stop())
