from flask import Blueprint, jsonify, request
from flask_login import login_required
from gameshow import get_store
from gameshow.errors import NotFoundError

questions = Blueprint('questions', __name__)


@questions.route('', methods=['GET'])
def list_questions():
    return jsonify(get_store().get_all_questions())


@questions.route('', methods=['POST'])
@login_required
def add_question():
    data = request.get_json(silent=True) or {}
    question = get_store().add_question(
        category=data.get('category', ''),
        text=data.get('text'),
        answer=data.get('answer'),
        choices=data.get('choices'),
        points=data.get('points'),
    )
    return jsonify(question), 201


@questions.route('/random', methods=['GET'])
def random_question():
    category = request.args.get('category')
    store = get_store()
    question = store.get_question_by_category(category) if category else store.get_random_question()
    if question is None:
        raise NotFoundError('question', category or 'any')
    return jsonify(question)


@questions.route('/categories', methods=['GET'])
def list_categories():
    return jsonify(get_store().list_categories())


@questions.route('/<string:question_id>', methods=['GET'])
def get_question(question_id):
    question = get_store().get_question(question_id)
    if question is None:
        raise NotFoundError('question', question_id)
    return jsonify(question)


@questions.route('/<string:question_id>', methods=['DELETE'])
@login_required
def delete_question(question_id):
    # Deleting a missing question still reports success
    get_store().delete_question(question_id)
    return jsonify({'success': True})
