from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required
from gameshow import get_gate
from gameshow.errors import ValidationError

auth = Blueprint('auth', __name__)


@auth.route('/login', methods=['POST', 'OPTIONS'])
def login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    if not isinstance(username, str) or not username:
        raise ValidationError('username', 'must be a non-empty string')
    if not isinstance(password, str) or not password:
        raise ValidationError('password', 'must be a non-empty string')
    return jsonify(get_gate().login(username, password))


@auth.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})
