from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError
from .errors import GameShowError, StoreIntegrityError

error_handlers = Blueprint('error_handlers', __name__)


@error_handlers.app_errorhandler(StoreIntegrityError)
def handle_store_integrity_error(error):
    """Store invariants broke; the operation was aborted."""
    current_app.logger.error(f"[store-integrity] {error.message} details={error.details}")
    return jsonify({'error': error.to_dict()}), error.status_code


@error_handlers.app_errorhandler(GameShowError)
def handle_gameshow_error(error):
    """Recoverable domain errors go back to the caller as structured JSON."""
    current_app.logger.warning(f"[{error.code.lower()}] {error.message}")
    return jsonify({'error': error.to_dict()}), error.status_code


@error_handlers.app_errorhandler(SQLAlchemyError)
def handle_db_error(error):
    current_app.logger.error(f"[db-error] {error}")
    return jsonify({'error': {'code': 'DATABASE_ERROR', 'message': 'Database error', 'details': {}}}), 500


@error_handlers.app_errorhandler(404)
def handle_404(error):
    return jsonify({'error': {'code': 'NOT_FOUND', 'message': 'Not found', 'details': {}}}), 404
