"""Error taxonomy for the game show backend.

Every error carries a machine-readable ``code``, an HTTP ``status_code`` and
structured ``details`` so clients can correct their input without guessing.
Everything except :class:`StoreIntegrityError` is a recoverable condition
returned to the immediate caller.
"""

from typing import Any, Dict, Optional


class GameShowError(Exception):
    """Base application error class."""

    code = 'GAMESHOW_ERROR'
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'message': self.message,
            'details': dict(self.details),
        }


class ValidationError(GameShowError):
    """Malformed input to a create operation."""

    code = 'VALIDATION_ERROR'
    status_code = 400

    def __init__(self, field: str, constraint: str, message: Optional[str] = None):
        super().__init__(
            message or f"Invalid value for '{field}': {constraint}",
            {'field': field, 'constraint': constraint},
        )
        self.field = field
        self.constraint = constraint


class DuplicateKeyError(GameShowError):
    """A uniqueness constraint would be violated."""

    code = 'DUPLICATE_KEY'
    status_code = 409

    def __init__(self, field: str, value: Any):
        super().__init__(f"{field} '{value}' already exists", {'field': field, 'value': value})
        self.field = field
        self.value = value


class NotFoundError(GameShowError):
    code = 'NOT_FOUND'
    status_code = 404

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(f"{resource} '{resource_id}' not found", {'resource': resource, 'id': resource_id})
        self.resource = resource
        self.resource_id = resource_id


class UnauthorizedError(GameShowError):
    """Authentication failed.

    The message is fixed on purpose: an unknown user and a wrong password
    must look the same to the caller.
    """

    code = 'UNAUTHORIZED'
    status_code = 401

    def __init__(self, message: str = 'Invalid credentials'):
        super().__init__(message)


class ForbiddenError(GameShowError):
    code = 'FORBIDDEN'
    status_code = 403

    def __init__(self, message: str = 'Not allowed'):
        super().__init__(message)


class InvalidStateTransition(GameShowError):
    """An operation was called from a state that forbids it."""

    code = 'INVALID_STATE_TRANSITION'
    status_code = 409

    def __init__(self, operation: str, state: str):
        super().__init__(
            f"Cannot {operation} while {state}",
            {'operation': operation, 'state': state},
        )
        self.operation = operation
        self.state = state


class StoreIntegrityError(GameShowError):
    """The store's indexes disagree with its tables. Not recoverable."""

    code = 'STORE_INTEGRITY'
    status_code = 500
