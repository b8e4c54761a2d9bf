"""Access gate: password login and signed session credentials."""

import logging
from typing import Any, Dict, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from gameshow.errors import UnauthorizedError


TOKEN_SALT = 'gameshow-credential'


class CredentialSigner:
    """Opaque ``sign(payload) -> token`` / ``verify(token) -> payload``."""

    def __init__(self, secret_key: str, max_age: int = 43200):
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)
        self.max_age = max_age

    def sign(self, payload: Dict[str, Any]) -> str:
        return self._serializer.dumps(payload)

    def verify(self, token: str) -> Dict[str, Any]:
        if not token:
            raise UnauthorizedError('Missing credential')
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired as exc:
            raise UnauthorizedError('Credential expired') from exc
        except BadSignature as exc:
            raise UnauthorizedError('Invalid credential') from exc
        if not isinstance(payload, dict) or not payload.get('sub'):
            raise UnauthorizedError('Invalid credential')
        return payload


class AccessGate:
    """Authenticates principals against the entity store."""

    def __init__(self, store, bcrypt, signer: CredentialSigner, logger: Optional[logging.Logger] = None):
        self._store = store
        self._bcrypt = bcrypt
        self._signer = signer
        self._logger = logger or logging.getLogger(__name__)
        self._dummy_hash = None

    def _burn_hash_check(self, password: str) -> None:
        # Unknown users still pay for one bcrypt check
        if self._dummy_hash is None:
            self._dummy_hash = self._bcrypt.generate_password_hash('not-a-real-password').decode('utf-8')
        self._bcrypt.check_password_hash(self._dummy_hash, password)

    def login(self, username: str, password: str) -> Dict[str, Any]:
        """Return ``{'token': ..., 'user': {...}}`` or raise UnauthorizedError."""
        if not isinstance(username, str) or not isinstance(password, str):
            raise UnauthorizedError()
        user = self._store.find_user_by_username(username, include_hash=True)
        if user is None:
            self._burn_hash_check(password)
            self._logger.info('[login-fail] reason=credentials')
            raise UnauthorizedError()
        if not self._bcrypt.check_password_hash(user['password_hash'], password):
            self._logger.info('[login-fail] reason=credentials')
            raise UnauthorizedError()
        token = self._signer.sign({'sub': user['id'], 'username': user['username']})
        self._logger.info(f"[login-ok] user={user['id']}")
        return {'token': token, 'user': {'id': user['id'], 'username': user['username']}}

    def verify(self, token: str) -> Dict[str, Any]:
        return self._signer.verify(token)

    def hash_password(self, password: str) -> str:
        return self._bcrypt.generate_password_hash(password).decode('utf-8')
