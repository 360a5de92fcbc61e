"""Authentication state for the clinic tool.

:class:`AuthSession` is the single holder of "who is logged in". It starts
from whatever snapshot the store already holds (nothing on a fresh store),
is replaced on every successful login and is cleared by :meth:`logout`.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .errors import AuthError, AuthResult, ConflictError, SchemaError, ValidationError
from .models import Role, SessionSnapshot, User
from .navigation import AccessDecision, decide_access
from .repositories import DUPLICATE_LOGIN_MESSAGE, UserRepository
from .store import SESSION_KEY, KeyValueStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Usuario o contraseña incorrectos"


class AuthSession:
    def __init__(self, users: UserRepository, store: KeyValueStore) -> None:
        self._users = users
        self._store = store

    def current(self) -> Optional[SessionSnapshot]:
        """Return the logged-in identity, if any. Never mutates state."""

        payload = self._store.get(SESSION_KEY, None)
        if payload is None:
            return None
        try:
            return SessionSnapshot.from_row(payload)
        except SchemaError as exc:
            logger.warning("Ignoring malformed session: %s", exc.message)
            return None

    def login(self, login_name: str, password: str) -> AuthResult[SessionSnapshot]:
        # Login names match case-sensitively here, unlike the uniqueness check.
        for user in self._users.list():
            if user.login_name == login_name and user.password == password:
                snapshot = SessionSnapshot.from_user(user)
                self._store.set(SESSION_KEY, snapshot.to_row())
                logger.info("User %s logged in as %s", snapshot.login_name, snapshot.role.value)
                return AuthResult(success=True, value=snapshot)

        logger.warning("Failed login attempt for %s", login_name)
        return AuthResult(
            success=False,
            error=AuthError.INVALID_CREDENTIALS,
            message=INVALID_CREDENTIALS_MESSAGE,
        )

    def logout(self) -> None:
        previous = self.current()
        self._store.delete(SESSION_KEY)
        if previous is not None:
            logger.info("User %s logged out", previous.login_name)

    def register(self, user: User) -> AuthResult[User]:
        """Create a new account; the login name must be unique ignoring case."""

        if user.login_name and self._users.find_by_login(user.login_name) is not None:
            return AuthResult(
                success=False,
                error=AuthError.DUPLICATE_LOGIN,
                message=DUPLICATE_LOGIN_MESSAGE,
            )
        try:
            created = self._users.upsert(user.with_id(None) if user.id else user)
        except ConflictError as exc:
            return AuthResult(success=False, error=AuthError.DUPLICATE_LOGIN, message=exc.message)
        except ValidationError as exc:
            return AuthResult(success=False, error=AuthError.INVALID_USER, message=exc.message)
        return AuthResult(success=True, value=created)

    def require(self, roles: Optional[Iterable[Role]] = None) -> AccessDecision:
        return decide_access(self.current(), roles)
