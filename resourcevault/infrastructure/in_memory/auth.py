"""
============================================================
TARJETA CRC — infrastructure/in_memory/auth.py
============================================================
Class: InMemoryAuth

Responsibilities:
  - Emular el servicio de auth (tests / local dev).
  - Cuentas email -> (user_id, password); sesión actual única.

Collaborators:
  - domain.services.AuthPort, AuthSession
  - crosscutting.exceptions.AuthError / NotAuthenticatedError

Notes:
  - Passwords en claro: solo para tests, nunca para producción.
============================================================
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional

from ...crosscutting.exceptions import AuthError, NotAuthenticatedError
from ...domain.entities import new_id
from ...domain.services import AuthSession


@dataclass
class _Account:
    user_id: str
    email: str
    password: str


class InMemoryAuth:
    def __init__(self) -> None:
        self._lock = Lock()
        self._accounts: Dict[str, _Account] = {}
        self._session: AuthSession | None = None

    def add_account(self, email: str, password: str, user_id: str | None = None) -> str:
        """Alta directa (fixtures). Devuelve el user_id."""
        account = _Account(user_id=user_id or new_id(), email=email.lower(), password=password)
        with self._lock:
            self._accounts[account.email] = account
        return account.user_id

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        with self._lock:
            account = self._accounts.get(email.strip().lower())
            if account is None or account.password != password:
                raise AuthError("Invalid login credentials", status_code=400)
            self._session = self._new_session(account)
            return self._session

    def sign_up(self, email: str, password: str) -> AuthSession:
        key = email.strip().lower()
        with self._lock:
            if key in self._accounts:
                raise AuthError("User already registered", status_code=422)
            account = _Account(user_id=new_id(), email=key, password=password)
            self._accounts[key] = account
            self._session = self._new_session(account)
            return self._session

    def sign_out(self) -> None:
        with self._lock:
            self._session = None

    def get_session(self) -> Optional[AuthSession]:
        with self._lock:
            return self._session

    def update_password(self, new_password: str) -> None:
        with self._lock:
            if self._session is None:
                raise NotAuthenticatedError("No active session")
            self._accounts[self._session.email].password = new_password

    def current_access_token(self) -> Optional[str]:
        session = self.get_session()
        return session.access_token if session else None

    @staticmethod
    def _new_session(account: _Account) -> AuthSession:
        return AuthSession(
            user_id=account.user_id,
            email=account.email,
            access_token=secrets.token_hex(16),
            refresh_token=secrets.token_hex(16),
        )
