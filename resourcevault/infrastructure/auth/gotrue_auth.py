"""
============================================================
TARJETA CRC — infrastructure/auth/gotrue_auth.py
============================================================
Class: GoTrueAuthAdapter

Responsibilities:
  - Implementar AuthPort contra un servicio de auth estilo GoTrue.
  - Sign-in por email/password, sign-up, sign-out, update-password.
  - Mantener la sesión actual en memoria y refrescarla al expirar.
  - Exponer el access token para el gateway REST (RLS).

Collaborators:
  - domain.services.AuthPort, AuthSession
  - crosscutting.exceptions.AuthError / NotAuthenticatedError
  - httpx (HTTP client, transport inyectable para tests)
============================================================
"""

from __future__ import annotations

import threading
import time
from typing import Any, Optional

import httpx

from ...crosscutting.exceptions import AuthError, NotAuthenticatedError
from ...crosscutting.logger import logger
from ...domain.services import AuthSession

# Margen para refrescar antes de la expiración real.
_REFRESH_LEEWAY_SECONDS = 30


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("error_description", "msg", "message", "error"):
            if payload.get(key):
                return str(payload[key])
    return f"Authentication request failed ({response.status_code})"


def _session_from_payload(payload: dict[str, Any], fallback_email: str) -> AuthSession:
    user = payload.get("user") or payload
    expires_at = payload.get("expires_at")
    if expires_at is None and payload.get("expires_in"):
        expires_at = int(time.time()) + int(payload["expires_in"])
    return AuthSession(
        user_id=str(user.get("id", "")),
        email=str(user.get("email") or fallback_email),
        access_token=str(payload.get("access_token") or ""),
        refresh_token=str(payload.get("refresh_token") or ""),
        expires_at=int(expires_at) if expires_at is not None else None,
    )


class GoTrueAuthAdapter:
    """Implementación de AuthPort sobre HTTP."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required for the auth adapter")
        self._api_key = api_key
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"apikey": api_key},
        )
        self._lock = threading.Lock()
        self._session: AuthSession | None = None

    def close(self) -> None:
        self._client.close()

    # =========================================================================
    # AuthPort
    # =========================================================================

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        payload = self._post(
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = _session_from_payload(payload, email)
        with self._lock:
            self._session = session
        logger.info("auth sign-in ok", extra={"user_id": session.user_id})
        return session

    def sign_up(self, email: str, password: str) -> AuthSession:
        payload = self._post("/signup", json={"email": email, "password": password})
        session = _session_from_payload(payload, email)
        if not session.user_id:
            raise AuthError("Sign-up did not return a user")
        if session.access_token:
            with self._lock:
                self._session = session
        return session

    def sign_out(self) -> None:
        with self._lock:
            session, self._session = self._session, None
        if session is None or not session.access_token:
            return
        self._post("/logout", token=session.access_token)

    def get_session(self) -> Optional[AuthSession]:
        with self._lock:
            session = self._session
        if session is None:
            return None
        if session.expires_at is None or (
            session.expires_at - _REFRESH_LEEWAY_SECONDS > time.time()
        ):
            return session
        return self._refresh(session)

    def update_password(self, new_password: str) -> None:
        session = self.get_session()
        if session is None or not session.access_token:
            raise NotAuthenticatedError("No active session")
        self._request(
            "PUT", "/user", json={"password": new_password}, token=session.access_token
        )

    def current_access_token(self) -> Optional[str]:
        session = self.get_session()
        return session.access_token if session and session.access_token else None

    # =========================================================================
    # Internals
    # =========================================================================

    def _refresh(self, session: AuthSession) -> Optional[AuthSession]:
        if not session.refresh_token:
            with self._lock:
                self._session = None
            return None
        try:
            payload = self._post(
                "/token",
                params={"grant_type": "refresh_token"},
                json={"refresh_token": session.refresh_token},
            )
        except AuthError as exc:
            logger.warning(
                "auth session refresh failed",
                extra={"user_id": session.user_id, "error": exc.message},
            )
            with self._lock:
                self._session = None
            return None
        refreshed = _session_from_payload(payload, session.email)
        with self._lock:
            self._session = refreshed
        return refreshed

    def _post(
        self,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        token: str | None = None,
    ) -> dict[str, Any]:
        return self._request("POST", path, params=params, json=json, token=token)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        token: str | None = None,
    ) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {token or self._api_key}"}
        try:
            response = self._client.request(
                method, path, params=params, json=json, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning(
                "auth request failed", extra={"path": path, "status": status}
            )
            raise AuthError(
                _error_message(exc.response), status_code=status, original_error=exc
            ) from exc
        except httpx.RequestError as exc:
            logger.error(
                "auth service unreachable", extra={"path": path, "error": str(exc)}
            )
            raise AuthError(
                f"Could not reach the auth service: {exc}", original_error=exc
            ) from exc

        if not response.content:
            return {}
        body = response.json()
        return body if isinstance(body, dict) else {}
