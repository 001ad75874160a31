"""
===============================================================================
USE CASES: Authentication (login / register / logout / current user)
===============================================================================

Business Goal:
    Iniciar y cerrar sesión contra el servicio de auth gestionado y resolver
    el perfil (fila `profiles`) del usuario autenticado.

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Classes:
    LoginUseCase, RegisterUseCase, LogoutUseCase, CurrentUserUseCase

Collaborators:
    - AuthPort (sign in / sign up / sign out / session)
    - ProfileRepository (perfil por id, por username, alta)
    - SystemConfigRepository (allow_registration)
    - AuditLogRepository (LOGIN)

Reglas:
    - Login acepta e-mail o username; un username se traduce al e-mail del
      perfil ANTES de llamar a auth.
    - Si el perfil no existe tras un login válido, se crea con rol `user` y
      username = prefijo del e-mail.
    - Registro: todos los campos obligatorios, passwords iguales, largo
      mínimo, y bloqueado si la configuración no permite registros.
    - Sesión restaurada sin fila de perfil => usuario derivado del e-mail.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ...audit import AuditActor, emit_audit_log
from ...crosscutting.exceptions import VaultError
from ...crosscutting.logger import logger
from ...domain.entities import AuditAction, AuditTarget, Role, User
from ...domain.repositories import (
    AuditLogRepository,
    ProfileRepository,
    SystemConfigRepository,
)
from ...domain.services import AuthPort, AuthSession
from .results import (
    CommandResult,
    UserResult,
    conflict,
    forbidden,
    remote_error,
    validation_error,
)
from .system_config import load_system_config


def username_from_email(email: str) -> str:
    return email.split("@", 1)[0]


def fallback_user(session: AuthSession) -> User:
    return User(
        id=session.user_id,
        username=username_from_email(session.email),
        email=session.email,
        role=Role.USER,
    )


# =============================================================================
# Login
# =============================================================================


@dataclass(frozen=True)
class LoginInput:
    identifier: str
    password: str


class LoginUseCase:
    def __init__(
        self,
        auth: AuthPort,
        profiles: ProfileRepository,
        audit_logs: AuditLogRepository | None = None,
    ) -> None:
        self._auth = auth
        self._profiles = profiles
        self._audit_logs = audit_logs

    def execute(self, input_data: LoginInput) -> UserResult:
        identifier = input_data.identifier.strip()
        if not identifier or not input_data.password:
            return UserResult(
                error=validation_error("Please enter your username and password")
            )

        try:
            # -----------------------------------------------------------------
            # 1) Username -> e-mail
            # -----------------------------------------------------------------
            email = identifier
            if "@" not in identifier:
                profile = self._profiles.find_by_username(identifier)
                if profile is None:
                    return UserResult(error=validation_error("Username not found"))
                email = profile.email

            # -----------------------------------------------------------------
            # 2) Auth + perfil (auto-reparación si falta)
            # -----------------------------------------------------------------
            session = self._auth.sign_in_with_password(email, input_data.password)
            user = self._profiles.get_profile(session.user_id)
            if user is None:
                logger.info(
                    "profile missing after login, creating it",
                    extra={"user_id": session.user_id},
                )
                user = self._profiles.insert_profile(fallback_user(session))
        except VaultError as exc:
            return UserResult(error=remote_error(exc, "login"))

        emit_audit_log(
            self._audit_logs,
            action=AuditAction.LOGIN,
            target=AuditTarget.SYSTEM.value,
            details="User logged in",
            actor=AuditActor(user_id=user.id, username=user.username),
        )
        return UserResult(user=user)


# =============================================================================
# Register
# =============================================================================


@dataclass(frozen=True)
class RegisterInput:
    email: str
    username: str
    full_name: str
    password: str
    confirm_password: str


class RegisterUseCase:
    def __init__(
        self,
        auth: AuthPort,
        profiles: ProfileRepository,
        system_config: SystemConfigRepository,
        *,
        min_password_length: int = 6,
    ) -> None:
        self._auth = auth
        self._profiles = profiles
        self._system_config = system_config
        self._min_length = min_password_length

    def execute(self, input_data: RegisterInput) -> UserResult:
        if not load_system_config(self._system_config).allow_registration:
            return UserResult(error=forbidden("Registration is disabled"))

        email = input_data.email.strip()
        username = input_data.username.strip()
        full_name = input_data.full_name.strip()
        if not all((email, username, full_name, input_data.password)):
            return UserResult(error=validation_error("Please fill in all fields"))
        if input_data.password != input_data.confirm_password:
            return UserResult(error=validation_error("Passwords do not match"))
        if len(input_data.password) < self._min_length:
            return UserResult(
                error=validation_error(
                    f"Password must be at least {self._min_length} characters"
                )
            )

        try:
            if self._profiles.find_by_username(username) is not None:
                return UserResult(error=conflict("Username is already taken"))
            session = self._auth.sign_up(email, input_data.password)
            user = self._profiles.insert_profile(
                User(
                    id=session.user_id,
                    username=username,
                    email=email,
                    role=Role.USER,
                    full_name=full_name,
                )
            )
        except VaultError as exc:
            return UserResult(error=remote_error(exc, "register"))
        return UserResult(user=user)


# =============================================================================
# Logout / current user
# =============================================================================


class LogoutUseCase:
    def __init__(self, auth: AuthPort) -> None:
        self._auth = auth

    def execute(self) -> CommandResult:
        try:
            self._auth.sign_out()
        except VaultError as exc:
            return CommandResult(error=remote_error(exc, "logout"))
        return CommandResult(ok=True)


class CurrentUserUseCase:
    """Usuario de la sesión vigente; `user=None` sin error si no hay sesión."""

    def __init__(self, auth: AuthPort, profiles: ProfileRepository) -> None:
        self._auth = auth
        self._profiles = profiles

    def execute(self) -> UserResult:
        session = self._auth.get_session()
        if session is None:
            return UserResult()
        try:
            user = self._profiles.get_profile(session.user_id)
        except VaultError as exc:
            return UserResult(error=remote_error(exc, "current_user"))
        return UserResult(user=user or fallback_user(session))
