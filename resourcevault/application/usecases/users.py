"""
===============================================================================
USE CASES: Users & Profile
===============================================================================

Business Goal:
    - Admin: listar usuarios, cambiar roles y borrar cuentas.
    - Cualquier usuario: editar su perfil y cambiar su contraseña.

Reglas:
    - Un admin no puede borrarse a sí mismo.
    - Degradar el propio rol exige confirmación explícita.
    - Cambio de contraseña: nueva == confirmación, largo mínimo, y la
      contraseña actual se verifica re-autenticando.
    - El avatar pasa por los pre-checks de AssetUploader (imagen, ≤ 2MB).

Collaborators:
    - ProfileRepository, AuthPort, AssetUploader, AuditLogRepository
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ...audit import AuditActor, emit_audit_log
from ...crosscutting.exceptions import AuthError, VaultError
from ...crosscutting.pagination import paginate
from ...domain.entities import AuditAction, AuditTarget, Role, User
from ...domain.permissions import can_manage_users
from ...domain.repositories import AuditLogRepository, ProfileRepository
from ...domain.services import AuthPort
from ..filtering import ALL_OPTION, filter_users
from ..uploads import AssetUploader, UploadedFile, UploadRejectedError
from .results import (
    CommandResult,
    UserListResult,
    UserResult,
    forbidden,
    remote_error,
    validation_error,
)


class ListUsersUseCase:
    def __init__(self, profiles: ProfileRepository, *, page_size: int = 10) -> None:
        self._profiles = profiles
        self._page_size = page_size

    def execute(
        self,
        actor: User | None,
        *,
        search: str = "",
        role: str = ALL_OPTION,
        page: int | None = None,
    ) -> UserListResult:
        if not can_manage_users(actor):
            return UserListResult(error=forbidden("Only admins can manage users"))
        try:
            users = self._profiles.list_profiles()
        except VaultError as exc:
            return UserListResult(error=remote_error(exc, "list_users"))
        users = filter_users(users, search, role)
        if page is None:
            return UserListResult(users=users)
        current = paginate(users, page, self._page_size)
        return UserListResult(users=current.items, page_info=current.page_info)


@dataclass(frozen=True)
class UpdateUserRoleInput:
    actor: User | None
    target: User
    role: Role
    confirm_self_demotion: bool = False


class UpdateUserRoleUseCase:
    def __init__(self, profiles: ProfileRepository) -> None:
        self._profiles = profiles

    def execute(self, input_data: UpdateUserRoleInput) -> UserResult:
        actor = input_data.actor
        if not can_manage_users(actor):
            return UserResult(error=forbidden("Only admins can manage users"))

        target = input_data.target
        demoting_self = (
            actor.id == target.id and input_data.role != Role.ADMIN
        )
        if demoting_self and not input_data.confirm_self_demotion:
            return UserResult(
                error=validation_error("Confirm removing your own admin role")
            )

        try:
            self._profiles.update_role(target.id, input_data.role)
        except VaultError as exc:
            return UserResult(error=remote_error(exc, "update_user_role"))
        return UserResult(user=replace(target, role=input_data.role))


class DeleteUserUseCase:
    def __init__(self, profiles: ProfileRepository) -> None:
        self._profiles = profiles

    def execute(self, actor: User | None, target: User) -> CommandResult:
        if not can_manage_users(actor):
            return CommandResult(error=forbidden("Only admins can manage users"))
        if actor.id == target.id:
            return CommandResult(error=validation_error("You cannot delete yourself"))
        try:
            self._profiles.delete_profile(target.id)
        except VaultError as exc:
            return CommandResult(error=remote_error(exc, "delete_user"))
        return CommandResult(ok=True)


# =============================================================================
# Perfil propio
# =============================================================================


@dataclass(frozen=True)
class UpdateProfileInput:
    actor: User | None
    full_name: str
    avatar: UploadedFile | None = None


class UpdateProfileUseCase:
    def __init__(self, profiles: ProfileRepository, uploader: AssetUploader) -> None:
        self._profiles = profiles
        self._uploader = uploader

    def execute(self, input_data: UpdateProfileInput) -> UserResult:
        actor = input_data.actor
        if actor is None:
            return UserResult(error=forbidden("Login required"))

        full_name = input_data.full_name.strip()
        avatar_url: str | None = None
        try:
            if input_data.avatar is not None:
                avatar_url = self._uploader.upload_avatar(actor.id, input_data.avatar)
            self._profiles.update_details(
                actor.id, full_name=full_name, avatar_url=avatar_url
            )
        except UploadRejectedError as exc:
            return UserResult(error=validation_error(exc.message))
        except VaultError as exc:
            return UserResult(error=remote_error(exc, "update_profile"))

        return UserResult(
            user=replace(
                actor,
                full_name=full_name,
                avatar_url=avatar_url if avatar_url is not None else actor.avatar_url,
            )
        )


@dataclass(frozen=True)
class ChangePasswordInput:
    actor: User | None
    old_password: str
    new_password: str
    confirm_password: str


class ChangePasswordUseCase:
    def __init__(
        self,
        auth: AuthPort,
        audit_logs: AuditLogRepository | None,
        *,
        min_password_length: int = 6,
    ) -> None:
        self._auth = auth
        self._audit_logs = audit_logs
        self._min_length = min_password_length

    def execute(self, input_data: ChangePasswordInput) -> CommandResult:
        actor = input_data.actor
        if actor is None:
            return CommandResult(error=forbidden("Login required"))
        if input_data.new_password != input_data.confirm_password:
            return CommandResult(error=validation_error("Passwords do not match"))
        if len(input_data.new_password) < self._min_length:
            return CommandResult(
                error=validation_error(
                    f"Password must be at least {self._min_length} characters"
                )
            )

        try:
            self._auth.sign_in_with_password(actor.email, input_data.old_password)
        except AuthError:
            return CommandResult(error=validation_error("Old password is incorrect"))

        try:
            self._auth.update_password(input_data.new_password)
        except VaultError as exc:
            return CommandResult(error=remote_error(exc, "change_password"))

        emit_audit_log(
            self._audit_logs,
            action=AuditAction.UPDATE,
            target=AuditTarget.PROFILE.value,
            details="Changed password",
            actor=AuditActor(user_id=actor.id, username=actor.username),
        )
        return CommandResult(ok=True)
