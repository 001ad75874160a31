"""
===============================================================================
TARJETA CRC — resourcevault/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer adapters (gateway REST, auth, storage, change feed) y
    repositorios a partir de Settings.
  - Elegir adapters in-memory en test o cuando no hay backend configurado.
  - Exponer factories de casos de uso (una por operación de la consola).
  - Mantener el grafo como singleton (lru_cache) para el proceso.

Colaboradores:
  - resourcevault.crosscutting.config.get_settings
  - resourcevault.domain.repositories.* / domain.services.* (puertos)
  - resourcevault.infrastructure.* (implementaciones)
  - resourcevault.application.usecases.* (casos de uso)

Notas:
  - Este archivo NO contiene lógica de negocio.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

from .application.csv_codec import ValueLocale
from .application.uploads import AssetUploader
from .application.usecases import (
    ChangePasswordUseCase,
    CurrentUserUseCase,
    DeleteCategoryUseCase,
    DeleteProjectUseCase,
    DeleteResourceUseCase,
    DeleteUserUseCase,
    DuplicateResourceUseCase,
    ExportResourcesUseCase,
    GetSystemConfigUseCase,
    ImportResourcesUseCase,
    ListActivityLogsUseCase,
    ListCategoriesUseCase,
    ListProjectsUseCase,
    ListResourcesUseCase,
    ListUsersUseCase,
    LoginUseCase,
    LogoutUseCase,
    RegisterUseCase,
    SaveCategoryUseCase,
    SaveProjectUseCase,
    SaveResourceUseCase,
    SaveSystemConfigUseCase,
    ShowResourceUseCase,
    UpdateProfileUseCase,
    UpdateUserRoleUseCase,
    UploadAttachmentUseCase,
)
from .audit import AuditTrail
from .crosscutting.config import Settings, get_settings
from .crosscutting.logger import logger
from .domain.services import AuthPort, ChangeFeed, FileStoragePort, TableGateway
from .infrastructure.auth import GoTrueAuthAdapter
from .infrastructure.in_memory import (
    InMemoryAuth,
    InMemoryFileStorage,
    InMemoryTableGateway,
)
from .infrastructure.realtime import PgChangeFeed
from .infrastructure.rest import PostgrestTableGateway
from .infrastructure.storage import S3Config, S3PublicStorageAdapter
from .infrastructure.store import (
    RemoteAuditLogRepository,
    RemoteCategoryRepository,
    RemoteProfileRepository,
    RemoteProjectRepository,
    RemoteResourceRepository,
    RemoteSystemConfigRepository,
)


@dataclass
class VaultServices:
    """Grafo de dependencias ya compuesto."""

    settings: Settings
    gateway: TableGateway
    auth: AuthPort
    storage: FileStoragePort
    feed: Optional[ChangeFeed]
    audit_logs: RemoteAuditLogRepository
    profiles: RemoteProfileRepository
    categories: RemoteCategoryRepository
    resources: RemoteResourceRepository
    projects: RemoteProjectRepository
    system_config: RemoteSystemConfigRepository
    uploader: AssetUploader
    locale: ValueLocale

    def close(self) -> None:
        for component in (self.feed, self.gateway, self.auth):
            close = getattr(component, "close", None)
            if callable(close):
                close()


# =============================================================================
# Adapters
# =============================================================================


def _build_remote_adapters(settings: Settings) -> tuple[Any, Any, Any, Any]:
    auth = GoTrueAuthAdapter(
        base_url=settings.backend_url + settings.auth_path,
        api_key=settings.backend_anon_key,
        timeout=settings.http_timeout_seconds,
    )
    gateway = PostgrestTableGateway(
        base_url=settings.backend_url + settings.rest_path,
        api_key=settings.backend_anon_key,
        token_provider=auth.current_access_token,
        timeout=settings.http_timeout_seconds,
    )
    storage = S3PublicStorageAdapter(
        S3Config(
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            public_base_url=settings.storage_public_url,
            region=settings.s3_region or None,
            endpoint_url=settings.s3_endpoint_url or None,
        )
    )
    feed = None
    if settings.database_url:
        feed = PgChangeFeed(
            settings.database_url,
            channel=settings.change_feed_channel,
            poll_seconds=settings.change_feed_poll_seconds,
        )
    else:
        logger.warning("database_url not set: live lists will not auto-refresh")
    return gateway, auth, storage, feed


def build_services(settings: Settings | None = None) -> VaultServices:
    """
    Compone el grafo completo.

    Regla:
      - app_env == "test" o backend_url vacío => adapters in-memory.
    """
    settings = settings or get_settings()

    if settings.uses_in_memory_backend():
        memory_gateway = InMemoryTableGateway()
        gateway, auth, storage, feed = (
            memory_gateway,
            InMemoryAuth(),
            InMemoryFileStorage(),
            memory_gateway,
        )
        logger.info("using in-memory backend", extra={"app_env": settings.app_env})
    else:
        gateway, auth, storage, feed = _build_remote_adapters(settings)

    audit_logs = RemoteAuditLogRepository(gateway)
    trail = AuditTrail(audit_logs)
    return VaultServices(
        settings=settings,
        gateway=gateway,
        auth=auth,
        storage=storage,
        feed=feed,
        audit_logs=audit_logs,
        profiles=RemoteProfileRepository(gateway, trail),
        categories=RemoteCategoryRepository(gateway, trail),
        resources=RemoteResourceRepository(gateway, trail),
        projects=RemoteProjectRepository(gateway, trail),
        system_config=RemoteSystemConfigRepository(gateway, trail),
        uploader=AssetUploader(storage, settings),
        locale=ValueLocale.from_settings(settings),
    )


@lru_cache(maxsize=1)
def get_services() -> VaultServices:
    return build_services(get_settings())


# =============================================================================
# Casos de uso
# =============================================================================


def get_login_use_case(s: VaultServices) -> LoginUseCase:
    return LoginUseCase(s.auth, s.profiles, s.audit_logs)


def get_register_use_case(s: VaultServices) -> RegisterUseCase:
    return RegisterUseCase(
        s.auth,
        s.profiles,
        s.system_config,
        min_password_length=s.settings.min_password_length,
    )


def get_logout_use_case(s: VaultServices) -> LogoutUseCase:
    return LogoutUseCase(s.auth)


def get_current_user_use_case(s: VaultServices) -> CurrentUserUseCase:
    return CurrentUserUseCase(s.auth, s.profiles)


def get_list_users_use_case(s: VaultServices) -> ListUsersUseCase:
    return ListUsersUseCase(s.profiles, page_size=s.settings.page_size)


def get_update_user_role_use_case(s: VaultServices) -> UpdateUserRoleUseCase:
    return UpdateUserRoleUseCase(s.profiles)


def get_delete_user_use_case(s: VaultServices) -> DeleteUserUseCase:
    return DeleteUserUseCase(s.profiles)


def get_update_profile_use_case(s: VaultServices) -> UpdateProfileUseCase:
    return UpdateProfileUseCase(s.profiles, s.uploader)


def get_change_password_use_case(s: VaultServices) -> ChangePasswordUseCase:
    return ChangePasswordUseCase(
        s.auth, s.audit_logs, min_password_length=s.settings.min_password_length
    )


def get_list_categories_use_case(s: VaultServices) -> ListCategoriesUseCase:
    return ListCategoriesUseCase(s.categories)


def get_save_category_use_case(s: VaultServices) -> SaveCategoryUseCase:
    return SaveCategoryUseCase(s.categories)


def get_delete_category_use_case(s: VaultServices) -> DeleteCategoryUseCase:
    return DeleteCategoryUseCase(s.categories)


def get_list_resources_use_case(s: VaultServices) -> ListResourcesUseCase:
    return ListResourcesUseCase(
        s.resources,
        s.categories,
        zone=s.settings.zone(),
        page_size=s.settings.page_size,
    )


def get_show_resource_use_case(s: VaultServices) -> ShowResourceUseCase:
    return ShowResourceUseCase(s.projects, s.profiles, locale=s.locale)


def get_save_resource_use_case(s: VaultServices) -> SaveResourceUseCase:
    return SaveResourceUseCase(s.resources)


def get_duplicate_resource_use_case(s: VaultServices) -> DuplicateResourceUseCase:
    return DuplicateResourceUseCase()


def get_delete_resource_use_case(s: VaultServices) -> DeleteResourceUseCase:
    return DeleteResourceUseCase(s.resources)


def get_import_resources_use_case(s: VaultServices) -> ImportResourcesUseCase:
    return ImportResourcesUseCase(s.resources, s.projects, s.profiles, locale=s.locale)


def get_export_resources_use_case(s: VaultServices) -> ExportResourcesUseCase:
    return ExportResourcesUseCase(s.projects, s.profiles, locale=s.locale)


def get_upload_attachment_use_case(s: VaultServices) -> UploadAttachmentUseCase:
    return UploadAttachmentUseCase(s.uploader)


def get_list_projects_use_case(s: VaultServices) -> ListProjectsUseCase:
    return ListProjectsUseCase(s.projects, page_size=s.settings.page_size)


def get_save_project_use_case(s: VaultServices) -> SaveProjectUseCase:
    return SaveProjectUseCase(s.projects)


def get_delete_project_use_case(s: VaultServices) -> DeleteProjectUseCase:
    return DeleteProjectUseCase(s.projects)


def get_system_config_use_case(s: VaultServices) -> GetSystemConfigUseCase:
    return GetSystemConfigUseCase(s.system_config)


def get_save_system_config_use_case(s: VaultServices) -> SaveSystemConfigUseCase:
    return SaveSystemConfigUseCase(s.system_config, s.uploader)


def get_list_activity_logs_use_case(s: VaultServices) -> ListActivityLogsUseCase:
    return ListActivityLogsUseCase(
        s.audit_logs,
        limit=s.settings.audit_log_limit,
        page_size=s.settings.page_size,
    )
