"""
===============================================================================
TARJETA CRC — infrastructure/store/repositories.py
===============================================================================

Clases:
  RemoteProfileRepository, RemoteCategoryRepository, RemoteResourceRepository,
  RemoteProjectRepository, RemoteAuditLogRepository, RemoteSystemConfigRepository

Responsabilidades:
  - Implementar los puertos de domain.repositories sobre un TableGateway.
  - Un método por operación (list, get, upsert, delete, code_exists).
  - Cada mutación agrega UNA entrada de auditoría (best-effort, vía AuditTrail).

Colaboradores:
  - domain.services.TableGateway (REST o in-memory)
  - infrastructure.store.rows (mapeo)
  - resourcevault.audit.AuditTrail

Notas:
  - Los errores del gateway (RemoteStoreError) se propagan sin envolver.
  - La auditoría se escribe DESPUÉS de la mutación exitosa.
===============================================================================
"""

from __future__ import annotations

from typing import List, Optional

from ...audit import AuditActor, AuditTrail
from ...domain.entities import (
    AuditAction,
    AuditLog,
    AuditTarget,
    Category,
    Project,
    Resource,
    Role,
    SystemConfig,
    User,
)
from ...domain.services import (
    AUDIT_LOGS_TABLE,
    CATEGORIES_TABLE,
    PROFILES_TABLE,
    PROJECTS_TABLE,
    RESOURCES_TABLE,
    SYSTEM_CONFIG_TABLE,
    Ordering,
    RowFilter,
    TableGateway,
)
from .rows import (
    SYSTEM_CONFIG_ROW_ID,
    audit_log_from_row,
    audit_log_to_row,
    category_from_row,
    category_to_row,
    project_from_row,
    project_to_row,
    resource_from_row,
    resource_to_row,
    system_config_from_row,
    system_config_to_row,
    user_from_row,
    user_to_row,
)


def _by_id(value: str) -> list[RowFilter]:
    return [RowFilter.eq("id", value)]


class RemoteProfileRepository:
    def __init__(self, gateway: TableGateway, audit: AuditTrail) -> None:
        self._gateway = gateway
        self._audit = audit

    def list_profiles(self) -> List[User]:
        rows = self._gateway.select(
            PROFILES_TABLE, order=[Ordering("username", ascending=True)]
        )
        return [user_from_row(r) for r in rows]

    def get_profile(self, user_id: str) -> Optional[User]:
        rows = self._gateway.select(PROFILES_TABLE, filters=_by_id(user_id), limit=1)
        return user_from_row(rows[0]) if rows else None

    def find_by_username(self, username: str) -> Optional[User]:
        rows = self._gateway.select(
            PROFILES_TABLE, filters=[RowFilter.eq("username", username)], limit=1
        )
        return user_from_row(rows[0]) if rows else None

    def insert_profile(self, user: User) -> User:
        rows = self._gateway.insert(PROFILES_TABLE, [user_to_row(user)])
        saved = user_from_row(rows[0]) if rows else user
        self._audit.record(
            AuditAction.CREATE,
            AuditTarget.USER.value,
            f"Created profile: {saved.username}",
            actor=AuditActor(user_id=saved.id, username=saved.username),
        )
        return saved

    def update_role(self, user_id: str, role: Role) -> None:
        self._gateway.update(
            PROFILES_TABLE, {"role": role.value}, filters=_by_id(user_id)
        )
        self._audit.record(
            AuditAction.UPDATE,
            AuditTarget.USER.value,
            f"Changed role of user {user_id} to {role.value}",
        )

    def update_details(
        self,
        user_id: str,
        *,
        full_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> None:
        values = {}
        if full_name is not None:
            values["full_name"] = full_name
        if avatar_url is not None:
            values["avatar_url"] = avatar_url
        if not values:
            return
        self._gateway.update(PROFILES_TABLE, values, filters=_by_id(user_id))
        self._audit.record(
            AuditAction.UPDATE,
            AuditTarget.PROFILE.value,
            f"Updated profile {user_id}: {', '.join(sorted(values))}",
        )

    def delete_profile(self, user_id: str) -> None:
        self._gateway.delete(PROFILES_TABLE, filters=_by_id(user_id))
        self._audit.record(
            AuditAction.DELETE, AuditTarget.USER.value, f"Deleted user {user_id}"
        )


class RemoteCategoryRepository:
    def __init__(self, gateway: TableGateway, audit: AuditTrail) -> None:
        self._gateway = gateway
        self._audit = audit

    def list_categories(self) -> List[Category]:
        rows = self._gateway.select(
            CATEGORIES_TABLE, order=[Ordering("created_at", ascending=True)]
        )
        return [category_from_row(r) for r in rows]

    def get_category(self, category_id: str) -> Optional[Category]:
        rows = self._gateway.select(
            CATEGORIES_TABLE, filters=_by_id(category_id), limit=1
        )
        return category_from_row(rows[0]) if rows else None

    def save_category(self, category: Category, *, is_new: bool) -> None:
        self._gateway.upsert(CATEGORIES_TABLE, [category_to_row(category)])
        action = AuditAction.CREATE if is_new else AuditAction.UPDATE
        self._audit.record(
            action, AuditTarget.SCHEMA.value, f"Saved category: {category.name}"
        )

    def delete_category(self, category: Category) -> None:
        self._gateway.delete(CATEGORIES_TABLE, filters=_by_id(category.id))
        self._audit.record(
            AuditAction.DELETE,
            AuditTarget.SCHEMA.value,
            f"Deleted category: {category.name}",
        )


class RemoteResourceRepository:
    def __init__(self, gateway: TableGateway, audit: AuditTrail) -> None:
        self._gateway = gateway
        self._audit = audit

    def list_resources(self, category_id: Optional[str] = None) -> List[Resource]:
        filters = [RowFilter.eq("category_id", category_id)] if category_id else []
        rows = self._gateway.select(
            RESOURCES_TABLE,
            filters=filters,
            order=[Ordering("created_at", ascending=False)],
        )
        return [resource_from_row(r) for r in rows]

    def save_resource(self, resource: Resource, *, is_new: bool) -> None:
        self._gateway.upsert(RESOURCES_TABLE, [resource_to_row(resource)])
        action = AuditAction.CREATE if is_new else AuditAction.UPDATE
        self._audit.record(
            action,
            AuditTarget.RESOURCE.value,
            f"Saved resource {resource.id} in category {resource.category_id}",
        )

    def delete_resource(self, resource: Resource) -> None:
        self._gateway.delete(RESOURCES_TABLE, filters=_by_id(resource.id))
        self._audit.record(
            AuditAction.DELETE,
            AuditTarget.RESOURCE.value,
            f"Deleted resource {resource.id} from category {resource.category_id}",
        )


class RemoteProjectRepository:
    def __init__(self, gateway: TableGateway, audit: AuditTrail) -> None:
        self._gateway = gateway
        self._audit = audit

    def list_projects(self) -> List[Project]:
        rows = self._gateway.select(
            PROJECTS_TABLE, order=[Ordering("code", ascending=True)]
        )
        return [project_from_row(r) for r in rows]

    def code_exists(self, code: str, exclude_id: Optional[str] = None) -> bool:
        filters = [RowFilter.eq("code", code)]
        if exclude_id:
            filters.append(RowFilter.neq("id", exclude_id))
        return bool(self._gateway.select(PROJECTS_TABLE, filters=filters, limit=1))

    def save_project(self, project: Project, *, is_new: bool) -> None:
        self._gateway.upsert(PROJECTS_TABLE, [project_to_row(project)])
        action = AuditAction.CREATE if is_new else AuditAction.UPDATE
        self._audit.record(
            action,
            AuditTarget.PROJECT.value,
            f"Saved project: {project.code} - {project.name}",
        )

    def delete_project(self, project: Project) -> None:
        self._gateway.delete(PROJECTS_TABLE, filters=_by_id(project.id))
        self._audit.record(
            AuditAction.DELETE,
            AuditTarget.PROJECT.value,
            f"Deleted project: {project.code}",
        )


class RemoteAuditLogRepository:
    """Sin auditoría propia: es el destino de la auditoría."""

    def __init__(self, gateway: TableGateway) -> None:
        self._gateway = gateway

    def append(self, entry: AuditLog) -> None:
        self._gateway.insert(AUDIT_LOGS_TABLE, [audit_log_to_row(entry)])

    def list_recent(self, limit: int) -> List[AuditLog]:
        rows = self._gateway.select(
            AUDIT_LOGS_TABLE,
            order=[Ordering("created_at", ascending=False)],
            limit=limit,
        )
        return [audit_log_from_row(r) for r in rows]


class RemoteSystemConfigRepository:
    def __init__(self, gateway: TableGateway, audit: AuditTrail) -> None:
        self._gateway = gateway
        self._audit = audit

    def get_config(self) -> SystemConfig:
        rows = self._gateway.select(
            SYSTEM_CONFIG_TABLE, filters=_by_id(SYSTEM_CONFIG_ROW_ID), limit=1
        )
        return system_config_from_row(rows[0] if rows else None)

    def save_config(self, config: SystemConfig) -> None:
        self._gateway.upsert(SYSTEM_CONFIG_TABLE, [system_config_to_row(config)])
        self._audit.record(
            AuditAction.UPDATE,
            AuditTarget.SETTINGS.value,
            f"Updated system settings: {config.site_name}",
        )
