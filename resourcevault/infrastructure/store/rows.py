"""
===============================================================================
TARJETA CRC — infrastructure/store/rows.py
===============================================================================

Módulo:
    Mapeo filas del store <-> entidades del dominio

Responsabilidades:
    - Traducir columnas snake_case y JSON embebido (fields, data, config)
      a las entidades de domain.entities y de vuelta.
    - Tolerar filas legadas: tags desconocidos, nulls, claves faltantes.

Colaboradores:
    - infrastructure.store.repositories (Remote*Repository)
    - infrastructure.in_memory (mismo formato de fila)

Notas:
    - `system_config.config` guarda claves camelCase (siteName, logoUrl...).
    - Un tipo de campo desconocido se lee como texto; un access level
      desconocido se lee como restringido.
===============================================================================
"""

from __future__ import annotations

from typing import Any, Mapping

from ...crosscutting.logger import logger
from ...domain.entities import (
    DEFAULT_CATEGORY_ICON,
    DEFAULT_SYSTEM_CONFIG,
    AccessLevel,
    AuditAction,
    AuditLog,
    Category,
    FieldDefinition,
    FieldType,
    Project,
    ProjectStatus,
    Resource,
    Role,
    SystemConfig,
    User,
)

SYSTEM_CONFIG_ROW_ID = 1


def _str(value: Any) -> str:
    return "" if value is None else str(value)


_TRUE_TEXT = frozenset({"true", "1"})
_FALSE_TEXT = frozenset({"false", "0", ""})


def _bool(value: Any, default: bool) -> bool:
    """Solo acepta booleanos reales o su texto; cualquier otra cosa => default."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_TEXT:
            return True
        if text in _FALSE_TEXT:
            return False
    return default


def _enum(enum_cls, value: Any, default):
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(
            "Valor desconocido en fila del store",
            extra={"enum": enum_cls.__name__, "value": _str(value)},
        )
        return default


# -----------------------------------------------------------------------------
# profiles
# -----------------------------------------------------------------------------


def user_from_row(row: Mapping[str, Any]) -> User:
    role = row.get("role")
    return User(
        id=_str(row.get("id")),
        username=_str(row.get("username")),
        email=_str(row.get("email")),
        role=_enum(Role, role, Role.USER) if role else Role.USER,
        full_name=_str(row.get("full_name")),
        avatar_url=_str(row.get("avatar_url")),
    )


def user_to_row(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role.value,
        "full_name": user.full_name,
        "avatar_url": user.avatar_url,
    }


# -----------------------------------------------------------------------------
# categories
# -----------------------------------------------------------------------------


def field_from_json(raw: Mapping[str, Any]) -> FieldDefinition:
    return FieldDefinition(
        id=_str(raw.get("id")),
        name=_str(raw.get("name")),
        key=_str(raw.get("key")),
        type=_enum(FieldType, raw.get("type"), FieldType.TEXT),
        required=bool(raw.get("required", False)),
    )


def field_to_json(f: FieldDefinition) -> dict[str, Any]:
    return {
        "id": f.id,
        "name": f.name,
        "key": f.key,
        "type": f.type.value,
        "required": f.required,
    }


def category_from_row(row: Mapping[str, Any]) -> Category:
    created_at = row.get("created_at")
    return Category(
        id=_str(row.get("id")),
        name=_str(row.get("name")),
        description=_str(row.get("description")),
        fields=tuple(field_from_json(f) for f in (row.get("fields") or [])),
        access_level=_enum(
            AccessLevel, row.get("access_level") or "public", AccessLevel.RESTRICTED
        ),
        icon=_str(row.get("icon")) or DEFAULT_CATEGORY_ICON,
        created_at=int(created_at) if created_at is not None else None,
    )


def category_to_row(category: Category) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "fields": [field_to_json(f) for f in category.fields],
        "access_level": category.access_level.value,
        "icon": category.icon,
    }
    if category.created_at is not None:
        row["created_at"] = category.created_at
    return row


# -----------------------------------------------------------------------------
# resources
# -----------------------------------------------------------------------------


def resource_from_row(row: Mapping[str, Any]) -> Resource:
    return Resource(
        id=_str(row.get("id")),
        category_id=_str(row.get("category_id")),
        data=dict(row.get("data") or {}),
        created_by=_str(row.get("created_by")),
        created_at=int(row.get("created_at") or 0),
    )


def resource_to_row(resource: Resource) -> dict[str, Any]:
    return {
        "id": resource.id,
        "category_id": resource.category_id,
        "data": dict(resource.data),
        "created_by": resource.created_by,
        "created_at": resource.created_at,
    }


# -----------------------------------------------------------------------------
# projects
# -----------------------------------------------------------------------------


def project_from_row(row: Mapping[str, Any]) -> Project:
    created_at = row.get("created_at")
    return Project(
        id=_str(row.get("id")),
        code=_str(row.get("code")),
        name=_str(row.get("name")),
        description=_str(row.get("description")),
        status=_enum(ProjectStatus, row.get("status") or "active", ProjectStatus.ACTIVE),
        created_at=_str(created_at) if created_at is not None else None,
    )


def project_to_row(project: Project) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": project.id,
        "code": project.code,
        "name": project.name,
        "description": project.description,
        "status": project.status.value,
    }
    if project.created_at is not None:
        row["created_at"] = project.created_at
    return row


# -----------------------------------------------------------------------------
# audit_logs
# -----------------------------------------------------------------------------


def audit_log_from_row(row: Mapping[str, Any]) -> AuditLog:
    created_at = row.get("created_at")
    return AuditLog(
        id=_str(row.get("id")),
        user_id=_str(row.get("user_id")),
        username=_str(row.get("username")),
        action=_enum(AuditAction, row.get("action"), AuditAction.UPDATE),
        target=_str(row.get("target")),
        details=_str(row.get("details")),
        created_at=_str(created_at) if created_at is not None else None,
    )


def audit_log_to_row(entry: AuditLog) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": entry.id,
        "user_id": entry.user_id,
        "username": entry.username,
        "action": entry.action.value,
        "target": entry.target,
        "details": entry.details,
    }
    if entry.created_at is not None:
        row["created_at"] = entry.created_at
    return row


# -----------------------------------------------------------------------------
# system_config (fila única, JSON camelCase)
# -----------------------------------------------------------------------------

_CONFIG_KEYS: dict[str, str] = {
    "site_name": "siteName",
    "site_description": "siteDescription",
    "contact_email": "contactEmail",
    "footer_text": "footerText",
    "logo_url": "logoUrl",
    "favicon_url": "faviconUrl",
    "allow_registration": "allowRegistration",
}


def system_config_from_row(row: Mapping[str, Any] | None) -> SystemConfig:
    """Mezcla la config guardada sobre los defaults (claves faltantes => default)."""
    stored = (row or {}).get("config") or {}
    values: dict[str, Any] = {}
    for attr, json_key in _CONFIG_KEYS.items():
        default = getattr(DEFAULT_SYSTEM_CONFIG, attr)
        raw = stored.get(json_key, default)
        if raw is None:
            raw = default
        values[attr] = _bool(raw, default) if isinstance(default, bool) else _str(raw)
    return SystemConfig(**values)


def system_config_to_row(config: SystemConfig) -> dict[str, Any]:
    return {
        "id": SYSTEM_CONFIG_ROW_ID,
        "config": {
            json_key: getattr(config, attr) for attr, json_key in _CONFIG_KEYS.items()
        },
    }
