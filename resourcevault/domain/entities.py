"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del dominio (usuarios, esquemas, recursos, proyectos, auditoría)

Responsabilidades:
    - Definir los "shapes" de datos que fluyen por la consola.
    - Centralizar los catálogos cerrados (roles, tipos de campo, estados).
    - Proveer helpers mínimos de identidad y tiempo (ids, epoch millis).

Colaboradores:
    - domain.schema / domain.permissions: reglas puras sobre estas entidades.
    - infrastructure.store.rows: mapea filas remotas <-> entidades.

Notas:
    - Resource.created_at es epoch millis; Project.created_at es ISO string.
      La asimetría viene del store y se conserva.
    - Resource.data guarda valores crudos (lo que persiste el store); la
      interpretación tipada vive en domain.field_values.
===============================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import uuid4

# Centinela de relación: "todos los proyectos / usuarios".
WILDCARD = "all"


def new_id() -> str:
    return str(uuid4())


def now_millis() -> int:
    return int(time.time() * 1000)


# =============================================================================
# Usuarios
# =============================================================================


class Role(str, Enum):
    """Roles de la consola."""

    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


@dataclass(frozen=True, slots=True)
class User:
    """Perfil de usuario (fila `profiles`)."""

    id: str
    username: str
    email: str
    role: Role = Role.USER
    full_name: str = ""
    avatar_url: str = ""

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


# =============================================================================
# Esquemas (Category) y recursos
# =============================================================================


class FieldType(str, Enum):
    """Tags de tipo de campo tal como se guardan en el store."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    PROJECT = "project"
    USER = "user"
    IMAGE = "image"
    FILE = "file"

    @property
    def is_relation(self) -> bool:
        return self in (FieldType.PROJECT, FieldType.USER)

    @property
    def is_attachment(self) -> bool:
        return self in (FieldType.IMAGE, FieldType.FILE)


class AccessLevel(str, Enum):
    PUBLIC = "public"
    RESTRICTED = "restricted"


DEFAULT_CATEGORY_ICON = "📁"


@dataclass(frozen=True, slots=True)
class FieldDefinition:
    """Un campo del esquema: `key` es estable, `name` es solo display."""

    id: str
    name: str
    key: str
    type: FieldType = FieldType.TEXT
    required: bool = False


@dataclass(frozen=True, slots=True)
class Category:
    """Esquema configurable por admin que define la forma de sus recursos."""

    id: str
    name: str
    description: str = ""
    fields: tuple[FieldDefinition, ...] = ()
    access_level: AccessLevel = AccessLevel.PUBLIC
    icon: str = DEFAULT_CATEGORY_ICON
    created_at: int | None = None

    def field_by_key(self, key: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.key == key:
                return f
        return None

    def field_by_name(self, name: str) -> FieldDefinition | None:
        """Match case-insensitive por nombre de display (usado por el import CSV)."""
        wanted = name.strip().lower()
        for f in self.fields:
            if f.name.strip().lower() == wanted:
                return f
        return None


@dataclass(frozen=True, slots=True)
class Resource:
    """Registro de una categoría; `data` mapea field key -> valor crudo."""

    id: str
    category_id: str
    data: dict[str, Any] = field(default_factory=dict)
    created_by: str = ""
    created_at: int = 0


# =============================================================================
# Proyectos
# =============================================================================


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


@dataclass(frozen=True, slots=True)
class Project:
    id: str
    code: str
    name: str
    description: str = ""
    status: ProjectStatus = ProjectStatus.ACTIVE
    created_at: str | None = None


# =============================================================================
# Auditoría
# =============================================================================


class AuditAction(str, Enum):
    LOGIN = "LOGIN"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AuditTarget(str, Enum):
    """Tipo de entidad afectada, tal como se lee en el registro de actividad."""

    SYSTEM = "System"
    USER = "User"
    PROFILE = "Profile"
    SCHEMA = "Schema"
    RESOURCE = "Resource"
    PROJECT = "Project"
    SETTINGS = "Settings"


@dataclass(frozen=True, slots=True)
class AuditLog:
    """Entrada append-only del registro de actividad."""

    id: str
    user_id: str
    username: str
    action: AuditAction
    target: str
    details: str = ""
    created_at: str | None = None


# =============================================================================
# Configuración del sitio (singleton)
# =============================================================================


@dataclass(frozen=True, slots=True)
class SystemConfig:
    site_name: str = "Resource Vault"
    site_description: str = "Internal resource management console"
    contact_email: str = ""
    footer_text: str = ""
    logo_url: str = ""
    favicon_url: str = ""
    allow_registration: bool = True


DEFAULT_SYSTEM_CONFIG = SystemConfig()
