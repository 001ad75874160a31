"""
===============================================================================
USE CASE RESULTS (Shared Result / Error Models)
===============================================================================

Business Goal:
    Proveer modelos compartidos de resultados y errores para los casos de uso
    de la consola, con un contrato estable para:
      - validaciones (campo requerido, código duplicado, password)
      - autorización (chequeos de rol previos a la red)
      - recursos no encontrados
      - conflictos de negocio
      - fallas remotas (mensaje del store cuando existe)

Why:
    - Los use cases devuelven resultados tipados en lugar de lanzar excepciones
      hacia la vista; la vista solo decide qué notificación mostrar.
    - Ningún caso de uso reintenta: cada error es terminal para esa acción.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from ...crosscutting.exceptions import VaultError
from ...crosscutting.logger import logger
from ...crosscutting.pagination import PageInfo
from ...domain.entities import AuditLog, Category, Project, Resource, SystemConfig, User


class ErrorCode(str, Enum):
    """
    Códigos:
      - VALIDATION_ERROR: inputs inválidos o incompletos.
      - FORBIDDEN: actor no autorizado para la operación.
      - NOT_FOUND: entidad inexistente.
      - CONFLICT: colisión de unicidad (ej. código de proyecto).
      - REMOTE_ERROR: el store / auth / storage rechazó o no respondió.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    REMOTE_ERROR = "REMOTE_ERROR"


@dataclass(frozen=True)
class UseCaseError:
    """
    Error de caso de uso.

    Campos:
      - code: categoría estable
      - message: descripción humana, lista para una notificación
      - field_name: nombre de display del campo faltante (validación de recurso)
    """

    code: ErrorCode
    message: str
    field_name: str | None = None


def validation_error(message: str, field_name: str | None = None) -> UseCaseError:
    return UseCaseError(ErrorCode.VALIDATION_ERROR, message, field_name)


def forbidden(message: str) -> UseCaseError:
    return UseCaseError(ErrorCode.FORBIDDEN, message)


def not_found(message: str) -> UseCaseError:
    return UseCaseError(ErrorCode.NOT_FOUND, message)


def conflict(message: str) -> UseCaseError:
    return UseCaseError(ErrorCode.CONFLICT, message)


def remote_error(exc: VaultError, operation: str) -> UseCaseError:
    """Traduce una falla de adapter; se loguea acá una sola vez."""
    logger.warning(
        "remote operation failed",
        extra={
            "operation": operation,
            "error_code": exc.error_code,
            "error_id": exc.error_id,
            "error": exc.message,
        },
    )
    return UseCaseError(ErrorCode.REMOTE_ERROR, exc.message)


@dataclass
class ResourceResult:
    resource: Resource | None = None
    error: UseCaseError | None = None


@dataclass
class ResourceDetailResult:
    """Valores ya formateados para la vista de detalle, por key de campo."""

    resource: Resource | None = None
    display: Dict[str, str] = field(default_factory=dict)
    error: UseCaseError | None = None


@dataclass
class ResourceListResult:
    resources: List[Resource] = field(default_factory=list)
    page_info: PageInfo | None = None
    error: UseCaseError | None = None


@dataclass
class DraftResult:
    """Datos pre-cargados para un formulario (ej. duplicar)."""

    data: dict = field(default_factory=dict)
    error: UseCaseError | None = None


@dataclass
class CategoryResult:
    category: Category | None = None
    error: UseCaseError | None = None


@dataclass
class CategoryListResult:
    categories: List[Category] = field(default_factory=list)
    error: UseCaseError | None = None


@dataclass
class ProjectResult:
    project: Project | None = None
    error: UseCaseError | None = None


@dataclass
class ProjectListResult:
    projects: List[Project] = field(default_factory=list)
    page_info: PageInfo | None = None
    error: UseCaseError | None = None


@dataclass
class UserResult:
    user: User | None = None
    error: UseCaseError | None = None


@dataclass
class UserListResult:
    users: List[User] = field(default_factory=list)
    page_info: PageInfo | None = None
    error: UseCaseError | None = None


@dataclass
class AuditLogListResult:
    logs: List[AuditLog] = field(default_factory=list)
    page_info: PageInfo | None = None
    error: UseCaseError | None = None


@dataclass
class SystemConfigResult:
    config: SystemConfig | None = None
    error: UseCaseError | None = None


@dataclass
class UploadResult:
    url: str | None = None
    error: UseCaseError | None = None


@dataclass
class CommandResult:
    """Resultado de comandos sin entidad de retorno (delete, logout, password)."""

    ok: bool = False
    error: UseCaseError | None = None


@dataclass
class ImportResult:
    """
    imported: filas guardadas antes de terminar (o de fallar).
    total_rows: filas de datos del archivo.
    """

    imported: int = 0
    total_rows: int = 0
    error: UseCaseError | None = None

    @property
    def summary(self) -> str:
        return f"Imported {self.imported}/{self.total_rows} rows"


@dataclass
class ExportResult:
    filename: str | None = None
    content: bytes | None = None
    content_type: str | None = None
    row_count: int = 0
    error: UseCaseError | None = None
