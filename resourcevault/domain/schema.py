"""
===============================================================================
TARJETA CRC — domain/schema.py
===============================================================================

Módulo:
    Modelo de esquema (Category) y validación de recursos

Responsabilidades:
    - Validar los datos de un recurso contra su categoría (requeridos).
    - Validar una categoría antes de guardarla.
    - Generar keys de campo estables y editar la lista de campos de un borrador.

Colaboradores:
    - domain.entities: Category, FieldDefinition, FieldType
    - domain.field_values: definición única de "vacío"
    - application.usecases.resources / categories

Reglas:
    - Se recorren los requeridos en el orden del esquema; gana el primero
      que falte.
    - La key de un campo no cambia al renombrarlo: los datos guardados se
      indexan por key, nunca por nombre.
===============================================================================
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping

from .entities import Category, FieldDefinition, FieldType, new_id, now_millis
from .field_values import is_empty_raw


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    ok: bool
    missing_field_name: str | None = None

    @classmethod
    def valid(cls) -> "ValidationOutcome":
        return cls(ok=True)

    @classmethod
    def missing(cls, field_name: str) -> "ValidationOutcome":
        return cls(ok=False, missing_field_name=field_name)


def validate_resource_against_category(
    category: Category, data: Mapping[str, Any]
) -> ValidationOutcome:
    for f in category.fields:
        if f.required and is_empty_raw(data.get(f.key)):
            return ValidationOutcome.missing(f.name)
    return ValidationOutcome.valid()


def validate_category_for_save(category: Category) -> str | None:
    """Devuelve el mensaje de error, o None si la categoría se puede guardar."""
    if not category.name.strip():
        return "Category name is required"
    if not category.fields:
        return "Category needs at least one field"
    if any(not f.name.strip() for f in category.fields):
        return "Every field needs a name"
    keys = [f.key for f in category.fields]
    if len(set(keys)) != len(keys):
        return "Field keys must be unique within a category"
    return None


# -----------------------------------------------------------------------------
# Edición de campos (borradores inmutables)
# -----------------------------------------------------------------------------


def new_field_key(now_ms: int | None = None) -> str:
    """`field_<epoch-ms>_<hex>`: única aunque se agreguen dos campos en el mismo ms."""
    ms = now_millis() if now_ms is None else now_ms
    return f"field_{ms}_{secrets.token_hex(3)}"


def new_field(
    name: str = "", field_type: FieldType = FieldType.TEXT, required: bool = False
) -> FieldDefinition:
    return FieldDefinition(
        id=new_id(), name=name, key=new_field_key(), type=field_type, required=required
    )


def add_field(
    fields: Iterable[FieldDefinition], new: FieldDefinition | None = None
) -> tuple[FieldDefinition, ...]:
    return (*fields, new or new_field())


def update_field(
    fields: Iterable[FieldDefinition], field_id: str, **changes: Any
) -> tuple[FieldDefinition, ...]:
    """Aplica cambios a un campo por id. La key nunca se reescribe."""
    changes.pop("key", None)
    changes.pop("id", None)
    return tuple(replace(f, **changes) if f.id == field_id else f for f in fields)


def remove_field(
    fields: Iterable[FieldDefinition], field_id: str
) -> tuple[FieldDefinition, ...]:
    return tuple(f for f in fields if f.id != field_id)
