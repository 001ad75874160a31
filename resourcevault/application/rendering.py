"""
===============================================================================
TARJETA CRC — application/rendering.py
===============================================================================

Módulo:
    Render de valores de campo para pantalla (dispatch por tag)

Responsabilidades:
    - Convertir un valor crudo en texto legible según el FieldType.
    - Compartir el formato de fechas y relaciones con el export CSV.

Colaboradores:
    - domain.field_values (parse_field_value y variantes)
    - application.lookups.RelationDirectory
    - application.csv_codec.ValueLocale
===============================================================================
"""

from __future__ import annotations

from typing import Any, Callable

from ..domain.entities import FieldDefinition, FieldType, Resource
from ..domain.field_values import (
    AttachmentValue,
    BooleanValue,
    DateValue,
    FieldValue,
    RelationValue,
    parse_field_value,
)
from .csv_codec import ValueLocale
from .lookups import RelationDirectory

Renderer = Callable[[FieldDefinition, FieldValue, RelationDirectory, ValueLocale], str]


def _render_plain(field, value, directory, locale) -> str:
    return getattr(value, "text", "")


def _render_boolean(field, value: BooleanValue, directory, locale) -> str:
    return locale.boolean_label(value.flag)


def _render_date(field, value: DateValue, directory, locale) -> str:
    return locale.format_date(value.text)


def _render_relation(field, value: RelationValue, directory, locale) -> str:
    return ", ".join(
        directory.relation_labels(
            field.type, value, wildcard_label=locale.wildcard_label
        )
    )


def _render_attachment(field, value: AttachmentValue, directory, locale) -> str:
    return value.url


_RENDERERS: dict[FieldType, Renderer] = {
    FieldType.TEXT: _render_plain,
    FieldType.TEXTAREA: _render_plain,
    FieldType.NUMBER: _render_plain,
    FieldType.DATE: _render_date,
    FieldType.BOOLEAN: _render_boolean,
    FieldType.PROJECT: _render_relation,
    FieldType.USER: _render_relation,
    FieldType.IMAGE: _render_attachment,
    FieldType.FILE: _render_attachment,
}


def display_value(
    field: FieldDefinition,
    raw: Any,
    directory: RelationDirectory,
    locale: ValueLocale | None = None,
) -> str:
    value = parse_field_value(field.type, raw)
    if value is None:
        return ""
    return _RENDERERS[field.type](field, value, directory, locale or ValueLocale())


def display_row(
    fields: tuple[FieldDefinition, ...],
    resource: Resource,
    directory: RelationDirectory,
    locale: ValueLocale | None = None,
) -> dict[str, str]:
    """field key -> texto, en el orden del esquema."""
    return {
        f.key: display_value(f, resource.data.get(f.key), directory, locale)
        for f in fields
    }
