"""
===============================================================================
TARJETA CRC — application/csv_export.py
===============================================================================

Módulo:
    Export CSV de recursos de una categoría

Responsabilidades:
    - Header: ID, nombres de campo en orden de esquema, Creator, CreatedAt.
    - Formatear cada celda según el FieldType del campo.
    - Prefijar BOM UTF-8 y unir filas con "\\n".
    - Nombrar el archivo `<categoría>_Export_<YYYY-MM-DD>.csv`.

Colaboradores:
    - application.csv_codec (escape, ValueLocale)
    - application.lookups.RelationDirectory
    - application.rendering.display_value (date y relaciones, igual que en pantalla)
    - application.usecases.resources.ExportResourcesUseCase

Reglas de formato:
    - boolean: etiqueta sí/no ("true" => sí; cualquier otro valor => no).
    - date: `d/m/yyyy`; vacío => "".
    - project / user: etiquetas unidas por ", ", comodín => "ALL".
    - string: siempre citado, comillas internas dobladas.
    - resto: texto tal cual (citado solo si hace falta).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable

from ..domain.entities import Category, FieldDefinition, FieldType, Resource
from ..domain.field_values import as_text
from .csv_codec import BOM, DELIMITER, LINE_SEPARATOR, ValueLocale, escape_cell, quote_cell
from .lookups import RelationDirectory
from .rendering import display_value

ID_HEADER = "ID"
CREATOR_HEADER = "Creator"
CREATED_AT_HEADER = "CreatedAt"
CSV_CONTENT_TYPE = "text/csv;charset=utf-8"


@dataclass(frozen=True)
class CsvDocument:
    filename: str
    text: str
    row_count: int

    def encode(self) -> bytes:
        return self.text.encode("utf-8")


def export_filename(category: Category, today: date) -> str:
    return f"{category.name}_Export_{today.isoformat()}.csv"


def format_cell(
    field: FieldDefinition,
    raw: Any,
    directory: RelationDirectory,
    locale: ValueLocale,
) -> str:
    if field.type == FieldType.BOOLEAN:
        return locale.boolean_label(raw is True or raw == "true")

    if field.type == FieldType.DATE or field.type.is_relation:
        return escape_cell(display_value(field, raw, directory, locale))

    if isinstance(raw, str):
        return quote_cell(raw)

    if raw is None:
        return ""
    return escape_cell(as_text(raw))


def header_row(category: Category) -> list[str]:
    return [
        ID_HEADER,
        *(escape_cell(f.name) for f in category.fields),
        CREATOR_HEADER,
        CREATED_AT_HEADER,
    ]


def export_row(
    category: Category,
    resource: Resource,
    directory: RelationDirectory,
    locale: ValueLocale,
) -> list[str]:
    return [
        escape_cell(resource.id),
        *(
            format_cell(f, resource.data.get(f.key), directory, locale)
            for f in category.fields
        ),
        escape_cell(resource.created_by),
        escape_cell(locale.format_timestamp(resource.created_at)),
    ]


def export_resources_csv(
    category: Category,
    resources: Iterable[Resource],
    *,
    directory: RelationDirectory,
    locale: ValueLocale,
    today: date | None = None,
) -> CsvDocument:
    rows = [export_row(category, r, directory, locale) for r in resources]
    lines = [DELIMITER.join(header_row(category))]
    lines.extend(DELIMITER.join(cells) for cells in rows)

    day = today or datetime.now(locale.zone).date()
    return CsvDocument(
        filename=export_filename(category, day),
        text=BOM + LINE_SEPARATOR.join(lines),
        row_count=len(rows),
    )
