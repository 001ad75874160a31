"""
===============================================================================
TARJETA CRC — application/csv_import.py
===============================================================================

Módulo:
    Parseo de CSV subido contra el esquema de una categoría

Responsabilidades:
    - Decodificar UTF-8 (tolerando BOM) y partir en líneas no vacías.
    - Mapear columnas a campos por nombre de display (sin mayúsculas).
    - Coercionar cada celda según el FieldType (tabla de coercers).
    - Devolver los `data` listos para guardar; el guardado lo hace el caso de uso.

Colaboradores:
    - application.csv_codec (parse_csv_line, ValueLocale)
    - application.lookups.RelationDirectory (proyecto / usuario)
    - application.usecases.resources.ImportResourcesUseCase

Reglas:
    - Menos de 2 líneas => error "sin datos".
    - Ningún header coincide => error.
    - Headers sin campo se ignoran; campos sin columna quedan vacíos.
    - boolean: vocabulario verdadero => "true", cualquier otro => "false".
    - relación: match => [id]; sin match => [texto crudo]; vacío => [].
    - resto: texto recortado y sin comillas envolventes.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from ..domain.entities import Category, FieldDefinition, FieldType
from .csv_codec import (
    BOM,
    ValueLocale,
    parse_csv_line,
    strip_wrapping_quotes,
)
from .lookups import RelationDirectory


class CsvImportError(ValueError):
    """El archivo no se puede importar (sin datos, sin columnas, encoding)."""

    NO_DATA = "NO_DATA"
    NO_MATCHING_COLUMNS = "NO_MATCHING_COLUMNS"
    UNREADABLE = "UNREADABLE"

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


@dataclass(frozen=True)
class ParsedCsv:
    rows: list[dict[str, Any]]
    total_rows: int
    column_map: dict[int, str]


Coercer = Callable[[FieldDefinition, str, RelationDirectory, ValueLocale], Any]


def _coerce_boolean(field, raw: str, directory, locale: ValueLocale) -> Any:
    return "true" if locale.is_truthy(raw) else "false"


def _coerce_relation(field, raw: str, directory: RelationDirectory, locale) -> Any:
    if not raw:
        return []
    found = directory.resolve(field.type, raw)
    return [found] if found is not None else [raw]


def _coerce_plain(field, raw: str, directory, locale) -> Any:
    return raw


_COERCERS: dict[FieldType, Coercer] = {
    FieldType.BOOLEAN: _coerce_boolean,
    FieldType.PROJECT: _coerce_relation,
    FieldType.USER: _coerce_relation,
}


def decode_csv(content: bytes | str) -> str:
    if isinstance(content, str):
        return content[1:] if content.startswith(BOM) else content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise CsvImportError(
            CsvImportError.UNREADABLE, "File is not valid UTF-8 text"
        ) from exc


def split_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def map_columns(category: Category, headers: list[str]) -> dict[int, str]:
    """índice de columna -> field key."""
    column_map: dict[int, str] = {}
    for index, header in enumerate(headers):
        definition = category.field_by_name(strip_wrapping_quotes(header.strip()))
        if definition is not None:
            column_map[index] = definition.key
    return column_map


def coerce_cell(
    field: FieldDefinition,
    raw: str,
    directory: RelationDirectory,
    locale: ValueLocale,
) -> Any:
    cleaned = strip_wrapping_quotes(raw.strip())
    coercer = _COERCERS.get(field.type, _coerce_plain)
    return coercer(field, cleaned, directory, locale)


def parse_import(
    category: Category,
    content: bytes | str,
    *,
    directory: RelationDirectory,
    locale: ValueLocale,
) -> ParsedCsv:
    lines = split_lines(decode_csv(content))
    if len(lines) < 2:
        raise CsvImportError(CsvImportError.NO_DATA, "File has no data rows")

    column_map = map_columns(category, parse_csv_line(lines[0]))
    if not column_map:
        raise CsvImportError(
            CsvImportError.NO_MATCHING_COLUMNS,
            "No column matches the fields of this category",
        )

    rows: list[dict[str, Any]] = []
    for line in lines[1:]:
        values = parse_csv_line(line)
        data: dict[str, Any] = {}
        for index, key in column_map.items():
            definition = category.field_by_key(key)
            if definition is None:
                continue
            raw = values[index] if index < len(values) else ""
            data[key] = coerce_cell(definition, raw, directory, locale)
        rows.append(data)

    return ParsedCsv(rows=rows, total_rows=len(lines) - 1, column_map=column_map)
