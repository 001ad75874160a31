"""
===============================================================================
TARJETA CRC — domain/field_values.py
===============================================================================

Módulo:
    Valores tipados de campo (tagged union) + dispatch por FieldType

Responsabilidades:
    - Interpretar el valor crudo de Resource.data según el tipo del campo.
    - Definir "vacío" de forma única (None, "" y [] son vacíos).
    - Serializar de vuelta al formato que guarda el store.

Colaboradores:
    - domain.schema: validación de requeridos.
    - application.filtering: matchers por tipo.
    - application.csv_export / csv_import: formateo y coerción.

Reglas:
    - Relaciones: lista de ids (multi) o escalar legado (single); "all" es
      comodín y se conserva tal cual.
    - Booleanos: solo `True` / "true" son verdaderos.
    - Números: se conserva el texto crudo; la comparación es numérica.
===============================================================================
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Union

from .entities import WILDCARD, FieldType


def as_text(value: Any) -> str:
    """Texto de un valor crudo (bool en minúsculas, floats enteros sin `.0`)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(text: str) -> float | None:
    """Conversión numérica laxa: "" es 0, texto no numérico es None."""
    stripped = text.strip()
    if not stripped:
        return 0.0
    if "_" in stripped:
        return None
    try:
        number = float(stripped)
    except ValueError:
        return None
    return None if math.isnan(number) else number


@dataclass(frozen=True, slots=True)
class TextValue:
    text: str

    def to_store(self) -> Any:
        return self.text


@dataclass(frozen=True, slots=True)
class NumberValue:
    text: str

    @property
    def number(self) -> float | None:
        return to_number(self.text)

    def to_store(self) -> Any:
        return self.text


@dataclass(frozen=True, slots=True)
class DateValue:
    """Fecha tal como la guarda el formulario (YYYY-MM-DD)."""

    text: str

    def to_store(self) -> Any:
        return self.text


@dataclass(frozen=True, slots=True)
class BooleanValue:
    flag: bool

    @property
    def text(self) -> str:
        return "true" if self.flag else "false"

    def to_store(self) -> Any:
        return self.text


@dataclass(frozen=True, slots=True)
class RelationValue:
    ids: tuple[str, ...]
    multiple: bool = True

    @property
    def has_wildcard(self) -> bool:
        return WILDCARD in self.ids

    def matches(self, wanted: str) -> bool:
        return self.has_wildcard or wanted in self.ids

    def to_store(self) -> Any:
        if self.multiple:
            return list(self.ids)
        return self.ids[0]


@dataclass(frozen=True, slots=True)
class AttachmentValue:
    """URL pública del archivo subido."""

    url: str

    def to_store(self) -> Any:
        return self.url


FieldValue = Union[
    TextValue, NumberValue, DateValue, BooleanValue, RelationValue, AttachmentValue
]


def is_empty_raw(raw: Any) -> bool:
    return raw is None or raw == "" or (isinstance(raw, (list, tuple)) and not raw)


# -----------------------------------------------------------------------------
# Parsers por tipo
# -----------------------------------------------------------------------------


def _parse_text(raw: Any) -> FieldValue:
    return TextValue(as_text(raw))


def _parse_number(raw: Any) -> FieldValue:
    return NumberValue(as_text(raw))


def _parse_date(raw: Any) -> FieldValue:
    return DateValue(as_text(raw))


def _parse_boolean(raw: Any) -> FieldValue:
    return BooleanValue(raw is True or raw == "true")


def _parse_relation(raw: Any) -> FieldValue:
    if isinstance(raw, (list, tuple)):
        return RelationValue(tuple(as_text(v) for v in raw), multiple=True)
    return RelationValue((as_text(raw),), multiple=False)


def _parse_attachment(raw: Any) -> FieldValue:
    return AttachmentValue(as_text(raw))


_PARSERS: dict[FieldType, Callable[[Any], FieldValue]] = {
    FieldType.TEXT: _parse_text,
    FieldType.TEXTAREA: _parse_text,
    FieldType.NUMBER: _parse_number,
    FieldType.DATE: _parse_date,
    FieldType.BOOLEAN: _parse_boolean,
    FieldType.PROJECT: _parse_relation,
    FieldType.USER: _parse_relation,
    FieldType.IMAGE: _parse_attachment,
    FieldType.FILE: _parse_attachment,
}


def parse_field_value(field_type: FieldType, raw: Any) -> FieldValue | None:
    """
    Interpreta un valor crudo. Devuelve None si el valor está vacío.
    """
    if is_empty_raw(raw):
        return None
    return _PARSERS[field_type](raw)


def read_field(data: dict[str, Any], key: str, field_type: FieldType) -> FieldValue | None:
    return parse_field_value(field_type, data.get(key))
