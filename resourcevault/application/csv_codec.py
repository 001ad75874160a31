"""
===============================================================================
TARJETA CRC — application/csv_codec.py
===============================================================================

Módulo:
    Primitivas CSV + vocabulario de formato (ValueLocale)

Responsabilidades:
    - Parsear una línea CSV con comillas como toggle (sin comillas dobladas).
    - Escapar celdas estilo RFC4180 (comillas envolventes, `"` -> `""`).
    - Formatear fechas y timestamps en la zona horaria de la consola.
    - Centralizar etiquetas sí/no, comodín y vocabulario verdadero del import.

Colaboradores:
    - application.csv_export / csv_import
    - application.rendering (mismas etiquetas en pantalla)
    - crosscutting.config.Settings (etiquetas y zona horaria)

Limitaciones conocidas:
    - parse_csv_line NO soporta `""` dentro de un campo citado: cada comilla
      alterna el estado y se descarta.
    - Un valor con salto de línea no sobrevive al import (se parte por línea).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from ..crosscutting.config import Settings

BOM = "\ufeff"
DELIMITER = ","
QUOTE = '"'
LINE_SEPARATOR = "\n"

DEFAULT_TRUTHY_TOKENS = frozenset({"true", "có", "đúng", "1"})


def parse_csv_line(line: str) -> list[str]:
    """Divide por comas fuera de comillas. Las comillas se consumen (toggle)."""
    cells: list[str] = []
    quoted = False
    current: list[str] = []
    for ch in line:
        if ch == QUOTE:
            quoted = not quoted
            continue
        if ch == DELIMITER and not quoted:
            cells.append("".join(current))
            current = []
            continue
        current.append(ch)
    cells.append("".join(current))
    return cells


def quote_cell(text: str) -> str:
    return QUOTE + text.replace(QUOTE, QUOTE * 2) + QUOTE


def escape_cell(text: str) -> str:
    """Cita solo si hace falta (delimitador, comillas o saltos de línea)."""
    if any(ch in text for ch in (DELIMITER, QUOTE, "\n", "\r")):
        return quote_cell(text)
    return text


def strip_wrapping_quotes(text: str) -> str:
    """Quita UNA comilla inicial y UNA final si existen."""
    if text.startswith(QUOTE):
        text = text[1:]
    if text.endswith(QUOTE):
        text = text[:-1]
    return text


@dataclass(frozen=True)
class ValueLocale:
    yes_label: str = "Có"
    no_label: str = "Không"
    wildcard_label: str = "ALL"
    timezone: str = "Asia/Ho_Chi_Minh"
    truthy_tokens: frozenset[str] = field(default=DEFAULT_TRUTHY_TOKENS)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ValueLocale":
        return cls(
            yes_label=settings.csv_yes_label,
            no_label=settings.csv_no_label,
            wildcard_label=settings.csv_wildcard_label,
            timezone=settings.timezone,
        )

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def boolean_label(self, flag: bool) -> str:
        return self.yes_label if flag else self.no_label

    def is_truthy(self, raw: str) -> bool:
        return raw.strip().lower() in self.truthy_tokens

    def format_date(self, raw: str) -> str:
        """`2024-03-05` -> `5/3/2024`. Texto no reconocible se devuelve tal cual."""
        text = raw.strip()
        if not text:
            return ""
        try:
            if len(text) == 10:
                d = date.fromisoformat(text)
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
                if parsed.tzinfo is not None:
                    parsed = parsed.astimezone(self.zone)
                d = parsed.date()
        except ValueError:
            return text
        return f"{d.day}/{d.month}/{d.year}"

    def format_timestamp(self, epoch_ms: int) -> str:
        """Epoch millis -> `HH:MM:SS d/m/yyyy` en la zona de la consola."""
        moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).astimezone(
            self.zone
        )
        return (
            f"{moment:%H:%M:%S} {moment.day}/{moment.month}/{moment.year}"
        )
