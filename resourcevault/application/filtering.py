"""
===============================================================================
TARJETA CRC — application/filtering.py
===============================================================================

Módulo:
    Motor de filtrado de recursos (+ filtros de listas de la consola)

Responsabilidades:
    - Evaluar inclusión de cada recurso contra los criterios activos (AND).
    - Preservar el orden de entrada (newest-first tal como llega del store).
    - Despachar el matcher por FieldType (tabla, no comparaciones de strings).
    - Filtrar proyectos, usuarios y registros de actividad por texto/estado.

Colaboradores:
    - domain.entities: Resource, Category, FieldType, Project, User, AuditLog
    - domain.field_values: valores tipados y to_number
    - application.usecases.resources / projects / users / activity_logs

Reglas por tipo:
    - text / textarea: substring sin distinguir mayúsculas.
    - boolean: igualdad exacta contra "true" / "false".
    - number: igualdad numérica (no rango).
    - date: igualdad exacta del string guardado (no rango).
    - project / user: el comodín "all" siempre matchea; si no, pertenencia.
    - image / file: basta con que el valor exista.
    - Valor ausente para una key filtrada => no matchea.
    - Filtro vacío => se ignora. Key que no está en el esquema => se ignora.
    - Los filtros por campo solo aplican con una categoría activa.
    - Creador: substring sin distinguir mayúsculas sobre created_by.
    - Desde / hasta: día completo inclusivo (00:00:00.000 a 23:59:59.999)
      en la zona horaria de la consola.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Callable, Iterable, Mapping, Sequence
from zoneinfo import ZoneInfo

from ..domain.entities import (
    AuditLog,
    Category,
    FieldType,
    Project,
    Resource,
    User,
)
from ..domain.field_values import (
    BooleanValue,
    DateValue,
    FieldValue,
    NumberValue,
    RelationValue,
    read_field,
    to_number,
)

# Valor de los selects "todos" en las listas.
ALL_OPTION = "all"

_END_OF_DAY = time(23, 59, 59, 999_000)


@dataclass(frozen=True)
class ResourceFilter:
    creator: str = ""
    date_from: date | str | None = None
    date_to: date | str | None = None
    field_filters: Mapping[str, str] = field(default_factory=dict)

    def is_active(self) -> bool:
        return bool(
            self.creator.strip()
            or self.date_from
            or self.date_to
            or any(v for v in self.field_filters.values())
        )


def parse_filter_date(value: date | str | None) -> date | None:
    """Acepta date o ISO YYYY-MM-DD; otro formato lanza ValueError."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def day_start_millis(day: date, zone: ZoneInfo) -> int:
    return int(datetime.combine(day, time.min, tzinfo=zone).timestamp() * 1000)


def day_end_millis(day: date, zone: ZoneInfo) -> int:
    return int(datetime.combine(day, _END_OF_DAY, tzinfo=zone).timestamp() * 1000)


# -----------------------------------------------------------------------------
# Matchers por tipo
# -----------------------------------------------------------------------------

Matcher = Callable[[FieldValue, str], bool]


def _match_substring(value: FieldValue, wanted: str) -> bool:
    return wanted.lower() in getattr(value, "text", "").lower()


def _match_boolean(value: BooleanValue, wanted: str) -> bool:
    return value.text == wanted


def _match_number(value: NumberValue, wanted: str) -> bool:
    stored, target = value.number, to_number(wanted)
    # Un número vacío no equivale a 0: "" nunca matchea el filtro "0".
    return stored is not None and target is not None and stored == target


def _match_date(value: DateValue, wanted: str) -> bool:
    return value.text == wanted


def _match_relation(value: RelationValue, wanted: str) -> bool:
    return value.matches(wanted)


def _match_present(value: FieldValue, wanted: str) -> bool:
    return True


_MATCHERS: dict[FieldType, Matcher] = {
    FieldType.TEXT: _match_substring,
    FieldType.TEXTAREA: _match_substring,
    FieldType.BOOLEAN: _match_boolean,
    FieldType.NUMBER: _match_number,
    FieldType.DATE: _match_date,
    FieldType.PROJECT: _match_relation,
    FieldType.USER: _match_relation,
    FieldType.IMAGE: _match_present,
    FieldType.FILE: _match_present,
}


# -----------------------------------------------------------------------------
# Recursos
# -----------------------------------------------------------------------------


def matches_resource(
    resource: Resource,
    criteria: ResourceFilter,
    *,
    category: Category | None = None,
    zone: ZoneInfo | None = None,
) -> bool:
    creator = criteria.creator.strip().lower()
    if creator and creator not in resource.created_by.lower():
        return False

    tz = zone or ZoneInfo("UTC")
    date_from = parse_filter_date(criteria.date_from)
    if date_from is not None and resource.created_at < day_start_millis(date_from, tz):
        return False
    date_to = parse_filter_date(criteria.date_to)
    if date_to is not None and resource.created_at > day_end_millis(date_to, tz):
        return False

    if category is None:
        return True

    for key, wanted in criteria.field_filters.items():
        if not wanted:
            continue
        definition = category.field_by_key(key)
        if definition is None:
            continue
        value = read_field(resource.data, key, definition.type)
        if value is None:
            return False
        if not _MATCHERS[definition.type](value, wanted):
            return False
    return True


def filter_resources(
    resources: Iterable[Resource],
    criteria: ResourceFilter | None = None,
    *,
    category: Category | None = None,
    zone: ZoneInfo | None = None,
) -> list[Resource]:
    if criteria is None:
        return list(resources)
    return [
        r
        for r in resources
        if matches_resource(r, criteria, category=category, zone=zone)
    ]


# -----------------------------------------------------------------------------
# Listas de la consola
# -----------------------------------------------------------------------------


def _contains(haystacks: Sequence[str], needle: str) -> bool:
    n = needle.strip().lower()
    return not n or any(n in (h or "").lower() for h in haystacks)


def filter_projects(
    projects: Iterable[Project], search: str = "", status: str = ALL_OPTION
) -> list[Project]:
    return [
        p
        for p in projects
        if _contains((p.name, p.code), search)
        and (status == ALL_OPTION or p.status.value == status)
    ]


def filter_users(
    users: Iterable[User], search: str = "", role: str = ALL_OPTION
) -> list[User]:
    return [
        u
        for u in users
        if _contains((u.username, u.email, u.full_name), search)
        and (role == ALL_OPTION or u.role.value == role)
    ]


def filter_audit_logs(
    logs: Iterable[AuditLog], action: str = ALL_OPTION, text: str = ""
) -> list[AuditLog]:
    return [
        log
        for log in logs
        if (action == ALL_OPTION or log.action.value == action)
        and _contains((log.username, log.details), text)
    ]


def count_users_by_role(users: Iterable[User]) -> dict[str, int]:
    counts = {role: 0 for role in ("admin", "manager", "user")}
    for u in users:
        counts[u.role.value] = counts.get(u.role.value, 0) + 1
    return counts
