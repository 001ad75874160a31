"""
============================================================
TARJETA CRC — infrastructure/in_memory/table_gateway.py
============================================================
Class: InMemoryTableGateway

Responsibilities:
  - Emular el store de filas en memoria (tests / local dev).
  - Implementar TableGateway: select con filtros eq/neq, orden y límite;
    insert, upsert (merge por id), update y delete.
  - Emular defaults del store (id, created_at) y constraints únicos.
  - Implementar ChangeFeed: cada mutación notifica a los suscriptos de la tabla.

Collaborators:
  - domain.services.TableGateway / ChangeFeed (contratos)
  - infrastructure.realtime.registry.CallbackRegistry
  - crosscutting.exceptions.RemoteStoreError

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - Copias defensivas: las filas nunca se comparten con los callers.
  - Las notificaciones se entregan fuera del lock, en el hilo que muta.
============================================================
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ...crosscutting.exceptions import RemoteStoreError
from ...domain.entities import new_id
from ...domain.services import (
    PROFILES_TABLE,
    PROJECTS_TABLE,
    ChangeCallback,
    ChangeEvent,
    ChangeType,
    FilterOp,
    Ordering,
    Row,
    RowFilter,
)
from ..realtime.registry import CallbackRegistry, RegisteredSubscription

# Constraints únicos por tabla (además de la PK `id`).
DEFAULT_UNIQUE_COLUMNS: Mapping[str, tuple[str, ...]] = {
    PROJECTS_TABLE: ("code",),
    PROFILES_TABLE: ("username",),
}

# Código Postgres de unique_violation, igual que el store real.
_UNIQUE_VIOLATION = "23505"


def _matches(row: Row, filters: Sequence[RowFilter]) -> bool:
    for f in filters:
        value = row.get(f.column)
        equal = value == f.value or (
            value is not None and str(value) == str(f.value)
        )
        if f.op == FilterOp.EQ and not equal:
            return False
        if f.op == FilterOp.NEQ and equal:
            return False
    return True


def _sorted(rows: List[Row], order: Sequence[Ordering]) -> List[Row]:
    """ORDER BY con NULLS LAST en ascendente y NULLS FIRST en descendente."""
    out = list(rows)
    for o in reversed(order):
        present = [r for r in out if r.get(o.column) is not None]
        missing = [r for r in out if r.get(o.column) is None]
        present.sort(key=lambda r: r[o.column], reverse=not o.ascending)
        out = present + missing if o.ascending else missing + present
    return out


class InMemoryTableGateway:
    """TableGateway + ChangeFeed en memoria."""

    def __init__(
        self,
        *,
        unique_columns: Mapping[str, tuple[str, ...]] | None = None,
    ) -> None:
        self._lock = Lock()
        self._tables: Dict[str, Dict[str, Row]] = {}
        self._unique = dict(
            DEFAULT_UNIQUE_COLUMNS if unique_columns is None else unique_columns
        )
        self._registry = CallbackRegistry()

    # =========================================================
    # TableGateway
    # =========================================================
    def select(
        self,
        table: str,
        *,
        filters: Sequence[RowFilter] = (),
        order: Sequence[Ordering] = (),
        limit: Optional[int] = None,
    ) -> List[Row]:
        with self._lock:
            rows = [
                copy.deepcopy(r)
                for r in self._tables.get(table, {}).values()
                if _matches(r, filters)
            ]
        rows = _sorted(rows, order)
        return rows[:limit] if limit is not None else rows

    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        return self._write(table, rows, merge=False)

    def upsert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        return self._write(table, rows, merge=True)

    def update(self, table: str, values: Row, *, filters: Sequence[RowFilter]) -> None:
        events: list[ChangeEvent] = []
        with self._lock:
            data = self._tables.get(table, {})
            for row_id, row in list(data.items()):
                if not _matches(row, filters):
                    continue
                updated = {**row, **copy.deepcopy(values)}
                self._check_unique(table, updated, ignore_id=row_id)
                data[row_id] = updated
                events.append(
                    ChangeEvent(table, ChangeType.UPDATE, copy.deepcopy(updated))
                )
        self._publish(events)

    def delete(self, table: str, *, filters: Sequence[RowFilter]) -> None:
        events: list[ChangeEvent] = []
        with self._lock:
            data = self._tables.get(table, {})
            for row_id, row in list(data.items()):
                if _matches(row, filters):
                    del data[row_id]
                    events.append(ChangeEvent(table, ChangeType.DELETE, row))
        self._publish(events)

    # =========================================================
    # ChangeFeed
    # =========================================================
    def subscribe(self, table: str, callback: ChangeCallback) -> RegisteredSubscription:
        return self._registry.add(table, callback)

    # =========================================================
    # Helpers
    # =========================================================
    def count(self, table: str) -> int:
        with self._lock:
            return len(self._tables.get(table, {}))

    def _write(self, table: str, rows: Sequence[Row], *, merge: bool) -> List[Row]:
        saved: list[Row] = []
        events: list[ChangeEvent] = []
        with self._lock:
            data = self._tables.setdefault(table, {})
            for incoming in rows:
                row = copy.deepcopy(dict(incoming))
                row.setdefault("id", new_id())
                row_id = str(row["id"])
                existing = data.get(row_id)
                if existing is not None and not merge:
                    raise RemoteStoreError(
                        f'duplicate key value violates unique constraint "{table}_pkey"',
                        status_code=409,
                        store_code=_UNIQUE_VIOLATION,
                    )
                if existing is not None:
                    row = {**existing, **row}
                else:
                    row.setdefault(
                        "created_at", datetime.now(timezone.utc).isoformat()
                    )
                self._check_unique(table, row, ignore_id=row_id)
                data[row_id] = row
                saved.append(copy.deepcopy(row))
                change = ChangeType.UPDATE if existing is not None else ChangeType.INSERT
                events.append(ChangeEvent(table, change, copy.deepcopy(row)))
        self._publish(events)
        return saved

    def _check_unique(self, table: str, row: Row, *, ignore_id: str) -> None:
        for column in self._unique.get(table, ()):
            value: Any = row.get(column)
            if value is None:
                continue
            for other_id, other in self._tables.get(table, {}).items():
                if other_id != ignore_id and other.get(column) == value:
                    raise RemoteStoreError(
                        f'duplicate key value violates unique constraint "{table}_{column}_key"',
                        status_code=409,
                        store_code=_UNIQUE_VIOLATION,
                    )

    def _publish(self, events: list[ChangeEvent]) -> None:
        for event in events:
            self._registry.dispatch(event)
