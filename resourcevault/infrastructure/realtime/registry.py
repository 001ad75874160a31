"""
===============================================================================
TARJETA CRC — infrastructure/realtime/registry.py
===============================================================================

Clase:
  CallbackRegistry

Responsabilidades:
  - Registrar callbacks por tabla y entregar ChangeEvents a los suscriptos.
  - Devolver una Subscription cerrable (idempotente) por cada registro.
  - Aislar fallas: un callback que lanza no corta la entrega al resto.

Colaboradores:
  - infrastructure.realtime.pg_change_feed.PgChangeFeed
  - infrastructure.in_memory.table_gateway.InMemoryTableGateway
===============================================================================
"""

from __future__ import annotations

import itertools
import threading
from typing import Callable

from ...crosscutting.logger import logger
from ...domain.services import ChangeCallback, ChangeEvent


class RegisteredSubscription:
    def __init__(self, unregister: Callable[[], None]) -> None:
        self._unregister = unregister
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._unregister()


class CallbackRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._callbacks: dict[str, dict[int, ChangeCallback]] = {}

    def add(self, table: str, callback: ChangeCallback) -> RegisteredSubscription:
        with self._lock:
            token = next(self._ids)
            self._callbacks.setdefault(table, {})[token] = callback
        return RegisteredSubscription(lambda: self._remove(table, token))

    def _remove(self, table: str, token: int) -> None:
        with self._lock:
            callbacks = self._callbacks.get(table)
            if not callbacks:
                return
            callbacks.pop(token, None)
            if not callbacks:
                del self._callbacks[table]

    def has_subscribers(self) -> bool:
        with self._lock:
            return bool(self._callbacks)

    def dispatch(self, event: ChangeEvent) -> int:
        """Entrega el evento; devuelve cuántos callbacks lo recibieron."""
        with self._lock:
            callbacks = list(self._callbacks.get(event.table, {}).values())
        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "change listener failed",
                    extra={"table": event.table, "change": event.change_type.value},
                )
        return len(callbacks)
