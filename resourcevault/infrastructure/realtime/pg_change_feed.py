"""
===============================================================================
TARJETA CRC — infrastructure/realtime/pg_change_feed.py
===============================================================================

Clase:
  PgChangeFeed (Adapter)

Responsabilidades:
  - Implementar ChangeFeed escuchando un canal LISTEN/NOTIFY de PostgreSQL.
  - Decodificar payloads JSON `{"table", "type", "record"}` a ChangeEvent.
  - Entregar cada evento a los callbacks de esa tabla (CallbackRegistry).
  - Arrancar el hilo de escucha con la primera suscripción y cerrarlo en close().

Colaboradores:
  - psycopg (conexión autocommit + conn.notifies())
  - infrastructure.realtime.registry.CallbackRegistry
  - crosscutting.exceptions.ChangeFeedError

Notas:
  - El store emite las notificaciones con un trigger por tabla
    (`pg_notify('<channel>', json_build_object(...)::text)`).
  - Si la conexión se cae, el hilo termina y lo registra; no hay reconexión
    automática (sin reintentos). Una nueva suscripción vuelve a arrancarlo.
===============================================================================
"""

from __future__ import annotations

import json
import threading
from typing import Any, Callable

import psycopg
from psycopg import sql

from ...crosscutting.exceptions import ChangeFeedError
from ...crosscutting.logger import logger
from ...domain.services import ChangeCallback, ChangeEvent, ChangeType
from .registry import CallbackRegistry, RegisteredSubscription

Connect = Callable[..., Any]


def decode_notification(payload: str) -> ChangeEvent | None:
    """Payload JSON -> ChangeEvent. Payloads inválidos se descartan (None)."""
    try:
        data = json.loads(payload)
        table = str(data["table"])
        change_type = ChangeType(str(data.get("type", "")).upper())
    except (ValueError, KeyError, TypeError) as exc:
        logger.warning(
            "invalid change notification payload",
            extra={"payload": payload, "error": str(exc)},
        )
        return None
    record = data.get("record")
    return ChangeEvent(
        table=table,
        change_type=change_type,
        record=record if isinstance(record, dict) else None,
    )


class PgChangeFeed:
    """ChangeFeed sobre LISTEN/NOTIFY con un hilo de escucha."""

    def __init__(
        self,
        database_url: str,
        *,
        channel: str = "vault_changes",
        poll_seconds: float = 1.0,
        connect: Connect | None = None,
    ) -> None:
        if not database_url:
            raise ChangeFeedError("database_url is required for the change feed")
        self._database_url = database_url
        self._channel = channel
        self._poll_seconds = poll_seconds
        self._connect = connect or psycopg.connect
        self._registry = CallbackRegistry()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    # =========================================================================
    # ChangeFeed
    # =========================================================================

    def subscribe(self, table: str, callback: ChangeCallback) -> RegisteredSubscription:
        subscription = self._registry.add(table, callback)
        self._ensure_listening()
        return subscription

    def close(self) -> None:
        self._stop.set()
        with self._lock:
            thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._poll_seconds * 2)

    @property
    def listening(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    # =========================================================================
    # Internals
    # =========================================================================

    def _ensure_listening(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._listen, name="vault-change-feed", daemon=True
            )
            self._thread.start()

    def _listen(self) -> None:
        try:
            with self._connect(self._database_url, autocommit=True) as conn:
                conn.execute(sql.SQL("LISTEN {}").format(sql.Identifier(self._channel)))
                logger.info("change feed listening", extra={"channel": self._channel})
                while not self._stop.is_set():
                    for notify in conn.notifies(timeout=self._poll_seconds):
                        self.handle_payload(notify.payload)
                        if self._stop.is_set():
                            break
        except psycopg.Error as exc:
            logger.error(
                "change feed connection lost",
                extra={"channel": self._channel, "error": str(exc)},
            )
        finally:
            logger.info("change feed stopped", extra={"channel": self._channel})

    def handle_payload(self, payload: str) -> None:
        event = decode_notification(payload)
        if event is not None:
            self._registry.dispatch(event)
