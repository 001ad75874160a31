"""
===============================================================================
TARJETA CRC — application/live_list.py (Lista sincronizada con el store)
===============================================================================

Clase:
    LiveList[T]

Responsabilidades:
    - Cargar una lista completa con un loader (ej. repo.list_projects).
    - Suscribirse a las tablas de las que depende y, ante CUALQUIER
      insert/update/delete, volver a traer la lista entera.
    - Exponer items, último error y bandera de carga.

Reglas:
    - Una recarga que llega mientras otra está en curso no corre en paralelo:
      se marca pendiente y la carga activa repite el fetch al terminar.
    - close() cancela las suscripciones; un fetch en curso no se interrumpe.
    - Un error de carga conserva los items previos y queda en `error`.

Colaboradores:
    - domain.services.ChangeFeed / Subscription
===============================================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, Generic, List, Sequence, TypeVar

from ..crosscutting.exceptions import VaultError
from ..crosscutting.logger import logger
from ..domain.services import ChangeEvent, ChangeFeed, Subscription

T = TypeVar("T")

class LiveList(Generic[T]):
    def __init__(
        self,
        loader: Callable[[], List[T]],
        feed: ChangeFeed | None,
        tables: Sequence[str],
        *,
        on_update: Callable[[List[T]], None] | None = None,
    ) -> None:
        self._loader = loader
        self._feed = feed
        self._tables = tuple(tables)
        self._on_update = on_update
        self._lock = Lock()
        self._items: List[T] = []
        self._error: VaultError | None = None
        self._loading = False
        self._pending = False
        self._subscriptions: List[Subscription] = []

    # -------------------------------------------------------------------------
    # Ciclo de vida
    # -------------------------------------------------------------------------

    def start(self) -> "LiveList[T]":
        if self._feed is not None and not self._subscriptions:
            for table in self._tables:
                self._subscriptions.append(
                    self._feed.subscribe(table, self._on_change)
                )
        self.reload()
        return self

    def close(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for sub in subscriptions:
            sub.close()

    def __enter__(self) -> "LiveList[T]":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Estado
    # -------------------------------------------------------------------------

    @property
    def items(self) -> List[T]:
        return list(self._items)

    @property
    def error(self) -> VaultError | None:
        return self._error

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def subscribed(self) -> bool:
        return bool(self._subscriptions)

    # -------------------------------------------------------------------------
    # Recarga
    # -------------------------------------------------------------------------

    def reload(self) -> bool:
        """
        Devuelve False si ya había una carga en curso; en ese caso la carga
        activa vuelve a traer la lista al terminar (los cambios no se pierden).
        """
        with self._lock:
            if self._loading:
                self._pending = True
                return False
            self._loading = True
            self._pending = False
        try:
            while True:
                self._load_once()
                with self._lock:
                    if not self._pending:
                        return True
                    self._pending = False
        finally:
            with self._lock:
                self._loading = False

    def _load_once(self) -> None:
        try:
            items = self._loader()
        except VaultError as exc:
            self._error = exc
            logger.warning(
                "live list reload failed",
                extra={"tables": list(self._tables), "error": exc.message},
            )
            return

        self._items = list(items)
        self._error = None
        if self._on_update is not None:
            self._on_update(self.items)

    def _on_change(self, event: ChangeEvent) -> None:
        logger.debug(
            "change received, reloading",
            extra={"table": event.table, "change_type": event.change_type.value},
        )
        self.reload()
