"""
===============================================================================
TARJETA CRC — resourcevault/session.py (Estado de la consola)
===============================================================================

Clase:
    ConsoleSession

Responsabilidades:
    - Mantener el estado de la aplicación de forma explícita: usuario actual,
      configuración del sitio en caché, tema, notificaciones pendientes y
      listas vivas abiertas.
    - Fijar / limpiar el contexto del actor (auditoría y logs) en login/logout.
    - Evitar envíos duplicados de una misma acción (`submit`).

Colaboradores:
    - container.VaultServices + factories de casos de uso
    - application.live_list.LiveList
    - resourcevault.context

Reglas:
    - Logout cierra TODAS las listas vivas antes de cerrar la sesión remota.
    - La configuración del sitio nunca queda vacía (defaults ante error).
===============================================================================
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Callable, Deque, Dict, List, Sequence, TypeVar

from . import container
from .application.live_list import LiveList
from .application.usecases import LoginInput, RegisterInput, SaveSystemConfigInput
from .application.usecases.results import SystemConfigResult, UserResult
from .context import clear_context, set_actor_context
from .crosscutting.exceptions import NotAuthenticatedError
from .crosscutting.logger import logger
from .domain.entities import DEFAULT_SYSTEM_CONFIG, SystemConfig, User

T = TypeVar("T")


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


class ConsoleSession:
    def __init__(self, services: container.VaultServices, *, max_notices: int = 50) -> None:
        self.services = services
        self.current_user: User | None = None
        self.system_config: SystemConfig = DEFAULT_SYSTEM_CONFIG
        self.dark_mode = False
        self._notices: Deque[Notice] = deque(maxlen=max_notices)
        self._live_lists: Dict[str, LiveList] = {}
        self._in_flight: set[str] = set()
        self._lock = Lock()

    # =========================================================================
    # Arranque / autenticación
    # =========================================================================

    def start(self) -> User | None:
        """Carga la configuración y restaura el usuario de la sesión previa."""
        self.reload_system_config()
        result = container.get_current_user_use_case(self.services).execute()
        if result.error:
            self.notify(NoticeLevel.ERROR, result.error.message)
        elif result.user:
            self._set_user(result.user)
        return self.current_user

    def login(self, identifier: str, password: str) -> UserResult:
        result = container.get_login_use_case(self.services).execute(
            LoginInput(identifier=identifier, password=password)
        )
        if result.user:
            self._set_user(result.user)
            self.notify(NoticeLevel.SUCCESS, f"Welcome, {result.user.display_name}")
        elif result.error:
            self.notify(NoticeLevel.ERROR, result.error.message)
        return result

    def register(self, input_data: RegisterInput) -> UserResult:
        result = container.get_register_use_case(self.services).execute(input_data)
        if result.user:
            self._set_user(result.user)
            self.notify(NoticeLevel.SUCCESS, "Account created")
        elif result.error:
            self.notify(NoticeLevel.ERROR, result.error.message)
        return result

    def logout(self) -> None:
        self.close_live_lists()
        result = container.get_logout_use_case(self.services).execute()
        if result.error:
            self.notify(NoticeLevel.ERROR, result.error.message)
        self.current_user = None
        clear_context()

    def require_user(self) -> User:
        if self.current_user is None:
            raise NotAuthenticatedError("Login required")
        return self.current_user

    def update_current_user(self, user: User) -> None:
        """Refresca el usuario tras editar el perfil propio."""
        if self.current_user is not None and user.id == self.current_user.id:
            self._set_user(user)

    def _set_user(self, user: User) -> None:
        self.current_user = user
        set_actor_context(user_id=user.id, username=user.username)
        logger.info("session user set", extra={"role": user.role.value})

    # =========================================================================
    # Configuración / tema
    # =========================================================================

    def reload_system_config(self) -> SystemConfig:
        result = container.get_system_config_use_case(self.services).execute()
        self.system_config = result.config or DEFAULT_SYSTEM_CONFIG
        return self.system_config

    def save_system_config(self, input_data: SaveSystemConfigInput) -> SystemConfigResult:
        """Guarda y vuelve a leer la config para que la caché refleje el store."""
        result = container.get_save_system_config_use_case(self.services).execute(input_data)
        if self.notify_result(result, "Settings saved"):
            self.reload_system_config()
        return result

    def toggle_dark_mode(self) -> bool:
        self.dark_mode = not self.dark_mode
        return self.dark_mode

    # =========================================================================
    # Notificaciones
    # =========================================================================

    def notify(self, level: NoticeLevel, message: str) -> None:
        self._notices.append(Notice(level, message))

    def notify_result(self, result, success_message: str) -> bool:
        """Encola éxito o el mensaje de error del resultado; devuelve si fue ok."""
        error = getattr(result, "error", None)
        if error is not None:
            self.notify(NoticeLevel.ERROR, error.message)
            return False
        self.notify(NoticeLevel.SUCCESS, success_message)
        return True

    def drain_notices(self) -> List[Notice]:
        notices = list(self._notices)
        self._notices.clear()
        return notices

    # =========================================================================
    # Envíos / listas vivas
    # =========================================================================

    def submit(self, action_key: str, action: Callable[[], T]) -> T | None:
        """Ejecuta `action` salvo que la misma acción ya esté en curso."""
        with self._lock:
            if action_key in self._in_flight:
                logger.debug("duplicate submission dropped", extra={"action": action_key})
                return None
            self._in_flight.add(action_key)
        try:
            return action()
        finally:
            with self._lock:
                self._in_flight.discard(action_key)

    def is_submitting(self, action_key: str) -> bool:
        with self._lock:
            return action_key in self._in_flight

    def watch(
        self,
        name: str,
        loader: Callable[[], List[T]],
        tables: Sequence[str],
        *,
        on_update: Callable[[List[T]], None] | None = None,
    ) -> LiveList[T]:
        """Abre (o reemplaza) la lista viva `name` y la carga."""
        previous = self._live_lists.pop(name, None)
        if previous is not None:
            previous.close()
        live = LiveList(loader, self.services.feed, tables, on_update=on_update)
        self._live_lists[name] = live
        return live.start()

    def live_list(self, name: str) -> LiveList | None:
        return self._live_lists.get(name)

    def close_live_lists(self) -> None:
        lists, self._live_lists = self._live_lists, {}
        for live in lists.values():
            live.close()
