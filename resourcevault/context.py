"""
===============================================================================
TARJETA CRC — resourcevault/context.py (Contexto por sesión / operación)
===============================================================================

Responsabilidades:
  - Mantener contexto de la sesión de consola usando ContextVars.
  - Permitir correlación de logs (actor + operación) sin pasar parámetros por todo el stack.
  - Proveer helpers mínimos: set_*(), get_context_dict(), clear_context().

Colaboradores:
  - resourcevault.session: setea el actor al hacer login y limpia al hacer logout.
  - resourcevault.crosscutting.logger: enriquece logs leyendo get_context_dict().

Restricciones:
  - Solo tipos primitivos (str) para serialización segura.
  - Defaults vacíos ("") para evitar None y simplificar JSON.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Final

actor_id_var: ContextVar[str] = ContextVar("actor_id", default="")
actor_name_var: ContextVar[str] = ContextVar("actor_name", default="")

# Identificador de la operación en curso (una acción del usuario).
operation_id_var: ContextVar[str] = ContextVar("operation_id", default="")

_CTX_ACTOR_ID: Final[str] = "actor_id"
_CTX_ACTOR_NAME: Final[str] = "actor"
_CTX_OPERATION_ID: Final[str] = "operation_id"


def set_actor_context(*, user_id: str = "", username: str = "") -> None:
    """Setea el actor autenticado de la sesión."""
    actor_id_var.set(user_id or "")
    actor_name_var.set(username or "")


def set_operation_context(operation_id: str = "") -> None:
    operation_id_var.set(operation_id or "")


def get_context_dict() -> dict[str, str]:
    """
    Devuelve el contexto actual como dict, omitiendo claves vacías.
    """
    ctx: dict[str, str] = {}

    if val := actor_id_var.get():
        ctx[_CTX_ACTOR_ID] = val
    if val := actor_name_var.get():
        ctx[_CTX_ACTOR_NAME] = val
    if val := operation_id_var.get():
        ctx[_CTX_OPERATION_ID] = val

    return ctx


def clear_context() -> None:
    """Limpia el contexto al cerrar la sesión."""
    actor_id_var.set("")
    actor_name_var.set("")
    operation_id_var.set("")
