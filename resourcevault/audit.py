"""
===============================================================================
TARJETA CRC — resourcevault/audit.py (Emisión de auditoría)
===============================================================================

Responsabilidades:
  - Construir entradas de auditoría con formato consistente (actor/action/target/details).
  - Resolver el actor desde el contexto de sesión cuando no se pasa explícito.
  - Persistir vía AuditLogRepository (puerto del dominio).
  - “Best-effort”: si falla la persistencia, NO rompe la operación principal.

Colaboradores:
  - resourcevault.domain.entities.AuditLog / AuditAction
  - resourcevault.domain.repositories.AuditLogRepository
  - resourcevault.context (actor de la sesión)
  - resourcevault.crosscutting.logger.logger

Reglas:
  - Sin actor (nadie logueado) no se escribe nada.
  - Nunca se lanza excepción hacia el llamador.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from .context import actor_id_var, actor_name_var
from .crosscutting.logger import logger
from .domain.entities import AuditAction, AuditLog, new_id
from .domain.repositories import AuditLogRepository


@dataclass(frozen=True, slots=True)
class AuditActor:
    user_id: str
    username: str


def actor_from_context() -> AuditActor | None:
    user_id = actor_id_var.get()
    if not user_id:
        return None
    return AuditActor(user_id=user_id, username=actor_name_var.get())


def emit_audit_log(
    repository: AuditLogRepository | None,
    *,
    action: AuditAction,
    target: str,
    details: str = "",
    actor: AuditActor | None = None,
) -> None:
    """
    Emite una entrada de auditoría.

    Regla clave:
      - Si repository es None, no hay actor o falla la escritura, NO se lanza excepción.
    """
    if repository is None:
        return

    actor = actor or actor_from_context()
    if actor is None:
        logger.debug(
            "Auditoría omitida: sin actor en sesión",
            extra={"action": action.value, "target": target},
        )
        return

    entry = AuditLog(
        id=new_id(),
        user_id=actor.user_id,
        username=actor.username,
        action=action,
        target=target,
        details=details,
    )

    try:
        repository.append(entry)
    except Exception as exc:
        # Best-effort: logueamos y seguimos.
        logger.warning(
            "Falló la escritura del registro de auditoría",
            extra={"action": action.value, "target": target, "error": str(exc)},
        )


class AuditTrail:
    """Atajo que fija el repositorio; lo usan los repositorios remotos."""

    def __init__(self, repository: AuditLogRepository | None) -> None:
        self._repository = repository

    def record(
        self,
        action: AuditAction,
        target: str,
        details: str = "",
        *,
        actor: AuditActor | None = None,
    ) -> None:
        emit_audit_log(
            self._repository, action=action, target=target, details=details, actor=actor
        )
