"""
===============================================================================
MÓDULO: Logger estructurado (JSON) con contexto de sesión
===============================================================================

Objetivo
--------
Loguear de forma:
- Parseable (JSON)
- Correlacionable (actor / operation_id)
- Segura (redacción de secretos)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  JSONFormatter + setup_logger()

Responsabilidades:
  - Formatear logs como JSON
  - Enriquecer con contexto (actor_id, actor, operation_id)
  - Ocultar credenciales, bytes de archivos y textos enormes (scrub)

Colaboradores:
  - resourcevault/context.py (ContextVars)
  - crosscutting/config.py (nivel y formato)
===============================================================================
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

# Atributos que trae cualquier LogRecord; el resto vino por `extra=`.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message"}

REDACTED = "***REDACTED***"
MAX_TEXT = 4_000

# Claves cuyo valor nunca se escribe (credenciales de la consola y del backend).
SECRET_KEYS = frozenset(
    {
        "password",
        "old_password",
        "new_password",
        "confirm_password",
        "secret",
        "token",
        "authorization",
        "apikey",
        "api_key",
        "access_token",
        "refresh_token",
        "backend_anon_key",
        "s3_secret_key",
    }
)


def scrub(value: Any, key: str | None = None) -> Any:
    """Deja un valor de `extra` listo para JSON sin secretos ni archivos."""
    if key is not None and key.lower() in SECRET_KEYS:
        return REDACTED
    if isinstance(value, str):
        return value if len(value) <= MAX_TEXT else value[:MAX_TEXT] + "…(truncated)"
    # Adjuntos y logos: solo el tamaño.
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes {len(value)}B>"
    if isinstance(value, dict):
        return {str(k): scrub(v, str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [scrub(v, key) for v in value]
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return str(value)


class JSONFormatter(logging.Formatter):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      JSONFormatter

    Responsabilidades:
      - Una línea JSON por registro
      - Sumar actor / operation_id de la sesión activa
      - Pasar cada `extra` por scrub()
      - Adjuntar stacktrace cuando hay excepción
    ----------------------------------------------------------------------------
    """

    def format(self, record: logging.LogRecord) -> str:
        from ..context import get_context_dict

        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
            "pid": os.getpid(),
            **get_context_dict(),
        }
        payload.update(
            (k, scrub(v, k))
            for k, v in vars(record).items()
            if k not in _RECORD_ATTRS
        )

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "stacktrace": traceback.format_exception(exc_type, exc, tb),
            }
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger(name: str = "resourcevault") -> logging.Logger:
    """Logger del paquete; nivel y formato salen de Settings (una sola vez)."""
    from .config import get_settings

    settings = get_settings()
    log = logging.getLogger(name)
    log.setLevel(getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        if settings.log_json:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
        log.addHandler(handler)
    return log


logger = setup_logger()
