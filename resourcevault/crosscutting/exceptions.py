"""
===============================================================================
MÓDULO: Excepciones tipadas de la consola (errores internos)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- error_code estable
- error_id para correlación con logs
- message “humana” (la del backend cuando existe, sin secretos)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  VaultError + subclases

Responsabilidades:
  - Estandarizar errores de adapters (REST, auth, change feed)
  - Generar error_id para rastreo

Colaboradores:
  - application/usecases/* (traducen a UseCaseError REMOTE_ERROR)
  - crosscutting/logger.py
===============================================================================
"""

from __future__ import annotations

from uuid import uuid4


class VaultError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      VaultError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer error_code + error_id + message
    ----------------------------------------------------------------------------
    """

    error_code: str = "VAULT_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)


class RemoteStoreError(VaultError):
    """Errores del store remoto de filas (HTTP, red, constraint, RLS)."""

    error_code: str = "REMOTE_STORE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        store_code: str | None = None,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, error_id=error_id, original_error=original_error)
        self.status_code = status_code
        self.store_code = store_code


class AuthError(VaultError):
    """Errores del servicio de autenticación (credenciales, sesión, red)."""

    error_code: str = "AUTH_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, error_id=error_id, original_error=original_error)
        self.status_code = status_code


class NotAuthenticatedError(AuthError):
    """Operación que requiere sesión iniciada."""

    error_code: str = "NOT_AUTHENTICATED"


class ChangeFeedError(VaultError):
    """Errores del canal de notificaciones de cambios."""

    error_code: str = "CHANGE_FEED_ERROR"
