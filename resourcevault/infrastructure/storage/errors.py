"""
===============================================================================
CRC CARD — infrastructure/storage/errors.py
===============================================================================

Componente:
  Errores tipados de Storage (buckets públicos S3-compatibles)

Responsabilidades:
  - Definir un lenguaje común de fallas del subsistema de almacenamiento.
  - Evitar que excepciones de boto3/botocore se filtren a capas superiores.
  - Integrarse a la jerarquía VaultError (los casos de uso capturan una sola base).

Colaboradores:
  - infrastructure/storage/s3_public_storage.py (mapeo de ClientError -> StorageError)
===============================================================================
"""

from ...crosscutting.exceptions import VaultError


class StorageError(VaultError):
    """Base de errores del subsistema de Storage."""

    error_code: str = "STORAGE_ERROR"


class StorageConfigurationError(StorageError):
    """Configuración inválida o incompleta del adaptador de storage."""

    error_code: str = "STORAGE_CONFIGURATION_ERROR"


class StoragePermissionError(StorageError):
    """Credenciales inválidas o falta de permisos (ej: AccessDenied)."""

    error_code: str = "STORAGE_PERMISSION_ERROR"

    def __init__(self, message: str = "Storage permission denied."):
        super().__init__(message)


class StorageUnavailableError(StorageError):
    """Storage caído o temporalmente no disponible (timeouts, 503, etc.)."""

    error_code: str = "STORAGE_UNAVAILABLE"

    def __init__(self, message: str = "Storage unavailable."):
        super().__init__(message)
