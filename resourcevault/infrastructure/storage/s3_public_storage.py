"""
===============================================================================
CRC CARD — infrastructure/storage/s3_public_storage.py
===============================================================================

Clase:
  S3PublicStorageAdapter (Adapter)

Responsabilidades:
  - Implementar FileStoragePort contra S3-compatible (managed storage / MinIO).
  - Subir a uno de los buckets lógicos (avatars, system-assets, resource-attachments).
  - Resolver la URL pública del objeto subido.
  - Encapsular boto3 (NO filtrar ClientError).

Colaboradores:
  - domain.services.FileStoragePort (port)
  - infrastructure.storage.errors (errores tipados)
  - boto3/botocore (SDK, oculto por este adapter)

Decisiones de diseño:
  - Validación fail-fast de config.
  - Cliente inyectable (tests con MagicMock).
  - Los buckets son públicos: la URL no expira y no se firma.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from ...crosscutting.logger import logger
from .errors import (
    StorageConfigurationError,
    StorageError,
    StoragePermissionError,
    StorageUnavailableError,
)


@dataclass(frozen=True)
class S3Config:
    """
    Configuración del storage S3-compatible.

    Nota:
      - endpoint_url permite MinIO u otros S3 compatibles.
      - public_base_url es la raíz bajo la cual `<bucket>/<path>` es público.
    """

    access_key: str
    secret_key: str
    public_base_url: str
    region: Optional[str] = None
    endpoint_url: Optional[str] = None


class S3PublicStorageAdapter:
    """Adapter S3-compatible para buckets de lectura pública."""

    def __init__(self, config: S3Config, *, client=None) -> None:
        self._config = config
        self._public_base_url = (config.public_base_url or "").strip().rstrip("/")

        if not self._public_base_url:
            raise StorageConfigurationError("Storage public base URL is required.")
        if (
            not (config.access_key or "").strip()
            or not (config.secret_key or "").strip()
        ):
            raise StorageConfigurationError(
                "S3 credentials are required (access_key/secret_key)."
            )

        # Cliente: inyectable para tests (mocks).
        if client is not None:
            self._client = client
            return

        import boto3

        self._client = boto3.client(
            "s3",
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region or None,
            endpoint_url=config.endpoint_url or None,
        )

    # =========================================================================
    # API pública (Port)
    # =========================================================================

    def upload(
        self, bucket: str, path: str, content: bytes, content_type: Optional[str]
    ) -> None:
        self._require(bucket, path)
        effective_ct = (content_type or "application/octet-stream").strip()
        try:
            self._client.put_object(
                Bucket=bucket,
                Key=path,
                Body=content,
                ContentType=effective_ct,
            )
        except Exception as exc:
            raise self._map_storage_error(exc, bucket=bucket, path=path) from exc

    def get_public_url(self, bucket: str, path: str) -> str:
        self._require(bucket, path)
        return f"{self._public_base_url}/{quote(bucket)}/{quote(path)}"

    # =========================================================================
    # Helpers privados
    # =========================================================================

    @staticmethod
    def _require(bucket: str, path: str) -> None:
        if not (bucket or "").strip() or not (path or "").strip():
            raise StorageError("Storage bucket and path are required.")

    @staticmethod
    def _map_storage_error(exc: Exception, *, bucket: str, path: str) -> StorageError:
        """Traduce errores del SDK a errores del subsistema."""
        if isinstance(
            exc, (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)
        ):
            logger.warning(
                "Storage unavailable", extra={"bucket": bucket, "path": path}
            )
            return StorageUnavailableError("Storage unavailable (timeout/connection).")

        if isinstance(exc, ClientError):
            code = str((exc.response.get("Error") or {}).get("Code") or "")

            if code in {"AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch"}:
                return StoragePermissionError("Invalid storage credentials or permissions.")

            if code in {"SlowDown", "RequestTimeout", "ServiceUnavailable"}:
                return StorageUnavailableError("Storage temporarily unavailable.")

            if code == "EntityTooLarge":
                return StorageError("File is too large for the storage bucket.")

            logger.exception(
                "Storage ClientError",
                extra={"bucket": bucket, "path": path, "code": code},
            )
            return StorageError(f"Storage upload failed. code={code}")

        logger.exception("Storage error", extra={"bucket": bucket, "path": path})
        return StorageError("Storage upload failed.")
