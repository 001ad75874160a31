"""
===============================================================================
TARJETA CRC — application/uploads.py
===============================================================================

Clase:
    AssetUploader

Responsabilidades:
    - Pre-chequear tamaño y tipo antes de subir (sin reanudación ni chunks).
    - Generar paths sin colisiones por bucket lógico:
        avatars:              <user_id>/<epoch-ms>.<ext>
        system-assets:        assets/<epoch-ms>_<rand>.<ext>
        resource-attachments: files/<epoch-ms>_<rand>.<ext>
    - Devolver la URL pública del objeto subido.

Colaboradores:
    - domain.services.FileStoragePort
    - crosscutting.config.Settings (buckets y límites)
    - application.usecases (auth, users, system_config, resources)

Errores:
    - UploadRejectedError: tamaño o tipo inválido (antes de tocar la red).
    - StorageError (infra): falla al subir.
===============================================================================
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Callable

from ..crosscutting.config import Settings
from ..crosscutting.logger import logger
from ..domain.entities import now_millis
from ..domain.services import FileStoragePort

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp", "svg", "ico", "bmp"})


class UploadRejectedError(ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        _, dot, ext = self.filename.rpartition(".")
        return ext.lower() if dot and ext else "bin"

    @property
    def is_image(self) -> bool:
        if self.content_type:
            return self.content_type.lower().startswith("image/")
        return self.extension in IMAGE_EXTENSIONS


def _megabytes(n: int) -> str:
    return f"{n / (1024 * 1024):g}MB"


class AssetUploader:
    def __init__(
        self,
        storage: FileStoragePort,
        settings: Settings,
        *,
        clock: Callable[[], int] = now_millis,
        token: Callable[[], str] = lambda: secrets.token_hex(4),
    ) -> None:
        self._storage = storage
        self._settings = settings
        self._clock = clock
        self._token = token

    def upload_avatar(self, user_id: str, file: UploadedFile) -> str:
        self._check(file, self._settings.max_avatar_bytes, image_only=True)
        path = f"{user_id}/{self._clock()}.{file.extension}"
        return self._put(self._settings.avatar_bucket, path, file)

    def upload_system_asset(self, file: UploadedFile) -> str:
        self._check(file, self._settings.max_system_asset_bytes, image_only=True)
        path = f"assets/{self._clock()}_{self._token()}.{file.extension}"
        return self._put(self._settings.system_asset_bucket, path, file)

    def upload_attachment(self, file: UploadedFile, *, image_only: bool = False) -> str:
        self._check(file, self._settings.max_attachment_bytes, image_only=image_only)
        path = f"files/{self._clock()}_{self._token()}.{file.extension}"
        return self._put(self._settings.attachment_bucket, path, file)

    @staticmethod
    def _check(file: UploadedFile, max_bytes: int, *, image_only: bool) -> None:
        if not file.content:
            raise UploadRejectedError("File is empty")
        if file.size > max_bytes:
            raise UploadRejectedError(
                f"File is too large (max {_megabytes(max_bytes)})"
            )
        if image_only and not file.is_image:
            raise UploadRejectedError("Only image files are allowed")

    def _put(self, bucket: str, path: str, file: UploadedFile) -> str:
        self._storage.upload(bucket, path, file.content, file.content_type)
        logger.info(
            "asset uploaded",
            extra={"bucket": bucket, "path": path, "size": file.size},
        )
        return self._storage.get_public_url(bucket, path)
