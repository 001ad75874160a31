"""
===============================================================================
USE CASES: System settings
===============================================================================

Business Goal:
    Leer y guardar la configuración global (fila singleton `system_config`).

Reglas:
    - Leer nunca falla hacia la vista: ante error del store se usan defaults.
    - Guardar es solo admin; `site_name` es obligatorio.
    - Logo y favicon se suben (imagen, ≤ 2MB) antes de guardar la fila.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ...crosscutting.exceptions import VaultError
from ...crosscutting.logger import logger
from ...domain.entities import DEFAULT_SYSTEM_CONFIG, SystemConfig, User
from ...domain.permissions import can_manage_settings
from ...domain.repositories import SystemConfigRepository
from ..uploads import AssetUploader, UploadedFile, UploadRejectedError
from .results import SystemConfigResult, forbidden, remote_error, validation_error


def load_system_config(repository: SystemConfigRepository) -> SystemConfig:
    try:
        return repository.get_config()
    except VaultError as exc:
        logger.warning(
            "system config unavailable, using defaults",
            extra={"error_code": exc.error_code, "error": exc.message},
        )
        return DEFAULT_SYSTEM_CONFIG


class GetSystemConfigUseCase:
    def __init__(self, repository: SystemConfigRepository) -> None:
        self._repository = repository

    def execute(self) -> SystemConfigResult:
        return SystemConfigResult(config=load_system_config(self._repository))


@dataclass(frozen=True)
class SaveSystemConfigInput:
    actor: User | None
    config: SystemConfig
    logo: UploadedFile | None = None
    favicon: UploadedFile | None = None


class SaveSystemConfigUseCase:
    def __init__(
        self, repository: SystemConfigRepository, uploader: AssetUploader
    ) -> None:
        self._repository = repository
        self._uploader = uploader

    def execute(self, input_data: SaveSystemConfigInput) -> SystemConfigResult:
        if not can_manage_settings(input_data.actor):
            return SystemConfigResult(error=forbidden("Only admins can change settings"))

        config = input_data.config
        if not config.site_name.strip():
            return SystemConfigResult(error=validation_error("Site name is required"))
        config = replace(config, site_name=config.site_name.strip())

        try:
            if input_data.logo is not None:
                config = replace(
                    config, logo_url=self._uploader.upload_system_asset(input_data.logo)
                )
            if input_data.favicon is not None:
                config = replace(
                    config,
                    favicon_url=self._uploader.upload_system_asset(input_data.favicon),
                )
            self._repository.save_config(config)
        except UploadRejectedError as exc:
            return SystemConfigResult(error=validation_error(exc.message))
        except VaultError as exc:
            return SystemConfigResult(error=remote_error(exc, "save_system_config"))
        return SystemConfigResult(config=config)
