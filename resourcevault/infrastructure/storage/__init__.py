"""Adapters de infraestructura: Storage."""

from .errors import (
    StorageConfigurationError,
    StorageError,
    StoragePermissionError,
    StorageUnavailableError,
)
from .s3_public_storage import S3Config, S3PublicStorageAdapter

__all__ = [
    "S3Config",
    "S3PublicStorageAdapter",
    "StorageError",
    "StorageConfigurationError",
    "StoragePermissionError",
    "StorageUnavailableError",
]
