"""
============================================================
TARJETA CRC — infrastructure/in_memory/file_storage.py
============================================================
Class: InMemoryFileStorage

Responsibilities:
  - Emular buckets públicos en memoria (tests / local dev).
  - Guardar (bucket, path) -> (bytes, content_type) y resolver URLs públicas.

Collaborators:
  - domain.services.FileStoragePort (contrato)
============================================================
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Optional, Tuple

from ..storage.errors import StorageError


class InMemoryFileStorage:
    def __init__(self, public_base_url: str = "memory://storage") -> None:
        self._lock = Lock()
        self._objects: Dict[Tuple[str, str], Tuple[bytes, Optional[str]]] = {}
        self._public_base_url = public_base_url.rstrip("/")

    def upload(
        self, bucket: str, path: str, content: bytes, content_type: Optional[str]
    ) -> None:
        if not bucket or not path:
            raise StorageError("Storage bucket and path are required.")
        with self._lock:
            if (bucket, path) in self._objects:
                raise StorageError(f"Object already exists: {bucket}/{path}")
            self._objects[(bucket, path)] = (bytes(content), content_type)

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self._public_base_url}/{bucket}/{path}"

    def get_object(self, bucket: str, path: str) -> Optional[Tuple[bytes, Optional[str]]]:
        with self._lock:
            return self._objects.get((bucket, path))

    def keys(self, bucket: str) -> list[str]:
        with self._lock:
            return sorted(p for b, p in self._objects if b == bucket)
