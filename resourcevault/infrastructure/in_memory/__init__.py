"""Adapters in-memory (tests / desarrollo local)."""

from .auth import InMemoryAuth
from .file_storage import InMemoryFileStorage
from .table_gateway import InMemoryTableGateway

__all__ = ["InMemoryAuth", "InMemoryFileStorage", "InMemoryTableGateway"]
