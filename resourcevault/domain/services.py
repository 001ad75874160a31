"""
CRC — domain/services.py

Name
- External Collaborator Ports (Protocols)

Responsibilities
- Describe what the console needs from the managed backend:
  row CRUD over named tables, auth, public file storage and change notifications.
- Keep adapters (httpx, boto3, psycopg, in-memory) swappable.

Collaborators
- infrastructure.rest.PostgrestTableGateway / in_memory.InMemoryTableGateway
- infrastructure.auth.GoTrueAuthAdapter / in_memory.InMemoryAuth
- infrastructure.storage.S3PublicStorageAdapter / in_memory.InMemoryFileStorage
- infrastructure.realtime.PgChangeFeed / in_memory.InMemoryTableGateway

Constraints
- No retries at this level: every failure is terminal for the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

# Table names of the managed store.
PROFILES_TABLE = "profiles"
CATEGORIES_TABLE = "categories"
RESOURCES_TABLE = "resources"
PROJECTS_TABLE = "projects"
AUDIT_LOGS_TABLE = "audit_logs"
SYSTEM_CONFIG_TABLE = "system_config"

Row = Dict[str, Any]


class FilterOp(str, Enum):
    EQ = "eq"
    NEQ = "neq"


@dataclass(frozen=True, slots=True)
class RowFilter:
    column: str
    value: Any
    op: FilterOp = FilterOp.EQ

    @classmethod
    def eq(cls, column: str, value: Any) -> "RowFilter":
        return cls(column, value, FilterOp.EQ)

    @classmethod
    def neq(cls, column: str, value: Any) -> "RowFilter":
        return cls(column, value, FilterOp.NEQ)


@dataclass(frozen=True, slots=True)
class Ordering:
    column: str
    ascending: bool = True


class TableGateway(Protocol):
    """R: Row-oriented CRUD over named tables."""

    def select(
        self,
        table: str,
        *,
        filters: Sequence[RowFilter] = (),
        order: Sequence[Ordering] = (),
        limit: Optional[int] = None,
    ) -> List[Row]:
        ...

    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        ...

    def upsert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        ...

    def update(self, table: str, values: Row, *, filters: Sequence[RowFilter]) -> None:
        ...

    def delete(self, table: str, *, filters: Sequence[RowFilter]) -> None:
        ...


@dataclass(frozen=True, slots=True)
class AuthSession:
    user_id: str
    email: str
    access_token: str = ""
    refresh_token: str = ""
    expires_at: Optional[int] = None


class AuthPort(Protocol):
    """R: Auth operations of the managed backend."""

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        ...

    def sign_up(self, email: str, password: str) -> AuthSession:
        ...

    def sign_out(self) -> None:
        ...

    def get_session(self) -> Optional[AuthSession]:
        ...

    def update_password(self, new_password: str) -> None:
        ...


class FileStoragePort(Protocol):
    """R: Upload into a public bucket and resolve its public URL."""

    def upload(
        self, bucket: str, path: str, content: bytes, content_type: Optional[str]
    ) -> None:
        ...

    def get_public_url(self, bucket: str, path: str) -> str:
        ...


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    table: str
    change_type: ChangeType
    record: Optional[Row] = None


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription(Protocol):
    def close(self) -> None:
        ...


class ChangeFeed(Protocol):
    """R: Per-table change notifications (insert/update/delete)."""

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        ...
