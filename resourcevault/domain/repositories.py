"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for every entity kind the console manages.
- Keep application/domain independent from the remote store (REST rows, in-memory).
- Enable dependency inversion and straightforward unit testing.

Collaborators
- domain.entities: User, Category, Resource, Project, AuditLog, SystemConfig
- infrastructure.store: Remote*Repository implementations over a TableGateway

Constraints
- Pure interfaces only: no side effects, no infrastructure imports.
- Mutations report failures by raising VaultError subclasses.
- Mutating methods append one audit entry (best-effort) in implementations.

Notes
- We use typing.Protocol for structural subtyping ("duck typing").
- List outputs are concrete lists in the store's documented order.
"""

from typing import List, Optional, Protocol

from .entities import AuditLog, Category, Project, Resource, Role, SystemConfig, User


class ProfileRepository(Protocol):
    """R: Interface for user profiles (`profiles` table)."""

    def list_profiles(self) -> List[User]:
        ...

    def get_profile(self, user_id: str) -> Optional[User]:
        ...

    def find_by_username(self, username: str) -> Optional[User]:
        ...

    def insert_profile(self, user: User) -> User:
        ...

    def update_role(self, user_id: str, role: Role) -> None:
        ...

    def update_details(
        self,
        user_id: str,
        *,
        full_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> None:
        ...

    def delete_profile(self, user_id: str) -> None:
        ...


class CategoryRepository(Protocol):
    """R: Interface for category schemas, oldest first."""

    def list_categories(self) -> List[Category]:
        ...

    def get_category(self, category_id: str) -> Optional[Category]:
        ...

    def save_category(self, category: Category, *, is_new: bool) -> None:
        ...

    def delete_category(self, category: Category) -> None:
        ...


class ResourceRepository(Protocol):
    """R: Interface for resources, newest first."""

    def list_resources(self, category_id: Optional[str] = None) -> List[Resource]:
        ...

    def save_resource(self, resource: Resource, *, is_new: bool) -> None:
        ...

    def delete_resource(self, resource: Resource) -> None:
        ...


class ProjectRepository(Protocol):
    """R: Interface for projects, ordered by code."""

    def list_projects(self) -> List[Project]:
        ...

    def code_exists(self, code: str, exclude_id: Optional[str] = None) -> bool:
        ...

    def save_project(self, project: Project, *, is_new: bool) -> None:
        ...

    def delete_project(self, project: Project) -> None:
        ...


class AuditLogRepository(Protocol):
    """R: Append-only audit log."""

    def append(self, entry: AuditLog) -> None:
        ...

    def list_recent(self, limit: int) -> List[AuditLog]:
        ...


class SystemConfigRepository(Protocol):
    """R: Singleton site configuration row."""

    def get_config(self) -> SystemConfig:
        ...

    def save_config(self, config: SystemConfig) -> None:
        ...
