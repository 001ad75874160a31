"""
===============================================================================
TARJETA CRC — application/lookups.py
===============================================================================

Clase:
    RelationDirectory

Responsabilidades:
    - Resolver ids de relación a etiquetas (proyecto -> code, usuario -> nombre).
    - Resolver texto libre a un id (import CSV): proyecto por code/name/id,
      usuario por username/full name/email/id.

Colaboradores:
    - domain.entities: Project, User, FieldType, WILDCARD
    - application.csv_export / csv_import / rendering

Reglas:
    - Una referencia no resuelta se muestra con su id crudo (nunca se pierde).
    - Las búsquedas son exactas (case-sensitive), primer match gana.
===============================================================================
"""

from __future__ import annotations

from typing import Iterable

from ..domain.entities import WILDCARD, FieldType, Project, User
from ..domain.field_values import RelationValue
from ..domain.repositories import ProfileRepository, ProjectRepository


class RelationDirectory:
    def __init__(
        self, projects: Iterable[Project] = (), users: Iterable[User] = ()
    ) -> None:
        self._projects = list(projects)
        self._users = list(users)
        self._projects_by_id = {p.id: p for p in self._projects}
        self._users_by_id = {u.id: u for u in self._users}

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    @property
    def users(self) -> list[User]:
        return list(self._users)

    # -------------------------------------------------------------------------
    # Etiquetas
    # -------------------------------------------------------------------------

    def project_label(self, project_id: str, *, detailed: bool = False) -> str:
        project = self._projects_by_id.get(project_id)
        if project is None:
            return project_id
        return f"{project.code} - {project.name}" if detailed else project.code

    def user_label(self, user_id: str) -> str:
        user = self._users_by_id.get(user_id)
        return user.display_name if user else user_id

    def relation_labels(
        self, field_type: FieldType, value: RelationValue, *, wildcard_label: str
    ) -> list[str]:
        """Una etiqueta por id; los escalares legados de proyecto muestran `code - name`."""
        labels: list[str] = []
        for ref in value.ids:
            if ref == WILDCARD:
                labels.append(wildcard_label)
            elif field_type == FieldType.PROJECT:
                labels.append(self.project_label(ref, detailed=not value.multiple))
            else:
                labels.append(self.user_label(ref))
        return labels

    # -------------------------------------------------------------------------
    # Resolución (import)
    # -------------------------------------------------------------------------

    def find_project_id(self, text: str) -> str | None:
        for p in self._projects:
            if text in (p.code, p.name, p.id):
                return p.id
        return None

    def find_user_id(self, text: str) -> str | None:
        for u in self._users:
            if text in (u.username, u.full_name, u.email, u.id):
                return u.id
        return None

    def resolve(self, field_type: FieldType, text: str) -> str | None:
        if field_type == FieldType.PROJECT:
            return self.find_project_id(text)
        if field_type == FieldType.USER:
            return self.find_user_id(text)
        return None


def load_directory(projects: ProjectRepository, profiles: ProfileRepository) -> RelationDirectory:
    """Trae proyectos y perfiles actuales. Errores del store se propagan."""
    return RelationDirectory(projects.list_projects(), profiles.list_profiles())
