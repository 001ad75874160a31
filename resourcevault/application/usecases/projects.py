"""
===============================================================================
USE CASES: Projects
===============================================================================

Business Goal:
    Gestionar proyectos con código humano único (ej. PRJ-001).

Reglas:
    - Admin y manager gestionan proyectos; cualquier usuario logueado lista.
    - El código se normaliza a mayúsculas y solo [A-Z0-9-].
    - Código y nombre son obligatorios.
    - El chequeo de código existente corre ANTES de guardar; si existe, la
      operación se aborta sin llegar al upsert.

Collaborators:
    - ProjectRepository (code_exists, save_project, list_projects, delete_project)
    - application.filtering.filter_projects
===============================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ...crosscutting.exceptions import VaultError
from ...crosscutting.pagination import paginate
from ...domain.entities import Project, ProjectStatus, User, new_id
from ...domain.permissions import can_manage_projects
from ...domain.repositories import ProjectRepository
from ..filtering import ALL_OPTION, filter_projects
from .results import (
    CommandResult,
    ProjectListResult,
    ProjectResult,
    conflict,
    forbidden,
    remote_error,
    validation_error,
)

_CODE_DISALLOWED = re.compile(r"[^A-Z0-9-]")


def normalize_project_code(raw: str) -> str:
    return _CODE_DISALLOWED.sub("", (raw or "").upper())


class ListProjectsUseCase:
    def __init__(self, projects: ProjectRepository, *, page_size: int = 10) -> None:
        self._projects = projects
        self._page_size = page_size

    def execute(
        self,
        actor: User | None,
        *,
        search: str = "",
        status: str = ALL_OPTION,
        page: int | None = None,
    ) -> ProjectListResult:
        if actor is None:
            return ProjectListResult(error=forbidden("Login required"))
        try:
            projects = self._projects.list_projects()
        except VaultError as exc:
            return ProjectListResult(error=remote_error(exc, "list_projects"))
        projects = filter_projects(projects, search, status)
        if page is None:
            return ProjectListResult(projects=projects)
        current = paginate(projects, page, self._page_size)
        return ProjectListResult(projects=current.items, page_info=current.page_info)


@dataclass(frozen=True)
class SaveProjectInput:
    actor: User | None
    code: str
    name: str
    description: str = ""
    status: ProjectStatus = ProjectStatus.ACTIVE
    existing: Project | None = None


class SaveProjectUseCase:
    def __init__(self, projects: ProjectRepository) -> None:
        self._projects = projects

    def execute(self, input_data: SaveProjectInput) -> ProjectResult:
        if not can_manage_projects(input_data.actor):
            return ProjectResult(error=forbidden("You cannot manage projects"))

        code = normalize_project_code(input_data.code)
        name = input_data.name.strip()
        if not code:
            return ProjectResult(error=validation_error("Project code is required"))
        if not name:
            return ProjectResult(error=validation_error("Project name is required"))

        existing = input_data.existing
        try:
            if self._projects.code_exists(code, existing.id if existing else None):
                return ProjectResult(
                    error=conflict(f"Project code {code} already exists")
                )
            project = Project(
                id=existing.id if existing else new_id(),
                code=code,
                name=name,
                description=input_data.description.strip(),
                status=input_data.status,
                created_at=existing.created_at if existing else None,
            )
            self._projects.save_project(project, is_new=existing is None)
        except VaultError as exc:
            return ProjectResult(error=remote_error(exc, "save_project"))
        return ProjectResult(project=project)


class DeleteProjectUseCase:
    def __init__(self, projects: ProjectRepository) -> None:
        self._projects = projects

    def execute(self, actor: User | None, project: Project) -> CommandResult:
        if not can_manage_projects(actor):
            return CommandResult(error=forbidden("You cannot manage projects"))
        try:
            self._projects.delete_project(project)
        except VaultError as exc:
            return CommandResult(error=remote_error(exc, "delete_project"))
        return CommandResult(ok=True)
