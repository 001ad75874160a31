"""
===============================================================================
USE CASES: Resources (list / save / duplicate / delete / import / export / attach)
===============================================================================

Business Goal:
    Operar sobre los registros de una categoría aplicando:
      - permisos por rol ANTES de cualquier llamada remota
      - validación de requeridos en el camino manual (formulario)
      - filtros tipados por esquema
      - intercambio CSV

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Classes:
    ListResourcesUseCase, ShowResourceUseCase, SaveResourceUseCase,
    DuplicateResourceUseCase, DeleteResourceUseCase, ImportResourcesUseCase,
    ExportResourcesUseCase, UploadAttachmentUseCase

Collaborators:
    - ResourceRepository, CategoryRepository, ProjectRepository, ProfileRepository
    - domain.permissions, domain.schema
    - application.filtering, csv_export, csv_import, lookups, rendering, uploads
    - crosscutting.pagination

Error Mapping:
    - FORBIDDEN: sin actor / rol insuficiente / categoría no visible
    - VALIDATION_ERROR: campo requerido faltante, CSV sin datos o sin columnas,
      archivo rechazado, fecha de filtro inválida
    - NOT_FOUND: categoría inexistente
    - REMOTE_ERROR: falla del store (mensaje del store)

Notas:
    - El import NO valida requeridos por defecto (mismo comportamiento que el
      camino histórico); `enforce_required_fields=True` lo activa.
    - El import no hace rollback: una falla corta el lote y se informa cuántas
      filas se guardaron antes.
===============================================================================
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, List, Mapping
from zoneinfo import ZoneInfo

from ...crosscutting.exceptions import VaultError
from ...crosscutting.logger import logger
from ...crosscutting.pagination import paginate
from ...domain.entities import (
    Category,
    FieldDefinition,
    FieldType,
    Resource,
    User,
    new_id,
    now_millis,
)
from ...domain.permissions import (
    can_create_resource,
    can_delete_resource,
    can_edit_resource,
    can_view_category,
    visible_categories,
)
from ...domain.repositories import (
    CategoryRepository,
    ProfileRepository,
    ProjectRepository,
    ResourceRepository,
)
from ...domain.schema import validate_resource_against_category
from ..csv_codec import ValueLocale
from ..csv_export import CSV_CONTENT_TYPE, export_resources_csv
from ..csv_import import CsvImportError, parse_import
from ..filtering import ResourceFilter, filter_resources, parse_filter_date
from ..lookups import load_directory
from ..rendering import display_row
from ..uploads import AssetUploader, UploadedFile, UploadRejectedError
from .results import (
    CommandResult,
    DraftResult,
    ExportResult,
    ImportResult,
    ResourceDetailResult,
    ResourceListResult,
    ResourceResult,
    UploadResult,
    forbidden,
    not_found,
    remote_error,
    validation_error,
)

Clock = Callable[[], int]


def missing_field_message(field_name: str) -> str:
    return f"Please enter {field_name}"


# =============================================================================
# List
# =============================================================================


@dataclass(frozen=True)
class ListResourcesInput:
    actor: User | None
    category_id: str | None = None
    criteria: ResourceFilter | None = None
    page: int | None = None


class ListResourcesUseCase:
    """
    Lista recursos (newest-first) limitados a categorías visibles para el actor
    y aplica los filtros. Los filtros por campo solo aplican con categoría.
    Con `page` se devuelve solo esa página (tamaño `page_size`) y su metadata.
    """

    def __init__(
        self,
        resources: ResourceRepository,
        categories: CategoryRepository,
        *,
        zone: ZoneInfo,
        page_size: int = 10,
    ) -> None:
        self._resources = resources
        self._categories = categories
        self._zone = zone
        self._page_size = page_size

    def execute(self, input_data: ListResourcesInput) -> ResourceListResult:
        actor = input_data.actor
        if actor is None:
            return ResourceListResult(error=forbidden("Login required"))

        criteria = input_data.criteria
        if criteria is not None:
            try:
                criteria = replace(
                    criteria,
                    date_from=parse_filter_date(criteria.date_from),
                    date_to=parse_filter_date(criteria.date_to),
                )
            except ValueError:
                return ResourceListResult(error=validation_error("Invalid date"))

        try:
            categories = self._categories.list_categories()
            items = self._resources.list_resources(input_data.category_id)
        except VaultError as exc:
            return ResourceListResult(error=remote_error(exc, "list_resources"))

        category: Category | None = None
        if input_data.category_id:
            category = next(
                (c for c in categories if c.id == input_data.category_id), None
            )
            if category is None:
                return ResourceListResult(error=not_found("Category not found"))
            if not can_view_category(actor, category):
                return ResourceListResult(
                    error=forbidden("You cannot view this category")
                )

        visible_ids = {c.id for c in visible_categories(actor, categories)}
        items = [r for r in items if r.category_id in visible_ids]
        items = filter_resources(items, criteria, category=category, zone=self._zone)

        if input_data.page is None:
            return ResourceListResult(resources=items)
        page = paginate(items, input_data.page, self._page_size)
        return ResourceListResult(resources=page.items, page_info=page.page_info)


class ShowResourceUseCase:
    """Arma el detalle de un registro con los valores ya formateados."""

    def __init__(
        self,
        projects: ProjectRepository,
        profiles: ProfileRepository,
        *,
        locale: ValueLocale,
    ) -> None:
        self._projects = projects
        self._profiles = profiles
        self._locale = locale

    def execute(
        self, actor: User | None, category: Category, resource: Resource
    ) -> ResourceDetailResult:
        if not can_view_category(actor, category):
            return ResourceDetailResult(error=forbidden("You cannot view this category"))
        if resource.category_id != category.id:
            return ResourceDetailResult(
                error=validation_error("Record belongs to another category")
            )
        try:
            directory = load_directory(self._projects, self._profiles)
        except VaultError as exc:
            return ResourceDetailResult(error=remote_error(exc, "show_resource"))
        return ResourceDetailResult(
            resource=resource,
            display=display_row(category.fields, resource, directory, self._locale),
        )


# =============================================================================
# Save (create / edit)
# =============================================================================


@dataclass(frozen=True)
class SaveResourceInput:
    actor: User | None
    category: Category
    data: Mapping[str, Any]
    existing: Resource | None = None


class SaveResourceUseCase:
    def __init__(self, resources: ResourceRepository, *, clock: Clock = now_millis) -> None:
        self._resources = resources
        self._clock = clock

    def execute(self, input_data: SaveResourceInput) -> ResourceResult:
        actor = input_data.actor
        category = input_data.category
        existing = input_data.existing

        # ---------------------------------------------------------------------
        # 1) Permisos (antes de tocar la red).
        # ---------------------------------------------------------------------
        if actor is None:
            return ResourceResult(error=forbidden("Login required"))
        if existing is not None and not can_edit_resource(actor, existing):
            return ResourceResult(error=forbidden("You cannot edit this record"))
        if existing is None and not can_create_resource(actor):
            return ResourceResult(error=forbidden("You cannot create records"))
        if not can_view_category(actor, category):
            return ResourceResult(error=forbidden("You cannot view this category"))
        if existing is not None and existing.category_id != category.id:
            return ResourceResult(
                error=validation_error("Record belongs to another category")
            )

        # ---------------------------------------------------------------------
        # 2) Requeridos (primer faltante gana).
        # ---------------------------------------------------------------------
        outcome = validate_resource_against_category(category, input_data.data)
        if not outcome.ok:
            return ResourceResult(
                error=validation_error(
                    missing_field_message(outcome.missing_field_name or ""),
                    field_name=outcome.missing_field_name,
                )
            )

        # ---------------------------------------------------------------------
        # 3) Construir y persistir (id, autor y fecha se conservan al editar).
        # ---------------------------------------------------------------------
        resource = Resource(
            id=existing.id if existing else new_id(),
            category_id=category.id,
            data=copy.deepcopy(dict(input_data.data)),
            created_by=existing.created_by if existing else actor.username,
            created_at=existing.created_at if existing else self._clock(),
        )
        try:
            self._resources.save_resource(resource, is_new=existing is None)
        except VaultError as exc:
            return ResourceResult(error=remote_error(exc, "save_resource"))
        return ResourceResult(resource=resource)


# =============================================================================
# Duplicate / Delete
# =============================================================================


class DuplicateResourceUseCase:
    """Copia los datos de un registro a un borrador nuevo (no guarda)."""

    def execute(self, actor: User | None, resource: Resource) -> DraftResult:
        if not can_create_resource(actor):
            return DraftResult(error=forbidden("You cannot create records"))
        return DraftResult(data=copy.deepcopy(dict(resource.data)))


class DeleteResourceUseCase:
    def __init__(self, resources: ResourceRepository) -> None:
        self._resources = resources

    def execute(self, actor: User | None, resource: Resource) -> CommandResult:
        if not can_delete_resource(actor, resource):
            return CommandResult(error=forbidden("You cannot delete this record"))
        try:
            self._resources.delete_resource(resource)
        except VaultError as exc:
            return CommandResult(error=remote_error(exc, "delete_resource"))
        return CommandResult(ok=True)


# =============================================================================
# Import / Export
# =============================================================================


@dataclass(frozen=True)
class ImportResourcesInput:
    actor: User | None
    category: Category
    content: bytes | str
    enforce_required_fields: bool = False


class ImportResourcesUseCase:
    def __init__(
        self,
        resources: ResourceRepository,
        projects: ProjectRepository,
        profiles: ProfileRepository,
        *,
        locale: ValueLocale,
        clock: Clock = now_millis,
    ) -> None:
        self._resources = resources
        self._projects = projects
        self._profiles = profiles
        self._locale = locale
        self._clock = clock

    def execute(self, input_data: ImportResourcesInput) -> ImportResult:
        actor = input_data.actor
        category = input_data.category
        if not can_create_resource(actor) or not can_view_category(actor, category):
            return ImportResult(error=forbidden("You cannot import records here"))

        try:
            directory = load_directory(self._projects, self._profiles)
        except VaultError as exc:
            return ImportResult(error=remote_error(exc, "import_resources"))

        try:
            parsed = parse_import(
                category, input_data.content, directory=directory, locale=self._locale
            )
        except CsvImportError as exc:
            return ImportResult(error=validation_error(exc.message))

        imported = 0
        for row_number, data in enumerate(parsed.rows, start=1):
            if input_data.enforce_required_fields:
                outcome = validate_resource_against_category(category, data)
                if not outcome.ok:
                    return ImportResult(
                        imported=imported,
                        total_rows=parsed.total_rows,
                        error=validation_error(
                            f"Row {row_number}: "
                            + missing_field_message(outcome.missing_field_name or ""),
                            field_name=outcome.missing_field_name,
                        ),
                    )

            resource = Resource(
                id=new_id(),
                category_id=category.id,
                data=data,
                created_by=actor.username,
                created_at=self._clock(),
            )
            try:
                self._resources.save_resource(resource, is_new=True)
            except VaultError as exc:
                return ImportResult(
                    imported=imported,
                    total_rows=parsed.total_rows,
                    error=remote_error(exc, "import_resources"),
                )
            imported += 1

        logger.info(
            "csv import finished",
            extra={
                "category_id": category.id,
                "imported": imported,
                "total_rows": parsed.total_rows,
            },
        )
        return ImportResult(imported=imported, total_rows=parsed.total_rows)


@dataclass(frozen=True)
class ExportResourcesInput:
    actor: User | None
    category: Category | None
    resources: List[Resource] = field(default_factory=list)
    today: date | None = None


class ExportResourcesUseCase:
    """Exporta la lista YA filtrada de una categoría."""

    def __init__(
        self,
        projects: ProjectRepository,
        profiles: ProfileRepository,
        *,
        locale: ValueLocale,
    ) -> None:
        self._projects = projects
        self._profiles = profiles
        self._locale = locale

    def execute(self, input_data: ExportResourcesInput) -> ExportResult:
        category = input_data.category
        if category is None:
            return ExportResult(
                error=validation_error("Select a category to export")
            )
        if not can_view_category(input_data.actor, category):
            return ExportResult(error=forbidden("You cannot view this category"))

        try:
            directory = load_directory(self._projects, self._profiles)
        except VaultError as exc:
            return ExportResult(error=remote_error(exc, "export_resources"))

        document = export_resources_csv(
            category,
            input_data.resources,
            directory=directory,
            locale=self._locale,
            today=input_data.today,
        )
        return ExportResult(
            filename=document.filename,
            content=document.encode(),
            content_type=CSV_CONTENT_TYPE,
            row_count=document.row_count,
        )


# =============================================================================
# Attachments (image / file fields)
# =============================================================================


class UploadAttachmentUseCase:
    def __init__(self, uploader: AssetUploader) -> None:
        self._uploader = uploader

    def execute(
        self, actor: User | None, field_def: FieldDefinition, file: UploadedFile
    ) -> UploadResult:
        if actor is None:
            return UploadResult(error=forbidden("Login required"))
        if not field_def.type.is_attachment:
            return UploadResult(
                error=validation_error(f"{field_def.name} does not accept files")
            )
        try:
            url = self._uploader.upload_attachment(
                file, image_only=field_def.type == FieldType.IMAGE
            )
        except UploadRejectedError as exc:
            return UploadResult(error=validation_error(exc.message))
        except VaultError as exc:
            return UploadResult(error=remote_error(exc, "upload_attachment"))
        return UploadResult(url=url)
