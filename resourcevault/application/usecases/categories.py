"""
===============================================================================
USE CASES: Categories (schema builder)
===============================================================================

Business Goal:
    Crear, editar, listar y borrar esquemas de datos (Category).

Reglas:
    - Solo admin gestiona esquemas.
    - Guardar exige nombre, al menos un campo, nombres de campo no vacíos y
      keys únicas.
    - Defaults: acceso público, ícono 📁, created_at = ahora (solo al crear).
    - Borrar una categoría deja el destino de sus recursos al store
      (cascade / huérfanos).
    - El listado devuelve solo las categorías visibles para el actor.

Collaborators:
    - CategoryRepository
    - domain.schema.validate_category_for_save
    - domain.permissions.can_manage_schema / visible_categories
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from ...crosscutting.exceptions import VaultError
from ...domain.entities import DEFAULT_CATEGORY_ICON, Category, User, new_id, now_millis
from ...domain.permissions import can_manage_schema, visible_categories
from ...domain.repositories import CategoryRepository
from ...domain.schema import validate_category_for_save
from .results import (
    CategoryListResult,
    CategoryResult,
    CommandResult,
    forbidden,
    remote_error,
    validation_error,
)


class ListCategoriesUseCase:
    def __init__(self, categories: CategoryRepository) -> None:
        self._categories = categories

    def execute(self, actor: User | None) -> CategoryListResult:
        if actor is None:
            return CategoryListResult(error=forbidden("Login required"))
        try:
            categories = self._categories.list_categories()
        except VaultError as exc:
            return CategoryListResult(error=remote_error(exc, "list_categories"))
        return CategoryListResult(categories=visible_categories(actor, categories))


@dataclass(frozen=True)
class SaveCategoryInput:
    """`category.id` vacío => alta."""

    actor: User | None
    category: Category


class SaveCategoryUseCase:
    def __init__(
        self, categories: CategoryRepository, *, clock: Callable[[], int] = now_millis
    ) -> None:
        self._categories = categories
        self._clock = clock

    def execute(self, input_data: SaveCategoryInput) -> CategoryResult:
        if not can_manage_schema(input_data.actor):
            return CategoryResult(error=forbidden("Only admins can manage schemas"))

        draft = input_data.category
        error = validate_category_for_save(draft)
        if error:
            return CategoryResult(error=validation_error(error))

        is_new = not draft.id
        category = replace(
            draft,
            id=draft.id or new_id(),
            name=draft.name.strip(),
            icon=draft.icon or DEFAULT_CATEGORY_ICON,
            created_at=draft.created_at if draft.created_at is not None else self._clock(),
        )
        try:
            self._categories.save_category(category, is_new=is_new)
        except VaultError as exc:
            return CategoryResult(error=remote_error(exc, "save_category"))
        return CategoryResult(category=category)


class DeleteCategoryUseCase:
    def __init__(self, categories: CategoryRepository) -> None:
        self._categories = categories

    def execute(self, actor: User | None, category: Category) -> CommandResult:
        if not can_manage_schema(actor):
            return CommandResult(error=forbidden("Only admins can manage schemas"))
        try:
            self._categories.delete_category(category)
        except VaultError as exc:
            return CommandResult(error=remote_error(exc, "delete_category"))
        return CommandResult(ok=True)
