"""
===============================================================================
TARJETA CRC — domain/permissions.py
===============================================================================

Módulo:
    Política de permisos por rol (predicados puros)

Responsabilidades:
    - Decidir qué puede hacer un usuario sobre esquemas, proyectos y recursos.
    - Ser 100% testeable: funciones puras, inputs explícitos, totales
      (usuario ausente => False).

Colaboradores:
    - domain.entities: User, Role, Category, Resource, AccessLevel
    - application.usecases: chequean antes de cualquier llamada remota.

Reglas:
    - Admin puede todo.
    - Manager gestiona proyectos, crea recursos, ve todas las categorías y
      edita/borra cualquier recurso.
    - User no crea recursos; ve solo categorías públicas y edita/borra los propios.
    - La seguridad real la aplica el store (RLS); esto es solo UX.
===============================================================================
"""

from __future__ import annotations

from typing import Iterable

from .entities import AccessLevel, Category, Resource, Role, User


def _is_admin(user: User | None) -> bool:
    return user is not None and user.role == Role.ADMIN


def _is_staff(user: User) -> bool:
    return user.role in (Role.ADMIN, Role.MANAGER)


def _is_owner(user: User, resource: Resource) -> bool:
    return resource.created_by == user.username


def can_manage_schema(user: User | None) -> bool:
    return _is_admin(user)


def can_manage_projects(user: User | None) -> bool:
    return user is not None and _is_staff(user)


def can_create_resource(user: User | None) -> bool:
    return user is not None and _is_staff(user)


def can_view_category(user: User | None, category: Category) -> bool:
    if user is None:
        return False
    return _is_staff(user) or category.access_level == AccessLevel.PUBLIC


def can_edit_resource(user: User | None, resource: Resource) -> bool:
    if user is None:
        return False
    return _is_staff(user) or _is_owner(user, resource)


def can_delete_resource(user: User | None, resource: Resource) -> bool:
    if user is None:
        return False
    return _is_staff(user) or _is_owner(user, resource)


def can_manage_users(user: User | None) -> bool:
    return _is_admin(user)


def can_view_activity_logs(user: User | None) -> bool:
    return _is_admin(user)


def can_manage_settings(user: User | None) -> bool:
    return _is_admin(user)


def visible_categories(
    user: User | None, categories: Iterable[Category]
) -> list[Category]:
    """Filtra categorías visibles preservando el orden."""
    return [c for c in categories if can_view_category(user, c)]
