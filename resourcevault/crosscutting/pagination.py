"""
===============================================================================
MÓDULO: Utilidades de paginación (por número de página)
===============================================================================

Objetivo
--------
Paginación simple y consistente para las listas de la consola:
- página 1-based, tamaño fijo (Settings.page_size)
- la página pedida se acota a [1, total_pages]
- response genérico Page[T]

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  paginate

Responsabilidades:
  - Cortar la lista ya filtrada
  - Armar metadata has_next/has_prev y totales
===============================================================================
"""

from __future__ import annotations

from typing import Generic, List, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PageInfo(BaseModel):
    page: int = Field(description="Página actual (1-based)")
    page_size: int = Field(description="Items por página")
    total: int = Field(description="Total de items filtrados")
    total_pages: int = Field(description="Cantidad de páginas (0 si no hay items)")
    has_next: bool = Field(description="Hay más items después de esta página")
    has_prev: bool = Field(description="Hay items antes de esta página")


class Page(BaseModel, Generic[T]):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: List[T] = Field(description="Items de la página actual")
    page_info: PageInfo = Field(description="Metadatos de paginación")


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    """
    Devuelve la página pedida. Si `page` excede el total se devuelve la última
    (al filtrar, la lista puede achicarse por debajo de la página actual).
    """
    page_size = max(1, int(page_size))
    total = len(items)
    total_pages = (total + page_size - 1) // page_size

    page = max(1, int(page))
    if total_pages and page > total_pages:
        page = total_pages

    start = (page - 1) * page_size
    page_items = list(items[start : start + page_size])

    return Page(
        items=page_items,
        page_info=PageInfo(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )
