"""
===============================================================================
USE CASE: List Activity Logs
===============================================================================

Business Goal:
    Mostrar al admin las últimas N entradas de auditoría (newest-first),
    filtrables por acción y por texto libre (usuario / detalle).
    Con `page` se devuelve solo esa página de la lista filtrada.
===============================================================================
"""

from __future__ import annotations

from ...crosscutting.exceptions import VaultError
from ...crosscutting.pagination import paginate
from ...domain.entities import User
from ...domain.permissions import can_view_activity_logs
from ...domain.repositories import AuditLogRepository
from ..filtering import ALL_OPTION, filter_audit_logs
from .results import AuditLogListResult, forbidden, remote_error


class ListActivityLogsUseCase:
    def __init__(
        self,
        audit_logs: AuditLogRepository,
        *,
        limit: int = 100,
        page_size: int = 10,
    ) -> None:
        self._audit_logs = audit_logs
        self._limit = limit
        self._page_size = page_size

    def execute(
        self,
        actor: User | None,
        *,
        action: str = ALL_OPTION,
        text: str = "",
        page: int | None = None,
    ) -> AuditLogListResult:
        if not can_view_activity_logs(actor):
            return AuditLogListResult(error=forbidden("Only admins can view activity"))
        try:
            logs = self._audit_logs.list_recent(self._limit)
        except VaultError as exc:
            return AuditLogListResult(error=remote_error(exc, "list_activity_logs"))
        logs = filter_audit_logs(logs, action, text)
        if page is None:
            return AuditLogListResult(logs=logs)
        current = paginate(logs, page, self._page_size)
        return AuditLogListResult(logs=current.items, page_info=current.page_info)
