from .repositories import (
    RemoteAuditLogRepository,
    RemoteCategoryRepository,
    RemoteProfileRepository,
    RemoteProjectRepository,
    RemoteResourceRepository,
    RemoteSystemConfigRepository,
)

__all__ = [
    "RemoteAuditLogRepository",
    "RemoteCategoryRepository",
    "RemoteProfileRepository",
    "RemoteProjectRepository",
    "RemoteResourceRepository",
    "RemoteSystemConfigRepository",
]
