"""
Use Cases Layer (console operations)

Structure
---------
usecases/
├── results.py        # ErrorCode, UseCaseError, typed results
├── auth.py           # login / register / logout / current user
├── users.py          # user admin, profile, password
├── categories.py     # schema builder
├── resources.py      # records: list, save, duplicate, delete, CSV, attachments
├── projects.py       # projects with unique code
├── system_config.py  # site settings
└── activity_logs.py  # audit trail view

Usage
-----
    from resourcevault.application.usecases import SaveResourceInput, SaveResourceUseCase
"""

from .activity_logs import ListActivityLogsUseCase
from .auth import (
    CurrentUserUseCase,
    LoginInput,
    LoginUseCase,
    LogoutUseCase,
    RegisterInput,
    RegisterUseCase,
)
from .categories import (
    DeleteCategoryUseCase,
    ListCategoriesUseCase,
    SaveCategoryInput,
    SaveCategoryUseCase,
)
from .projects import (
    DeleteProjectUseCase,
    ListProjectsUseCase,
    SaveProjectInput,
    SaveProjectUseCase,
    normalize_project_code,
)
from .resources import (
    DeleteResourceUseCase,
    DuplicateResourceUseCase,
    ExportResourcesInput,
    ExportResourcesUseCase,
    ImportResourcesInput,
    ImportResourcesUseCase,
    ListResourcesInput,
    ListResourcesUseCase,
    SaveResourceInput,
    SaveResourceUseCase,
    ShowResourceUseCase,
    UploadAttachmentUseCase,
)
from .results import ErrorCode, UseCaseError
from .system_config import (
    GetSystemConfigUseCase,
    SaveSystemConfigInput,
    SaveSystemConfigUseCase,
    load_system_config,
)
from .users import (
    ChangePasswordInput,
    ChangePasswordUseCase,
    DeleteUserUseCase,
    ListUsersUseCase,
    UpdateProfileInput,
    UpdateProfileUseCase,
    UpdateUserRoleInput,
    UpdateUserRoleUseCase,
)

__all__ = [
    "ErrorCode",
    "UseCaseError",
    # auth
    "LoginInput",
    "LoginUseCase",
    "RegisterInput",
    "RegisterUseCase",
    "LogoutUseCase",
    "CurrentUserUseCase",
    # users
    "ListUsersUseCase",
    "UpdateUserRoleInput",
    "UpdateUserRoleUseCase",
    "DeleteUserUseCase",
    "UpdateProfileInput",
    "UpdateProfileUseCase",
    "ChangePasswordInput",
    "ChangePasswordUseCase",
    # categories
    "ListCategoriesUseCase",
    "SaveCategoryInput",
    "SaveCategoryUseCase",
    "DeleteCategoryUseCase",
    # resources
    "ListResourcesInput",
    "ListResourcesUseCase",
    "ShowResourceUseCase",
    "SaveResourceInput",
    "SaveResourceUseCase",
    "DuplicateResourceUseCase",
    "DeleteResourceUseCase",
    "ImportResourcesInput",
    "ImportResourcesUseCase",
    "ExportResourcesInput",
    "ExportResourcesUseCase",
    "UploadAttachmentUseCase",
    # projects
    "ListProjectsUseCase",
    "SaveProjectInput",
    "SaveProjectUseCase",
    "DeleteProjectUseCase",
    "normalize_project_code",
    # system config
    "GetSystemConfigUseCase",
    "SaveSystemConfigInput",
    "SaveSystemConfigUseCase",
    "load_system_config",
    # activity
    "ListActivityLogsUseCase",
]
