"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure the test environment (no .env, APP_ENV=test)
  - Provide users, categories and an in-memory service graph
  - Reset session context between tests

Notes:
  - Fixtures are auto-discovered by pytest
  - Every fixture is function scoped: each test gets a fresh in-memory store
"""

import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from resourcevault.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

os.environ.setdefault("APP_ENV", "test")

from resourcevault.application.csv_codec import ValueLocale  # noqa: E402
from resourcevault.container import VaultServices, build_services  # noqa: E402
from resourcevault.context import clear_context  # noqa: E402
from resourcevault.domain.entities import (  # noqa: E402
    AccessLevel,
    Category,
    FieldDefinition,
    FieldType,
    Role,
    User,
)


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


@pytest.fixture(autouse=True)
def _clean_context():
    clear_context()
    yield
    clear_context()


# ============================================================================
# Users
# ============================================================================


@pytest.fixture
def admin_user() -> User:
    """R: Admin actor."""
    return User(id="u-admin", username="admin", email="admin@example.com", role=Role.ADMIN)


@pytest.fixture
def manager_user() -> User:
    """R: Manager actor."""
    return User(
        id="u-manager", username="manager", email="manager@example.com", role=Role.MANAGER
    )


@pytest.fixture
def plain_user() -> User:
    """R: Regular user actor."""
    return User(
        id="u-plain",
        username="binh",
        email="binh@example.com",
        role=Role.USER,
        full_name="Trần Bình",
    )


# ============================================================================
# Categories
# ============================================================================


@pytest.fixture
def equipment_category() -> Category:
    """R: Category 'Equipment' with a single required text field."""
    return Category(
        id="cat-equipment",
        name="Equipment",
        fields=(FieldDefinition(id="f-name", name="name", key="name", required=True),),
        access_level=AccessLevel.PUBLIC,
        created_at=1_700_000_000_000,
    )


@pytest.fixture
def asset_category() -> Category:
    """R: Category with one field of every filterable type."""
    return Category(
        id="cat-assets",
        name="Assets",
        fields=(
            FieldDefinition(id="f1", name="Tên", key="name_key", type=FieldType.TEXT, required=True),
            FieldDefinition(id="f2", name="Notes", key="notes", type=FieldType.TEXTAREA),
            FieldDefinition(id="f3", name="Quantity", key="qty", type=FieldType.NUMBER),
            FieldDefinition(id="f4", name="Bought", key="bought", type=FieldType.DATE),
            FieldDefinition(id="f5", name="Active", key="active", type=FieldType.BOOLEAN),
            FieldDefinition(id="f6", name="Projects", key="projects", type=FieldType.PROJECT),
            FieldDefinition(id="f7", name="Owners", key="owners", type=FieldType.USER),
            FieldDefinition(id="f8", name="Photo", key="photo", type=FieldType.IMAGE),
        ),
        created_at=1_700_000_000_000,
    )


@pytest.fixture
def restricted_category() -> Category:
    """R: Restricted category hidden from plain users."""
    return Category(
        id="cat-secret",
        name="Secret",
        fields=(FieldDefinition(id="s1", name="Code", key="code"),),
        access_level=AccessLevel.RESTRICTED,
        created_at=1_700_000_000_001,
    )


# ============================================================================
# Services
# ============================================================================


@pytest.fixture
def test_settings() -> app_config.Settings:
    """R: Settings pinned to the in-memory backend."""
    return app_config.Settings(app_env="test", backend_url="")


@pytest.fixture
def services(test_settings) -> VaultServices:
    """R: Fresh in-memory service graph per test."""
    graph = build_services(test_settings)
    yield graph
    graph.close()


@pytest.fixture
def locale() -> ValueLocale:
    """R: Default CSV vocabulary (Vietnamese labels, Asia/Ho_Chi_Minh)."""
    return ValueLocale()
