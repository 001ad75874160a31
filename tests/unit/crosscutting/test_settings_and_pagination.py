"""
Name: Settings & Pagination Tests

Responsibilities:
  - Settings validators (time zone, limits, production backend)
  - Page slicing, clamping and metadata
"""

import pytest
from pydantic import ValidationError

from resourcevault.crosscutting.config import Settings
from resourcevault.crosscutting.pagination import paginate

pytestmark = pytest.mark.unit


class TestSettings:
    def test_defaults(self):
        settings = Settings(app_env="test")

        assert settings.page_size == 10
        assert settings.max_avatar_bytes == 2 * 1024 * 1024
        assert settings.audit_log_limit == 100
        assert settings.zone().key == "Asia/Ho_Chi_Minh"
        assert settings.uses_in_memory_backend()

    def test_backend_url_is_normalised(self):
        settings = Settings(app_env="development", backend_url="https://db.example.com/ ")

        assert settings.backend_url == "https://db.example.com"
        assert not settings.uses_in_memory_backend()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"timezone": "Mars/Olympus"},
            {"page_size": 0},
            {"max_attachment_bytes": 0},
        ],
    )
    def test_invalid_values_are_rejected(self, overrides):
        with pytest.raises(ValidationError):
            Settings(app_env="test", **overrides)

    def test_production_requires_backend(self):
        with pytest.raises(ValidationError):
            Settings(app_env="production")

        settings = Settings(
            app_env="prod", backend_url="https://db.example.com", backend_anon_key="anon"
        )
        assert settings.is_production()


class TestPaginate:
    def test_slices_requested_page(self):
        page = paginate(list(range(25)), page=2, page_size=10)

        assert page.items == list(range(10, 20))
        assert page.page_info.total == 25
        assert page.page_info.total_pages == 3
        assert page.page_info.has_next and page.page_info.has_prev

    def test_page_beyond_end_clamps_to_last(self):
        page = paginate(list(range(25)), page=9, page_size=10)

        assert page.page_info.page == 3
        assert page.items == [20, 21, 22, 23, 24]
        assert not page.page_info.has_next

    def test_empty_list(self):
        page = paginate([], page=4, page_size=10)

        assert page.items == []
        assert page.page_info.page == 1
        assert page.page_info.total_pages == 0

    def test_invalid_inputs_are_coerced(self):
        page = paginate(["a", "b"], page=0, page_size=0)

        assert page.page_info.page == 1
        assert page.page_info.page_size == 1
        assert page.items == ["a"]
