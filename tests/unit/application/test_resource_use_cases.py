"""
Name: Resource Use Case Tests

Responsibilities:
  - Equipment scenario (required field, save, list by category)
  - Permission checks before any store call
  - Role-scoped listing (date validation, paging), duplicate, delete
  - Detail values rendered for display
  - CSV import/export through the use cases
"""

from datetime import date

import pytest

from resourcevault.application.csv_codec import ValueLocale
from resourcevault.application.filtering import ResourceFilter
from resourcevault.application.uploads import UploadedFile
from resourcevault.application.usecases import (
    DeleteResourceUseCase,
    DuplicateResourceUseCase,
    ErrorCode,
    ExportResourcesInput,
    ImportResourcesInput,
    ImportResourcesUseCase,
    ListResourcesInput,
    SaveCategoryInput,
    SaveProjectInput,
    SaveResourceInput,
    SaveResourceUseCase,
)
from resourcevault.container import (
    build_services,
    get_export_resources_use_case,
    get_import_resources_use_case,
    get_list_resources_use_case,
    get_save_category_use_case,
    get_save_project_use_case,
    get_save_resource_use_case,
    get_show_resource_use_case,
    get_upload_attachment_use_case,
)
from resourcevault.crosscutting.config import Settings
from resourcevault.crosscutting.exceptions import RemoteStoreError
from resourcevault.domain.entities import FieldDefinition, FieldType, Resource

pytestmark = pytest.mark.unit


class FakeResourceRepository:
    def __init__(self, fail_on_call: int | None = None):
        self.saved: list[Resource] = []
        self.deleted: list[Resource] = []
        self.calls = 0
        self._fail_on_call = fail_on_call

    def list_resources(self, category_id=None):
        return [r for r in self.saved if category_id in (None, r.category_id)]

    def save_resource(self, resource, *, is_new):
        self.calls += 1
        if self.calls == self._fail_on_call:
            raise RemoteStoreError("violates row-level security policy", status_code=403)
        self.saved.append(resource)

    def delete_resource(self, resource):
        self.calls += 1
        self.deleted.append(resource)


class EmptyRepository:
    def list_projects(self):
        return []

    def list_profiles(self):
        return []


def _store_categories(services, admin, *categories):
    save = get_save_category_use_case(services)
    for category in categories:
        result = save.execute(SaveCategoryInput(actor=admin, category=category))
        assert result.error is None


class TestEquipmentScenario:
    def test_required_field_then_success_then_listed(
        self, services, admin_user, equipment_category
    ):
        _store_categories(services, admin_user, equipment_category)
        save = get_save_resource_use_case(services)

        failed = save.execute(
            SaveResourceInput(actor=admin_user, category=equipment_category, data={})
        )
        assert failed.error.code == ErrorCode.VALIDATION_ERROR
        assert failed.error.field_name == "name"
        assert failed.error.message == "Please enter name"

        saved = save.execute(
            SaveResourceInput(
                actor=admin_user, category=equipment_category, data={"name": "Laptop"}
            )
        )
        assert saved.error is None
        assert saved.resource.created_by == "admin"

        listed = get_list_resources_use_case(services).execute(
            ListResourcesInput(actor=admin_user, category_id=equipment_category.id)
        )
        assert [r.data for r in listed.resources] == [{"name": "Laptop"}]


class TestSaveResource:
    def test_plain_user_cannot_create_and_store_is_untouched(
        self, plain_user, equipment_category
    ):
        repo = FakeResourceRepository()

        result = SaveResourceUseCase(repo).execute(
            SaveResourceInput(actor=plain_user, category=equipment_category, data={"name": "x"})
        )

        assert result.error.code == ErrorCode.FORBIDDEN
        assert repo.calls == 0

    def test_owner_can_edit_and_identity_is_kept(self, plain_user, equipment_category):
        repo = FakeResourceRepository()

        existing = Resource(
            id="r1",
            category_id=equipment_category.id,
            data={"name": "Old"},
            created_by=plain_user.username,
            created_at=123,
        )
        result = SaveResourceUseCase(repo, clock=lambda: 999).execute(
            SaveResourceInput(
                actor=plain_user,
                category=equipment_category,
                data={"name": "New"},
                existing=existing,
            )
        )

        assert result.error is None
        assert result.resource.id == "r1"
        assert result.resource.created_at == 123
        assert result.resource.created_by == plain_user.username
        assert result.resource.data == {"name": "New"}

    def test_plain_user_cannot_edit_others(self, plain_user, equipment_category):
        repo = FakeResourceRepository()

        existing = Resource(id="r1", category_id=equipment_category.id, created_by="admin")
        result = SaveResourceUseCase(repo).execute(
            SaveResourceInput(
                actor=plain_user, category=equipment_category, data={"name": "x"}, existing=existing
            )
        )

        assert result.error.code == ErrorCode.FORBIDDEN
        assert repo.calls == 0

    def test_store_failure_is_reported(self, admin_user, equipment_category):
        result = SaveResourceUseCase(FakeResourceRepository(fail_on_call=1)).execute(
            SaveResourceInput(actor=admin_user, category=equipment_category, data={"name": "x"})
        )

        assert result.error.code == ErrorCode.REMOTE_ERROR
        assert "row-level security" in result.error.message


class TestListResources:
    def test_plain_user_never_sees_restricted_records(
        self, services, admin_user, plain_user, equipment_category, restricted_category
    ):
        _store_categories(services, admin_user, equipment_category, restricted_category)
        save = get_save_resource_use_case(services)
        save.execute(SaveResourceInput(admin_user, equipment_category, {"name": "Laptop"}))
        save.execute(SaveResourceInput(admin_user, restricted_category, {"code": "X"}))
        list_uc = get_list_resources_use_case(services)

        all_for_user = list_uc.execute(ListResourcesInput(actor=plain_user))
        all_for_admin = list_uc.execute(ListResourcesInput(actor=admin_user))
        denied = list_uc.execute(
            ListResourcesInput(actor=plain_user, category_id=restricted_category.id)
        )

        assert [r.category_id for r in all_for_user.resources] == [equipment_category.id]
        assert len(all_for_admin.resources) == 2
        assert denied.error.code == ErrorCode.FORBIDDEN

    def test_unknown_category_is_not_found(self, services, admin_user):
        result = get_list_resources_use_case(services).execute(
            ListResourcesInput(actor=admin_user, category_id="nope")
        )

        assert result.error.code == ErrorCode.NOT_FOUND

    def test_newest_first_with_filters(self, services, admin_user, equipment_category):
        _store_categories(services, admin_user, equipment_category)
        ticks = iter([1_000, 2_000, 3_000])

        save = SaveResourceUseCase(services.resources, clock=lambda: next(ticks))
        for name in ("Laptop A", "Mouse", "Laptop B"):
            save.execute(SaveResourceInput(admin_user, equipment_category, {"name": name}))

        result = get_list_resources_use_case(services).execute(
            ListResourcesInput(
                actor=admin_user,
                category_id=equipment_category.id,
                criteria=ResourceFilter(field_filters={"name": "laptop"}),
            )
        )

        assert [r.data["name"] for r in result.resources] == ["Laptop B", "Laptop A"]

    def test_non_iso_date_is_a_validation_error(self, services, admin_user):
        result = get_list_resources_use_case(services).execute(
            ListResourcesInput(
                actor=admin_user, criteria=ResourceFilter(date_from="05/03/2024")
            )
        )

        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.message == "Invalid date"
        assert result.resources == []

    def test_iso_date_strings_are_accepted(self, services, admin_user):
        result = get_list_resources_use_case(services).execute(
            ListResourcesInput(
                actor=admin_user,
                criteria=ResourceFilter(date_from="2024-03-05", date_to=" 2024-03-06 "),
            )
        )

        assert result.error is None

    def test_page_uses_configured_page_size(self, admin_user, equipment_category):
        graph = build_services(Settings(app_env="test", backend_url="", page_size=2))
        _store_categories(graph, admin_user, equipment_category)
        ticks = iter([1_000, 2_000, 3_000])
        save = SaveResourceUseCase(graph.resources, clock=lambda: next(ticks))
        for name in ("A", "B", "C"):
            save.execute(SaveResourceInput(admin_user, equipment_category, {"name": name}))
        list_uc = get_list_resources_use_case(graph)

        first = list_uc.execute(ListResourcesInput(actor=admin_user, page=1))
        last = list_uc.execute(ListResourcesInput(actor=admin_user, page=5))
        everything = list_uc.execute(ListResourcesInput(actor=admin_user))

        assert [r.data["name"] for r in first.resources] == ["C", "B"]
        assert first.page_info.total == 3
        assert first.page_info.has_next is True
        assert [r.data["name"] for r in last.resources] == ["A"]
        assert last.page_info.page == 2
        assert len(everything.resources) == 3
        assert everything.page_info is None
        graph.close()


class TestShowResource:
    def test_values_are_rendered_for_display(self, services, admin_user, asset_category):
        project = get_save_project_use_case(services).execute(
            SaveProjectInput(admin_user, "PRJ-001", "Alpha")
        ).project
        resource = Resource(
            id="r1",
            category_id=asset_category.id,
            data={
                "name_key": "Laptop",
                "bought": "2024-03-05",
                "active": True,
                "projects": [project.id, "all"],
            },
            created_by="admin",
        )

        result = get_show_resource_use_case(services).execute(
            admin_user, asset_category, resource
        )

        assert result.error is None
        assert result.display["name_key"] == "Laptop"
        assert result.display["bought"] == "5/3/2024"
        assert result.display["active"] == "Có"
        assert result.display["projects"] == "PRJ-001, ALL"
        assert result.display["qty"] == ""

    def test_plain_user_cannot_view_restricted_detail(self, services, plain_user, restricted_category):
        resource = Resource(id="r1", category_id=restricted_category.id, data={"code": "X"})

        result = get_show_resource_use_case(services).execute(
            plain_user, restricted_category, resource
        )

        assert result.error.code == ErrorCode.FORBIDDEN
        assert result.display == {}


class TestDuplicateAndDelete:
    def test_duplicate_copies_data_into_draft(self, manager_user):
        source = Resource(id="r1", category_id="c", data={"tags": ["a"]}, created_by="x")

        draft = DuplicateResourceUseCase().execute(manager_user, source)
        draft.data["tags"].append("b")

        assert draft.error is None
        assert source.data == {"tags": ["a"]}

    def test_delete_checks_ownership_first(self, plain_user):
        repo = FakeResourceRepository()
        other = Resource(id="r1", category_id="c", created_by="admin")
        own = Resource(id="r2", category_id="c", created_by=plain_user.username)

        denied = DeleteResourceUseCase(repo).execute(plain_user, other)
        allowed = DeleteResourceUseCase(repo).execute(plain_user, own)

        assert denied.error.code == ErrorCode.FORBIDDEN
        assert allowed.ok is True
        assert repo.deleted == [own]


class TestImportExport:
    def test_ten_import_creates_one_record(self, services, manager_user, asset_category):
        result = get_import_resources_use_case(services).execute(
            ImportResourcesInput(
                actor=manager_user, category=asset_category, content='"Tên"\n"Laptop"\n'.encode()
            )
        )

        assert result.error is None
        assert result.summary == "Imported 1/1 rows"
        stored = services.resources.list_resources(asset_category.id)
        assert len(stored) == 1
        assert stored[0].data == {"name_key": "Laptop"}
        assert stored[0].created_by == "manager"

    def test_import_skips_required_checks_by_default(self, manager_user, asset_category):
        repo = FakeResourceRepository()
        use_case = ImportResourcesUseCase(
            repo, EmptyRepository(), EmptyRepository(), locale=ValueLocale()
        )

        lenient = use_case.execute(
            ImportResourcesInput(manager_user, asset_category, "Notes\nhello")
        )
        strict = use_case.execute(
            ImportResourcesInput(
                manager_user, asset_category, "Notes\nhello", enforce_required_fields=True
            )
        )

        assert lenient.imported == 1
        assert strict.imported == 0
        assert strict.error.field_name == "Tên"

    def test_import_stops_at_first_failure(self, manager_user, equipment_category):
        repo = FakeResourceRepository(fail_on_call=2)
        use_case = ImportResourcesUseCase(
            repo, EmptyRepository(), EmptyRepository(), locale=ValueLocale()
        )

        result = use_case.execute(
            ImportResourcesInput(manager_user, equipment_category, "name\nA\nB\nC")
        )

        assert result.error.code == ErrorCode.REMOTE_ERROR
        assert result.imported == 1
        assert result.total_rows == 3

    def test_plain_user_cannot_import(self, plain_user, equipment_category):
        repo = FakeResourceRepository()
        use_case = ImportResourcesUseCase(
            repo, EmptyRepository(), EmptyRepository(), locale=ValueLocale()
        )

        result = use_case.execute(ImportResourcesInput(plain_user, equipment_category, "name\nA"))

        assert result.error.code == ErrorCode.FORBIDDEN
        assert repo.calls == 0

    def test_empty_file_is_a_validation_error(self, services, manager_user, equipment_category):
        result = get_import_resources_use_case(services).execute(
            ImportResourcesInput(manager_user, equipment_category, b"")
        )

        assert result.error.code == ErrorCode.VALIDATION_ERROR
        assert result.error.message == "File has no data rows"

    def test_export_returns_csv_bytes(self, services, admin_user, equipment_category):
        records = [
            Resource(id="r1", category_id=equipment_category.id, data={"name": "Laptop"}, created_by="admin")
        ]

        result = get_export_resources_use_case(services).execute(
            ExportResourcesInput(
                actor=admin_user,
                category=equipment_category,
                resources=records,
                today=date(2024, 3, 5),
            )
        )

        assert result.filename == "Equipment_Export_2024-03-05.csv"
        assert result.content_type.startswith("text/csv")
        assert result.row_count == 1
        assert result.content.decode("utf-8-sig").splitlines()[0] == "ID,name,Creator,CreatedAt"

    def test_export_requires_category(self, services, admin_user):
        result = get_export_resources_use_case(services).execute(
            ExportResourcesInput(actor=admin_user, category=None)
        )

        assert result.error.code == ErrorCode.VALIDATION_ERROR


class TestAttachments:
    def test_image_field_uploads_to_attachment_bucket(self, services, admin_user):
        field_def = FieldDefinition(id="f", name="Photo", key="photo", type=FieldType.IMAGE)

        result = get_upload_attachment_use_case(services).execute(
            admin_user,
            field_def,
            UploadedFile(filename="a.png", content=b"img", content_type="image/png"),
        )

        assert result.error is None
        assert "/resource-attachments/files/" in result.url

    def test_text_field_rejects_files(self, services, admin_user):
        field_def = FieldDefinition(id="f", name="Label", key="label", type=FieldType.TEXT)

        result = get_upload_attachment_use_case(services).execute(
            admin_user, field_def, UploadedFile(filename="a.png", content=b"img")
        )

        assert result.error.code == ErrorCode.VALIDATION_ERROR
