"""
Name: PostgREST Gateway Tests

Responsibilities:
  - Query params for filters, ordering and limit
  - Authorization header (user token or anon key) and Prefer hints
  - HTTP/network failures mapped to RemoteStoreError
"""

import json

import httpx
import pytest

from resourcevault.crosscutting.exceptions import RemoteStoreError
from resourcevault.domain.services import Ordering, RowFilter
from resourcevault.infrastructure.rest import PostgrestTableGateway

pytestmark = pytest.mark.unit

BASE_URL = "https://db.example.com/rest/v1"


class RecordingTransport:
    """R: MockTransport que guarda las requests y responde con un handler."""

    def __init__(self, status=200, body=None):
        self.requests: list[httpx.Request] = []
        self._status = status
        self._body = body

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._body is None:
            return httpx.Response(self._status)
        return httpx.Response(self._status, json=self._body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _gateway(recorder, token=None) -> PostgrestTableGateway:
    return PostgrestTableGateway(
        base_url=BASE_URL,
        api_key="anon-key",
        token_provider=lambda: token,
        transport=httpx.MockTransport(recorder),
    )


def test_select_builds_query_params():
    recorder = RecordingTransport(body=[{"id": "p1", "code": "PRJ-001"}])
    gateway = _gateway(recorder, token="user-token")

    rows = gateway.select(
        "projects",
        filters=[RowFilter.eq("code", "PRJ-001"), RowFilter.neq("id", "p9")],
        order=[Ordering("created_at", ascending=False), Ordering("code")],
        limit=1,
    )

    assert rows == [{"id": "p1", "code": "PRJ-001"}]
    request = recorder.last
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/projects"
    assert request.url.params.multi_items() == [
        ("select", "*"),
        ("code", "eq.PRJ-001"),
        ("id", "neq.p9"),
        ("order", "created_at.desc,code.asc"),
        ("limit", "1"),
    ]
    assert request.headers["Authorization"] == "Bearer user-token"
    assert request.headers["apikey"] == "anon-key"


def test_anon_key_is_used_without_session():
    recorder = RecordingTransport(body=[])
    _gateway(recorder).select("categories")

    assert recorder.last.headers["Authorization"] == "Bearer anon-key"


def test_insert_and_upsert_send_prefer_headers():
    recorder = RecordingTransport(status=201, body=[{"id": "r1"}])
    gateway = _gateway(recorder)

    gateway.insert("resources", [{"id": "r1"}])
    insert_request = recorder.last
    gateway.upsert("system_config", [{"id": 1, "site_name": "X"}])
    upsert_request = recorder.last

    assert insert_request.method == "POST"
    assert insert_request.headers["Prefer"] == "return=representation"
    assert json.loads(insert_request.content) == [{"id": "r1"}]
    assert upsert_request.headers["Prefer"] == (
        "resolution=merge-duplicates,return=representation"
    )


def test_update_and_delete_are_filtered():
    recorder = RecordingTransport(status=204)
    gateway = _gateway(recorder)

    gateway.update("profiles", {"role": "manager"}, filters=[RowFilter.eq("id", "u1")])
    assert recorder.last.method == "PATCH"
    assert recorder.last.url.params["id"] == "eq.u1"

    gateway.delete("resources", filters=[RowFilter.eq("id", "r1")])
    assert recorder.last.method == "DELETE"
    assert recorder.last.url.params["id"] == "eq.r1"


@pytest.mark.parametrize("call", ["update", "delete"])
def test_unfiltered_writes_are_refused(call):
    recorder = RecordingTransport()
    gateway = _gateway(recorder)

    with pytest.raises(ValueError):
        if call == "update":
            gateway.update("resources", {"data": {}}, filters=[])
        else:
            gateway.delete("resources", filters=[])

    assert recorder.requests == []


def test_single_object_body_is_wrapped():
    recorder = RecordingTransport(body={"id": 1})
    assert _gateway(recorder).select("system_config") == [{"id": 1}]


def test_store_error_keeps_message_and_code():
    recorder = RecordingTransport(
        status=409,
        body={"message": "duplicate key value violates unique constraint", "code": "23505"},
    )

    with pytest.raises(RemoteStoreError) as exc:
        _gateway(recorder).insert("projects", [{"code": "PRJ-001"}])

    assert exc.value.message == "duplicate key value violates unique constraint"
    assert exc.value.status_code == 409
    assert exc.value.store_code == "23505"


def test_error_without_json_body_gets_generic_message():
    recorder = RecordingTransport(status=500)

    with pytest.raises(RemoteStoreError) as exc:
        _gateway(recorder).select("resources")

    assert exc.value.message == "Data store request failed (500)"


def test_network_error_is_mapped():
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    gateway = PostgrestTableGateway(
        base_url=BASE_URL, api_key="k", transport=httpx.MockTransport(unreachable)
    )

    with pytest.raises(RemoteStoreError, match="Could not reach the data store"):
        gateway.select("resources")


def test_base_url_is_required():
    with pytest.raises(ValueError):
        PostgrestTableGateway(base_url="", api_key="k")
