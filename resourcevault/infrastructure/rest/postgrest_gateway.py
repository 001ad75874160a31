"""
============================================================
TARJETA CRC — infrastructure/rest/postgrest_gateway.py
============================================================
Class: PostgrestTableGateway

Responsibilities:
  - Implementar TableGateway contra un endpoint REST estilo PostgREST.
  - Traducir RowFilter/Ordering a query params (`col=eq.v`, `order=col.desc`).
  - Reenviar el access token del usuario (RLS) o la anon key.
  - Mapear errores HTTP/red a RemoteStoreError con el mensaje del store.

Collaborators:
  - domain.services.TableGateway (port)
  - crosscutting.exceptions.RemoteStoreError
  - httpx (HTTP client, transport inyectable para tests)

Notes:
  - Sin reintentos: un fallo es terminal para la acción del usuario.
============================================================
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

import httpx

from ...crosscutting.exceptions import RemoteStoreError
from ...crosscutting.logger import logger
from ...domain.field_values import as_text
from ...domain.services import Ordering, Row, RowFilter

TokenProvider = Callable[[], Optional[str]]

_RETURN_ROWS = "return=representation"
_MERGE_DUPLICATES = "resolution=merge-duplicates"


def _filter_params(filters: Sequence[RowFilter]) -> list[tuple[str, str]]:
    return [(f.column, f"{f.op.value}.{as_text(f.value)}") for f in filters]


def _order_param(order: Sequence[Ordering]) -> str:
    return ",".join(f"{o.column}.{'asc' if o.ascending else 'desc'}" for o in order)


class PostgrestTableGateway:
    """TableGateway sobre HTTP (PostgREST)."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        token_provider: TokenProvider | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required for the REST gateway")
        self._api_key = api_key
        self._token_provider = token_provider
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"apikey": api_key, "Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    # =========================================================================
    # TableGateway
    # =========================================================================

    def select(
        self,
        table: str,
        *,
        filters: Sequence[RowFilter] = (),
        order: Sequence[Ordering] = (),
        limit: Optional[int] = None,
    ) -> List[Row]:
        params: list[tuple[str, str]] = [("select", "*")]
        params.extend(_filter_params(filters))
        if order:
            params.append(("order", _order_param(order)))
        if limit is not None:
            params.append(("limit", str(limit)))
        return self._request("GET", table, params=params)

    def insert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        return self._request(
            "POST", table, json=list(rows), prefer=_RETURN_ROWS
        )

    def upsert(self, table: str, rows: Sequence[Row]) -> List[Row]:
        return self._request(
            "POST",
            table,
            json=list(rows),
            prefer=f"{_MERGE_DUPLICATES},{_RETURN_ROWS}",
        )

    def update(self, table: str, values: Row, *, filters: Sequence[RowFilter]) -> None:
        if not filters:
            raise ValueError("update without filters is not allowed")
        self._request("PATCH", table, params=_filter_params(filters), json=values)

    def delete(self, table: str, *, filters: Sequence[RowFilter]) -> None:
        if not filters:
            raise ValueError("delete without filters is not allowed")
        self._request("DELETE", table, params=_filter_params(filters))

    # =========================================================================
    # Internals
    # =========================================================================

    def _headers(self, prefer: str | None) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        headers = {"Authorization": f"Bearer {token or self._api_key}"}
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> List[Row]:
        try:
            response = self._client.request(
                method,
                f"/{table}",
                params=params,
                json=json,
                headers=self._headers(prefer),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise self._map_status_error(method, table, exc) from exc
        except httpx.RequestError as exc:
            logger.error(
                "rest gateway network error",
                extra={"method": method, "table": table, "error": str(exc)},
            )
            raise RemoteStoreError(
                f"Could not reach the data store: {exc}", original_error=exc
            ) from exc

        if not response.content:
            return []
        body = response.json()
        if isinstance(body, list):
            return body
        return [body] if isinstance(body, dict) else []

    @staticmethod
    def _map_status_error(
        method: str, table: str, exc: httpx.HTTPStatusError
    ) -> RemoteStoreError:
        status = exc.response.status_code
        message = f"Data store request failed ({status})"
        store_code = None
        try:
            payload = exc.response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = payload.get("message") or message
            store_code = payload.get("code")

        logger.error(
            "rest gateway request failed",
            extra={
                "method": method,
                "table": table,
                "status": status,
                "store_code": store_code,
            },
        )
        return RemoteStoreError(
            message, status_code=status, store_code=store_code, original_error=exc
        )
