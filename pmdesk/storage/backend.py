"""
Hosted backend client.

Async HTTP client for the PostgREST table API of the hosted Postgres
service. Row-level security, uniqueness and referential integrity are
enforced server-side; this client only shapes requests and surfaces
failures.

Reference: https://postgrest.org/en/stable/references/api/tables_views.html
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

import httpx

from pmdesk.config import Settings, get_settings

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """A backend request failed (transport error or non-2xx response)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        super().__init__(message)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "BackendError":
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            return cls(
                body.get("message") or response.reason_phrase or "Backend request failed",
                status_code=response.status_code,
                code=body.get("code"),
                details=body.get("details") or body.get("hint"),
            )
        return cls(
            response.text or response.reason_phrase or "Backend request failed",
            status_code=response.status_code,
        )


# -----------------------------------------------------------------------------
# Filters
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Filter:
    """One ``column=op.value`` query condition."""
    column: str
    op: str
    value: str

    def to_param(self) -> tuple[str, str]:
        return self.column, f"{self.op}.{self.value}"


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote(value: Any) -> str:
    text = _literal(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", _literal(value))


def neq(column: str, value: Any) -> Filter:
    return Filter(column, "neq", _literal(value))


def ilike(column: str, pattern: str) -> Filter:
    """Case-insensitive LIKE; ``*`` is the wildcard."""
    return Filter(column, "ilike", pattern)


def contains(column: str, text: str) -> Filter:
    """Case-insensitive partial match (``ILIKE '%text%'``)."""
    return ilike(column, f"*{text}*")


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", "(" + ",".join(_quote(v) for v in values) + ")")


def is_(column: str, value: Optional[bool]) -> Filter:
    return Filter(column, "is", "null" if value is None else _literal(value))


# -----------------------------------------------------------------------------
# Client
# -----------------------------------------------------------------------------

class BackendClient:
    """
    Table-style client for the hosted backend.

    Provides:
    - select with filters / ordering / limit
    - insert, update and delete returning the affected rows

    ``update`` and ``delete`` require at least one filter.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        schema: str = "public",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.schema = schema
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "BackendClient":
        """Build a client from settings; raises ``MissingConfigurationError``."""
        settings = settings or get_settings()
        url, key = settings.require_backend()
        return cls(
            base_url=url,
            api_key=key,
            schema=settings.supabase_schema,
            timeout=settings.request_timeout,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
            }
            if self.schema != "public":
                headers["Accept-Profile"] = self.schema
                headers["Content-Profile"] = self.schema
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}/rest/v1",
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        table: str,
        params: Sequence[tuple[str, str]] = (),
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        client = await self._get_client()
        headers = {"Prefer": prefer} if prefer else None

        try:
            response = await client.request(
                method, f"/{table}", params=list(params), json=json, headers=headers
            )
        except httpx.HTTPError as e:
            raise BackendError(f"{method} {table} failed: {e}") from e

        if response.is_error:
            error = BackendError.from_response(response)
            logger.debug("%s %s -> %s %s", method, table, response.status_code, error.message)
            raise error

        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    # ----- Table operations -----

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Iterable[Filter] = (),
        order: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Select rows matching every filter."""
        params = [("select", columns)]
        params.extend(f.to_param() for f in filters)
        if order:
            params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        return await self._request("GET", table, params)

    async def insert(
        self,
        table: str,
        rows: dict[str, Any] | list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Insert one or more rows and return them as stored."""
        return await self._request("POST", table, json=rows, prefer="return=representation")

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        filters: Iterable[Filter],
    ) -> list[dict[str, Any]]:
        """Update matching rows and return them."""
        params = [f.to_param() for f in filters]
        if not params:
            raise ValueError(f"Refusing to update every row of {table!r}: no filter given")
        return await self._request(
            "PATCH", table, params, json=values, prefer="return=representation"
        )

    async def delete(
        self,
        table: str,
        filters: Iterable[Filter],
    ) -> list[dict[str, Any]]:
        """Delete matching rows and return them.

        Rows hidden by row-level security are silently not deleted, so an
        empty result is not an error.
        """
        params = [f.to_param() for f in filters]
        if not params:
            raise ValueError(f"Refusing to delete every row of {table!r}: no filter given")
        return await self._request("DELETE", table, params, prefer="return=representation")
