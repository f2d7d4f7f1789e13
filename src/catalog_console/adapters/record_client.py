"""Record API client for catalog collections."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from catalog_console.adapters.api_models import error_message
from catalog_console.domain.errors import DeleteRequestFailed, RecordRequestFailed
from catalog_console.domain.records import RecordId

_logger = logging.getLogger(__name__)


class RecordClient(Protocol):
    """Interface for record collection CRUD."""

    async def list_records(
        self, collection: str, token: str | None = None
    ) -> list[dict[str, object]]:
        """Return every row of a collection."""

    async def create_record(
        self, collection: str, payload: dict[str, object], token: str
    ) -> dict[str, object]:
        """Create a record and return the API's representation of it."""

    async def update_record(
        self,
        collection: str,
        record_id: RecordId,
        payload: dict[str, object],
        token: str,
    ) -> dict[str, object]:
        """Replace a record and return the API's representation of it."""

    async def delete_record(
        self, collection: str, record_id: RecordId, token: str
    ) -> None:
        """Delete a record."""


def _auth_headers(token: str | None) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


@dataclass
class HttpxRecordClient(RecordClient):
    """HTTPX-backed record API client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(cls, base_url: str, timeout: float = 15) -> "HttpxRecordClient":
        """Create a record client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def list_records(
        self, collection: str, token: str | None = None
    ) -> list[dict[str, object]]:
        """Fetch the full collection."""
        response = await self._send(
            "GET",
            f"/{collection}",
            token=token,
            failure=f"Failed to fetch {collection}",
        )
        payload = _json_or_none(response)
        if not isinstance(payload, list):
            raise RecordRequestFailed(
                f"Unexpected {collection} payload", response.status_code
            )
        return [row for row in payload if isinstance(row, dict)]

    async def create_record(
        self, collection: str, payload: dict[str, object], token: str
    ) -> dict[str, object]:
        """POST a new record."""
        response = await self._send(
            "POST",
            f"/{collection}",
            token=token,
            json=payload,
            failure=f"Failed to save {collection} record",
        )
        body = _json_or_none(response)
        return body if isinstance(body, dict) else {}

    async def update_record(
        self,
        collection: str,
        record_id: RecordId,
        payload: dict[str, object],
        token: str,
    ) -> dict[str, object]:
        """PUT an existing record by id."""
        response = await self._send(
            "PUT",
            f"/{collection}/{record_id}",
            token=token,
            json=payload,
            failure=f"Failed to save {collection} record",
        )
        body = _json_or_none(response)
        return body if isinstance(body, dict) else {}

    async def delete_record(
        self, collection: str, record_id: RecordId, token: str
    ) -> None:
        """DELETE a record by id."""
        url = f"{self.base_url}/{collection}/{record_id}"
        default = f"Failed to delete {collection} record"
        try:
            response = await self.http_client.delete(
                url, headers=_auth_headers(token), timeout=self.timeout
            )
        except httpx.HTTPError as exc:
            raise DeleteRequestFailed(f"{default}: {exc}") from exc
        if response.is_error:
            raise DeleteRequestFailed(
                error_message(response, default), response.status_code
            )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _send(  # noqa: PLR0913
        self,
        method: str,
        path: str,
        *,
        token: str | None,
        failure: str,
        json: dict[str, object] | None = None,
    ) -> httpx.Response:
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                headers=_auth_headers(token),
                json=json,
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise RecordRequestFailed(f"{failure}: {exc}") from exc
        if response.is_error:
            _logger.info("%s %s returned %s", method, path, response.status_code)
            raise RecordRequestFailed(
                error_message(response, failure), response.status_code
            )
        return response


def _json_or_none(response: httpx.Response) -> object:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None
