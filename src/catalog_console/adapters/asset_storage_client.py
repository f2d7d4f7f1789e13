"""Asset storage service client for multipart uploads."""

import io
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError

from catalog_console.adapters.api_models import UploadResponse, error_message
from catalog_console.domain.errors import UploadFailed
from catalog_console.domain.records import AssetUploadRequest

ProgressObserver = Callable[[float], None]

_logger = logging.getLogger(__name__)


class AssetStorageClient(Protocol):
    """Interface for uploading binary assets."""

    async def upload(
        self,
        request: AssetUploadRequest,
        key: str,
        progress: ProgressObserver | None = None,
    ) -> str:
        """Upload a file under a suggested key and return its public URL."""


class _ProgressReader(io.BytesIO):
    """Byte buffer that reports the fraction read so far."""

    def __init__(self, content: bytes, observer: ProgressObserver | None) -> None:
        super().__init__(content)
        self._total = len(content)
        self._observer = observer
        self._read = 0

    def read(self, size: int | None = -1) -> bytes:
        chunk = super().read(size)
        if self._observer is not None and self._total and chunk:
            self._read += len(chunk)
            fraction = min(self._read / self._total, 1.0)
            try:
                self._observer(fraction)
            except Exception:
                _logger.exception("Upload progress observer failed")
        return chunk


@dataclass
class HttpxAssetStorageClient(AssetStorageClient):
    """HTTPX-backed asset storage client."""

    upload_url: str
    http_client: httpx.AsyncClient
    timeout: float = 300

    @classmethod
    def create(
        cls, upload_url: str, timeout: float = 300
    ) -> "HttpxAssetStorageClient":
        """Create a storage client with a managed httpx session."""
        return cls(
            upload_url=upload_url, http_client=httpx.AsyncClient(), timeout=timeout
        )

    async def upload(
        self,
        request: AssetUploadRequest,
        key: str,
        progress: ProgressObserver | None = None,
    ) -> str:
        """POST the file as multipart form data with the suggested key."""
        default = f"Failed to upload {request.destination_key_hint}. Please try again."
        files = {
            "file": (
                request.destination_key_hint,
                _ProgressReader(request.file, progress),
                request.mime_type,
            )
        }
        try:
            response = await self.http_client.post(
                self.upload_url,
                files=files,
                data={"key": key},
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise UploadFailed(default) from exc
        if response.is_error:
            raise UploadFailed(error_message(response, default))
        try:
            payload = UploadResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise UploadFailed(default) from exc
        if not payload.url:
            raise UploadFailed(default)
        return payload.url

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
