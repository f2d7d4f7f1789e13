"""Auth API client for exchanging credentials for a bearer token."""

from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError

from catalog_console.adapters.api_models import LoginResponse, error_message
from catalog_console.domain.errors import AuthRequestFailed


class AuthClient(Protocol):
    """Interface for the credential exchange endpoint."""

    async def login(self, username: str, password: str) -> str:
        """Exchange credentials for a bearer token."""


@dataclass
class HttpxAuthClient(AuthClient):
    """HTTPX-backed auth client."""

    login_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(cls, login_url: str, timeout: float = 15) -> "HttpxAuthClient":
        """Create an auth client with a managed httpx session."""
        return cls(
            login_url=login_url, http_client=httpx.AsyncClient(), timeout=timeout
        )

    async def login(self, username: str, password: str) -> str:
        """POST the credentials and return the token from the response."""
        try:
            response = await self.http_client.post(
                self.login_url,
                json={"username": username, "password": password},
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise AuthRequestFailed(str(exc) or "Network error") from exc
        if response.is_error:
            raise AuthRequestFailed(error_message(response, "Login failed"))
        try:
            payload = LoginResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AuthRequestFailed("Login failed: unreadable response") from exc
        if not payload.token:
            raise AuthRequestFailed("No token received")
        return payload.token

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
