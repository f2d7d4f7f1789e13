"""Pydantic models for collaborator response bodies."""

import httpx
from pydantic import BaseModel, ValidationError


class LoginResponse(BaseModel):
    token: str | None = None


class UploadResponse(BaseModel):
    url: str | None = None


class ErrorBody(BaseModel):
    message: str | None = None
    error: str | None = None


def error_message(response: httpx.Response, default: str) -> str:
    """Extract a collaborator error message from a response, if it has one."""
    try:
        body = ErrorBody.model_validate(response.json())
    except (ValueError, ValidationError):
        return default
    return body.message or body.error or default
