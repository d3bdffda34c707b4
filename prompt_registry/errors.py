"""Errors raised by the prompt registry.

Each kind carries the HTTP status the admin API answers with, so routers can
let them propagate and ``main`` renders them in one place.
"""
from __future__ import annotations

from typing import Optional


class PromptRegistryError(Exception):
    status_code: int = 500
    kind: str = "registry_error"

    def __init__(self, detail: str, *, slug: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.slug = slug


class NotFound(PromptRegistryError):
    status_code = 404
    kind = "not_found"


class VersionNotFound(PromptRegistryError):
    status_code = 404
    kind = "version_not_found"

    def __init__(self, slug: str, version: int):
        super().__init__(f"Version {version} not found for prompt: {slug}", slug=slug)
        self.version = version


class ValidationFailed(PromptRegistryError):
    status_code = 400
    kind = "validation_failed"


class InvalidOperation(PromptRegistryError):
    status_code = 400
    kind = "invalid_operation"


class Conflict(PromptRegistryError):
    """Stored version moved between read and write; the caller should retry."""

    status_code = 409
    kind = "conflict"

    def __init__(self, slug: str, expected_version: Optional[int] = None):
        if expected_version is None:
            detail = f"Prompt {slug} was modified concurrently; reload and retry"
        else:
            detail = (
                f"Prompt {slug} is no longer at version {expected_version}; "
                "reload and retry"
            )
        super().__init__(detail, slug=slug)
        self.expected_version = expected_version


__all__ = [
    "PromptRegistryError",
    "NotFound",
    "VersionNotFound",
    "ValidationFailed",
    "InvalidOperation",
    "Conflict",
]
