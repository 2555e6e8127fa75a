"""Domain error taxonomy.

Services raise these; the application-level exception handler in
``posthub.main`` maps each one onto its HTTP status code.
"""
from __future__ import annotations


class PostHubError(Exception):
    """Base class for errors with a well-defined HTTP mapping."""

    status_code: int = 500
    public_message: str | None = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def client_message(self) -> str:
        return self.public_message or self.message


class ValidationError(PostHubError):
    status_code = 400


class AuthorizationError(PostHubError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class PostNotFoundError(PostHubError):
    status_code = 404

    def __init__(self, post_id: int):
        super().__init__("Post not found")
        self.post_id = post_id


class StorageError(PostHubError):
    """Persistence or upload I/O failure. Detail stays server-side."""

    status_code = 500
    public_message = "Internal server error"


__all__ = [
    "PostHubError",
    "ValidationError",
    "AuthorizationError",
    "PostNotFoundError",
    "StorageError",
]
