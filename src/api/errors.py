"""Errors surfaced by the API layer."""

from typing import Any


class ApiError(Exception):
    """A request failed: non-2xx response or transport failure.

    ``status_code`` is None when no response arrived. ``server_message`` is the
    backend's ``error`` field when it sent one.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        server_message: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message
        self.payload = payload or {}

    @property
    def details(self) -> str | None:
        details = self.payload.get("details")
        return details if isinstance(details, str) and details else None

    def user_message(self, fallback: str) -> str:
        """Message to show a user: server error, then details, then fallback."""
        return self.server_message or self.details or fallback


class UploadValidationError(ValueError):
    """A file was rejected before upload (type or size)."""


class FormValidationError(ValueError):
    """A form is missing a required value; nothing was sent."""
