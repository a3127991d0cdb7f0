"""Application error taxonomy.

Every error raised from the CRUD and service layers carries a machine readable
``code`` and the HTTP status it maps to. The handlers registered in
``lexibox.main`` turn them into ``{"success": false, "message", "code"}``
payloads.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        *,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.code,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return f"{self.code}: {self.message}"


class ValidationError(AppError):
    status_code = 400
    default_code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    default_code = "DUPLICATE_RESOURCE"


class TransientDatabaseError(AppError):
    """Infrastructure failure the caller may retry later."""

    status_code = 503
    default_code = "DB_CONNECTION_ERROR"
