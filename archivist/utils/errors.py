"""Custom exception hierarchy for archivist.

All application exceptions inherit from :class:`ArchivistError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "wayback", "sqlite_archive") caused the failure, and
an HTTP ``status_code`` the API layer uses when turning the error into a
response.

The hierarchy is organized by who is at fault:

    ArchivistError  (base -- catch-all for any archivist error)
    +-- ValidationError        (400: malformed input shape)
    +-- NotAuthorizedError     (403: caller does not own the record)
    +-- NotFoundError          (404: unknown record)
    +-- ConflictError          (409: duplicate in-flight request / bad state)
    +-- ConfigurationError     (500: startup / missing config)

Caller-facing errors (validation, not found, not authorized, conflict) are
raised by the lifecycle service and never swallowed.  Archiving-service
failures that happen while a record is being processed are recorded on the
record as free text instead of being raised.
"""

from __future__ import annotations

from typing import Any


class ArchivistError(Exception):
    """Base exception for all archivist errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[wayback] Rate limited``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Caller-facing errors
# ---------------------------------------------------------------------------

class ValidationError(ArchivistError):
    """Raised when a request payload has the wrong shape.

    ``issues`` is a list of ``{"field": ..., "message": ...}`` dicts, one per
    failed constraint, so the route layer can echo them back to the client.
    """

    status_code = 400

    def __init__(
        self,
        issues: list[dict[str, Any]] | None = None,
        message: str = "Validation failed",
    ) -> None:
        super().__init__(message=message)
        self._issues = list(issues or [])

    @property
    def issues(self) -> list[dict[str, Any]]:
        return list(self._issues)


class NotFoundError(ArchivistError):
    """Raised when an archive record does not exist."""

    status_code = 404

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message=message)


class NotAuthorizedError(ArchivistError):
    """Raised when the caller is not the user who owns the record."""

    status_code = 403

    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(message=message)


class ConflictError(ArchivistError):
    """Raised when a record's current state forbids the requested action."""

    status_code = 409

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message=message)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(ArchivistError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
