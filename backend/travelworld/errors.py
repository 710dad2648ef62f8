"""Application error taxonomy.

Every error raised on purpose by the API derives from :class:`AppError` and
carries the HTTP status it maps to. The handlers in ``travelworld.main``
render them as ``{"success": false, "message": ..., "error"?: ..., "errors"?: ...}``.
"""

from collections.abc import Sequence
from typing import Any

from fastapi import status

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie", "form"}


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        error: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.error = error
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "message": self.message}
        if self.error is not None:
            body["error"] = self.error
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(AppError):
    """Bad or missing input. ``errors`` lists every offending field."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation error"

    @classmethod
    def from_fields(cls, errors: list[dict[str, Any]], message: str | None = None) -> "ValidationError":
        """Build from ``[{"field": ..., "message": ...}, ...]``."""
        if message is None:
            message = "; ".join(f"{e['field']}: {e['message']}" for e in errors) or cls.default_message
        return cls(message, errors=errors)

    @classmethod
    def from_pydantic(cls, errors: Sequence[Any]) -> "ValidationError":
        """Build from pydantic / FastAPI ``errors()`` output, keeping every entry."""
        fields = []
        for err in errors:
            loc = [str(part) for part in err.get("loc", ()) if part not in _LOCATION_PREFIXES]
            fields.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
        return cls.from_fields(fields)


class InvalidIdentifier(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid ID format"


class DuplicateKey(AppError):
    """A store-level uniqueness rule was violated."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Duplicate key"

    def __init__(self, message: str | None = None, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message, error="duplicate_key")

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.field is not None:
            body["field"] = self.field
        return body


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "You must be logged in to access this resource"


class InvalidToken(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Incorrect email or password"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UpstreamFailure(AppError):
    """An external collaborator (payment provider, file store) failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream service failure"


class ServiceUnavailable(AppError):
    """The database could not be reached or timed out."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable"
