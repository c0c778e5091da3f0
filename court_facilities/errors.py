"""
Error types shared by every feature area.

Each error carries a ``user_message`` that is safe to show to any operator.
Backend errors additionally keep the raw driver/HTTP text in ``detail``; the
API only returns it when ``EXPOSE_BACKEND_ERRORS`` is enabled.
"""

from __future__ import annotations

from typing import Any


class FacilitiesError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400

    def __init__(self, user_message: str, *, detail: str | None = None) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.detail = detail


class ValidationError(FacilitiesError):
    """Input rejected before any network or database call."""

    status_code = 422

    def __init__(
        self,
        user_message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(user_message, detail=detail)
        self.errors = errors or []


class NavigationError(ValidationError):
    """Invalid walkthrough transition."""


class NotFoundError(FacilitiesError):
    status_code = 404


class BackendError(FacilitiesError):
    """Database or storage failure, reported with a templated message."""

    status_code = 502


class ExtractionError(FacilitiesError):
    """The report extraction step produced nothing usable."""

    status_code = 422


def pydantic_errors(exc) -> list[dict[str, Any]]:
    """Flatten a pydantic ValidationError into ``{field, message}`` dicts."""
    flattened = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body",)]
        flattened.append({"field": ".".join(loc) or None, "message": err.get("msg", "")})
    return flattened
