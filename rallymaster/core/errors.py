"""Domain errors raised by the service layer.

Routers never see these as ``HTTPException``; the application maps them to
status codes in one place (see ``rallymaster.api``).
"""

from __future__ import annotations


class RallyError(Exception):
    """Base class for errors the service layer reports to callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(RallyError):
    """A referenced row is absent, or the caller may not know it exists."""


class ValidationError(RallyError):
    """Missing privilege, bad input, or a failed cross-entity check."""


__all__ = ["NotFoundError", "RallyError", "ValidationError"]
