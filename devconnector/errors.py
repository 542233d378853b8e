"""
Domain exceptions raised by the profile rules, the services and the
GitHub repository lookup.

The HTTP layer maps each class to a status and a response body in
``backend.app.error_handlers``.
"""

from typing import Any


class DevConnectorError(Exception):
    """Base class for all domain errors."""

    default_message = "Server error"

    def __init__(self, msg: str | None = None):
        self.msg = msg or self.default_message
        super().__init__(self.msg)


class ValidationError(DevConnectorError):
    """
    One or more submitted fields failed validation.

    Attributes:
        errors: List of ``{"msg": ..., "param": ...}`` entries, one per failing field
    """

    default_message = "Validation failed"

    def __init__(self, errors: list[dict[str, Any]]):
        self.errors = errors
        super().__init__("; ".join(error["msg"] for error in errors) or None)

    @classmethod
    def for_field(cls, param: str, msg: str) -> "ValidationError":
        return cls([{"msg": msg, "param": param}])

    @property
    def params(self) -> list[str]:
        return [error.get("param", "") for error in self.errors]


class NotFound(DevConnectorError):
    default_message = "Profile not found"


class RemoteNotFound(DevConnectorError):
    default_message = "No Github profile found"


class RemoteUnavailable(DevConnectorError):
    default_message = "Github is unavailable"


class StorageFault(DevConnectorError):
    """The profile store failed or could not complete a write."""

    default_message = "Server error"


__all__ = [
    "DevConnectorError",
    "ValidationError",
    "NotFound",
    "RemoteNotFound",
    "RemoteUnavailable",
    "StorageFault",
]
