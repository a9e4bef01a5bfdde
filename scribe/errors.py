"""Error taxonomy shared by the request pipeline and the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import status


class ScribeError(Exception):
    """Base class for errors that map onto a structured API response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Server Error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_payload(self) -> dict:
        return {"success": False, "error": self.message}


@dataclass(frozen=True)
class FieldViolation:
    """A single failed rule on a single payload field."""

    field: str
    message: str

    def __str__(self) -> str:
        return self.message


class ValidationError(ScribeError):
    """Payload failed one or more schema rules."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation Error"

    def __init__(self, violations: list[FieldViolation]) -> None:
        super().__init__()
        self.violations = list(violations)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["details"] = [str(violation) for violation in self.violations]
        payload["fields"] = [
            {"field": v.field, "message": v.message} for v in self.violations
        ]
        return payload


class AuthenticationError(ScribeError):
    """Credential missing, malformed, expired or otherwise unusable."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"

    def __init__(self) -> None:
        # Never carries detail about which check failed.
        super().__init__()


class AuthorizationError(ScribeError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Not authorized"


class NotFoundError(ScribeError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class ConflictError(ScribeError):
    """Uniqueness constraint lost a race; the client may retry."""

    status_code = status.HTTP_409_CONFLICT
    message = "Resource conflict, please retry"


class UnexpectedError(ScribeError):
    """Persistence or connectivity failure; detail stays in the logs."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server Error"
