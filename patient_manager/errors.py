"""Error types raised by the patient manager core."""

from collections.abc import Mapping


class PatientManagerError(RuntimeError):
    """Base error carrying a message that can be shown to the user."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentials(PatientManagerError):
    """Raised when a login attempt does not match a known identity."""

    default_message = "Invalid credentials"


class Unauthorized(PatientManagerError):
    """Raised when the patient API rejects the bearer token (HTTP 401).

    The session has already been cleared by the time this propagates.
    """

    default_message = "Your session has expired. Please sign in again."


class TransportError(PatientManagerError):
    """Raised for network failures and non-401 HTTP error responses."""

    default_message = "The patient service could not be reached."

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationError(PatientManagerError):
    """Raised by client-side checks before any request is issued."""

    default_message = "Please correct the highlighted fields."

    def __init__(self, field_errors: Mapping[str, str], message: str | None = None) -> None:
        super().__init__(message)
        self.field_errors = dict(field_errors)
