"""Session and authentication models."""

from dataclasses import dataclass

from pydantic import BaseModel


class AuthUser(BaseModel):
    """Profile of the signed-in user."""

    id: str
    email: str
    name: str
    role: str  # "admin" or "user" from the demo issuer


class LoginRequest(BaseModel):
    """Credentials submitted from the login form."""

    email: str
    password: str


@dataclass(frozen=True)
class Session:
    """Authenticated identity and bearer token, or an empty session."""

    token: str | None = None
    user: AuthUser | None = None

    @property
    def is_authenticated(self) -> bool:
        """True when both a token and a user profile are present."""
        return bool(self.token) and self.user is not None
