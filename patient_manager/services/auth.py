"""Authentication gateway and request auth middleware."""

import asyncio
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import ClassVar, Protocol

import httpx
from cuid2 import cuid_wrapper

from patient_manager.errors import InvalidCredentials
from patient_manager.models.session import AuthUser, Session
from patient_manager.services.session_store import SessionStore
from patient_manager.utils.logging import get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()

TOKEN_PREFIX = "demo-jwt-token-"


@dataclass
class DemoIdentity:
    """A fixed credential pair and the profile it signs in as."""

    email: str
    password: str
    user: AuthUser


class IdentityProvider(Protocol):
    """Interface for credential checking.

    This allows pluggable identity sources:
    - Demo table of hardcoded accounts
    - A real token-issuing identity provider
    """

    async def authenticate(self, email: str, password: str) -> AuthUser | None:
        """Return the user profile for valid credentials, None otherwise."""
        ...


class DemoIdentityProvider:
    """Identity provider backed by a fixed table of demo accounts."""

    DEMO_IDENTITIES: ClassVar[list[DemoIdentity]] = [
        DemoIdentity(
            email="admin@example.com",
            password="password",
            user=AuthUser(id="1", email="admin@example.com", name="Admin User", role="admin"),
        ),
        DemoIdentity(
            email="user@example.com",
            password="password",
            user=AuthUser(id="2", email="user@example.com", name="Regular User", role="user"),
        ),
    ]

    def __init__(self, latency: float = 0.0):
        """Initialize provider.

        Args:
            latency: Seconds to wait before answering, standing in for a network round trip
        """
        self.latency = latency

    async def authenticate(self, email: str, password: str) -> AuthUser | None:
        if self.latency:
            await asyncio.sleep(self.latency)

        for identity in self.DEMO_IDENTITIES:
            if identity.email == email and identity.password == password:
                return identity.user.model_copy()
        return None


def issue_token() -> str:
    """Create a bearer token unique to this login. Not a security mechanism."""
    return f"{TOKEN_PREFIX}{int(time.time() * 1000)}-{cuid()}"


class SessionAuth(httpx.Auth):
    """Attach the current bearer token and invalidate the session on 401."""

    def __init__(self, session_store: SessionStore, on_unauthorized: Callable[[], None]):
        self.session_store = session_store
        self.on_unauthorized = on_unauthorized

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self.session_store.current().token
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

        response = yield request

        if response.status_code == httpx.codes.UNAUTHORIZED:
            logger.warning(f"{request.method} {request.url.path} rejected with 401, signing out")
            self.on_unauthorized()


class AuthGateway:
    """Signs users in and out and owns the request auth middleware."""

    def __init__(self, session_store: SessionStore, identity_provider: IdentityProvider | None = None):
        """Initialize auth gateway.

        Args:
            session_store: Store the session is written through to
            identity_provider: Credential source, defaults to the demo accounts
        """
        self.session_store = session_store
        self.identity_provider = identity_provider or DemoIdentityProvider()
        self._auth = SessionAuth(session_store, on_unauthorized=self.logout)

    @property
    def auth(self) -> SessionAuth:
        """Middleware to apply to every outgoing patient API request."""
        return self._auth

    async def login(self, email: str, password: str) -> Session:
        """Sign in with email and password.

        Presence of both values is the caller's responsibility.

        Raises:
            InvalidCredentials: If the pair matches no known identity
        """
        user = await self.identity_provider.authenticate(email, password)
        if user is None:
            logger.info(f"Login rejected for {email}")
            raise InvalidCredentials()

        session = self.session_store.save(issue_token(), user)
        logger.info(f"User {user.id} signed in with role {user.role}")
        return session

    def logout(self) -> None:
        """Clear the session. Idempotent."""
        was_authenticated = self.session_store.current().is_authenticated
        self.session_store.clear()
        if was_authenticated:
            logger.info("User signed out")

    def current_session(self) -> Session:
        """Return the active session, possibly empty."""
        return self.session_store.current()
