"""Session persistence on top of device-local storage."""

from pydantic import ValidationError

from patient_manager.models.session import AuthUser, Session
from patient_manager.storage.local_store import KeyValueStore
from patient_manager.utils.logging import get_logger

logger = get_logger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class SessionStore:
    """Holds the current token and user, written through to a key-value store."""

    def __init__(self, storage: KeyValueStore):
        """Initialize session store.

        Args:
            storage: Device-local store holding the ``token`` and ``user`` entries
        """
        self.storage = storage
        self._session = Session()

    def load(self) -> Session:
        """Read the persisted session into memory.

        Returns:
            The persisted session, or an empty one if nothing usable is stored
        """
        token = self.storage.get_item(TOKEN_KEY)
        raw_user = self.storage.get_item(USER_KEY)

        user = None
        if raw_user:
            try:
                user = AuthUser.model_validate_json(raw_user)
            except ValidationError as e:
                logger.warning(f"Discarding unreadable stored user profile: {e.error_count()} error(s)")

        if token and user:
            self._session = Session(token=token, user=user)
        else:
            self._session = Session()

        logger.debug(f"Loaded session, authenticated: {self._session.is_authenticated}")
        return self._session

    def save(self, token: str, user: AuthUser) -> Session:
        """Persist a session, replacing any previous one."""
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, user.model_dump_json())
        self._session = Session(token=token, user=user)
        return self._session

    def clear(self) -> None:
        """Remove the persisted session. Safe to call when already cleared."""
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        self._session = Session()

    def current(self) -> Session:
        """Return the in-memory session without touching storage."""
        return self._session
