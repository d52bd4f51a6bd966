"""Application wiring."""

from dataclasses import dataclass

import httpx

from patient_manager.clients.patients import PatientRepositoryClient
from patient_manager.config import AppConfig
from patient_manager.services.auth import AuthGateway, DemoIdentityProvider
from patient_manager.services.controller import AppController
from patient_manager.services.session_store import SessionStore
from patient_manager.storage.local_store import JsonFileKeyValueStore, KeyValueStore
from patient_manager.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Application:
    """The process-wide object graph, owned by the entry point."""

    config: AppConfig
    session_store: SessionStore
    auth: AuthGateway
    repository: PatientRepositoryClient
    controller: AppController

    async def aclose(self) -> None:
        await self.repository.aclose()


def build_application(
    config: AppConfig | None = None,
    storage: KeyValueStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Application:
    """Construct the session store, gateway, patient client and controller.

    Args:
        config: Runtime configuration, defaults to the environment
        storage: Device-local store, defaults to a JSON file at ``config.storage_path``
        http_client: Preconfigured HTTP client, mainly for tests

    Returns:
        Application with any previously persisted session already loaded
    """
    if config is None:
        config = AppConfig.from_env()
    if storage is None:
        storage = JsonFileKeyValueStore(config.storage_path)

    session_store = SessionStore(storage)
    session_store.load()

    auth = AuthGateway(session_store, DemoIdentityProvider(latency=config.login_delay))
    if http_client is None:
        repository = PatientRepositoryClient.from_config(config, auth.auth)
    else:
        repository = PatientRepositoryClient(http_client, auth.auth)
    controller = AppController(auth, repository)

    logger.info(f"Patient manager configured for {config.api_base_url}")
    return Application(
        config=config,
        session_store=session_store,
        auth=auth,
        repository=repository,
        controller=controller,
    )
