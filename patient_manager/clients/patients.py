"""Patient API client with wire-format mapping and error translation."""

from collections.abc import Callable
from datetime import date
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from patient_manager.config import AppConfig
from patient_manager.errors import TransportError, Unauthorized
from patient_manager.models.patient import Patient, PatientRecord, PatientRequest
from patient_manager.utils.logging import get_logger

logger = get_logger(__name__)

PATIENTS_PATH = "/patients"

_record_list = TypeAdapter(list[PatientRecord])


class PatientRepositoryClient:
    """Async client for the remote patient API.

    Every request goes through the session auth middleware. Failures are
    logged and re-raised as ``Unauthorized`` (401) or ``TransportError``;
    nothing is retried.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        auth: httpx.Auth,
        clock: Callable[[], date] = date.today,
    ):
        """Initialize patient client.

        Args:
            http_client: Client configured with the API base URL
            auth: Middleware applied to each request (bearer token, 401 handling)
            clock: Source of the registered date stamped on records at read time
        """
        self.http_client = http_client
        self.auth = auth
        self.clock = clock

    @classmethod
    def from_config(cls, config: AppConfig, auth: httpx.Auth) -> "PatientRepositoryClient":
        """Create a client with its own HTTP connection pool."""
        http_client = httpx.AsyncClient(base_url=config.api_base_url, timeout=config.request_timeout)
        return cls(http_client, auth)

    async def create(self, request: PatientRequest) -> Patient:
        """Create a patient; the API assigns the id."""
        response = await self._request("POST", PATIENTS_PATH, json=request.to_wire())
        return self._to_patient(self._decode(response, PatientRecord.model_validate))

    async def update(self, patient_id: str, request: PatientRequest) -> Patient:
        """Replace a patient's fields. The id is addressed by path only."""
        response = await self._request("PUT", self._patient_path(patient_id), json=request.to_wire())
        return self._to_patient(self._decode(response, PatientRecord.model_validate))

    async def delete(self, patient_id: str) -> None:
        """Delete a patient by id."""
        await self._request("DELETE", self._patient_path(patient_id))

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.http_client.aclose()

    async def __aenter__(self) -> "PatientRepositoryClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _to_patient(self, record: PatientRecord) -> Patient:
        # The API has no registered date; stamp the date of this read
        return record.to_patient(registered_date=self.clock().isoformat())

    def _patient_path(self, patient_id: str) -> str:
        return f"{PATIENTS_PATH}/{quote(str(patient_id), safe='')}"

    async def _request(self, method: str, path: str, *, json: dict[str, Any] | None = None) -> httpx.Response:
        """Send one request through the auth middleware and check its status."""
        try:
            response = await self.http_client.request(method, path, json=json, auth=self.auth)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"Patient API {method} {path} failed with status {status_code}")
            if status_code == httpx.codes.UNAUTHORIZED:
                raise Unauthorized() from e
            raise TransportError(
                f"The patient service responded with an error ({status_code}).",
                status_code=status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Patient API {method} {path} failed: {e}", exc_info=True)
            raise TransportError() from e

        logger.debug(f"Patient API {method} {path} -> {response.status_code}")
        return response

    def _decode(self, response: httpx.Response, parse: Callable[[Any], Any]) -> Any:
        """Parse a JSON response body, treating malformed payloads as transport failures."""
        try:
            return parse(response.json())
        except (ValueError, PydanticValidationError) as e:
            logger.error(f"Unexpected patient API payload from {response.request.url.path}: {e}")
            raise TransportError("The patient service returned an unexpected response.") from e

    # Defined last: the method name shadows the builtin inside the class body
    async def list(self) -> list[Patient]:
        """Fetch all patients in server order."""
        response = await self._request("GET", PATIENTS_PATH)
        records = self._decode(response, _record_list.validate_python)
        registered_date = self.clock().isoformat()
        return [record.to_patient(registered_date=registered_date) for record in records]
