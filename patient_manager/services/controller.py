"""Application state controller tying the views to auth and the patient API."""

import inspect
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from patient_manager.clients.patients import PatientRepositoryClient
from patient_manager.errors import InvalidCredentials, PatientManagerError, Unauthorized, ValidationError
from patient_manager.models.patient import Patient, PatientRequest
from patient_manager.models.session import LoginRequest, Session
from patient_manager.models.state import AppState, View
from patient_manager.services.auth import AuthGateway
from patient_manager.utils.logging import get_logger

logger = get_logger(__name__)

FILL_ALL_FIELDS = "Please fill in all fields"
LOGIN_FAILED = "Login failed. Please check your credentials."
SAVE_FAILED = "Failed to save patient. Please try again."
DELETE_FAILED = "Failed to delete patient. Please try again."
FETCH_FAILED = "Failed to fetch patients. Please try again."

PAYLOAD_ACTIONS = frozenset({"login", "edit_patient", "submit", "delete"})


class AppController:
    """Tracks the current view and dispatches UI events.

    Views: ``list`` (initial), ``add`` and ``edit``. Create/update toggle
    ``loading``; list fetches toggle the separate ``list_loading``. Errors
    from the auth gateway and patient client are caught here and surfaced
    as ``error``; the most recent one is kept in ``last_failure``.
    """

    def __init__(
        self,
        auth: AuthGateway,
        repository: PatientRepositoryClient,
        today: Callable[[], date] = date.today,
    ):
        """Initialize controller.

        Args:
            auth: Gateway used for login/logout and session lookups
            repository: Patient API client
            today: Date source for the registered date preset on new forms
        """
        self.auth = auth
        self.repository = repository
        self.today = today

        self.view = View.LIST
        self.editing_patient: Patient | None = None
        self.patients: list[Patient] = []
        self.form_data: dict[str, str] = {}
        self.form_errors: dict[str, str] = {}
        self.loading = False
        self.list_loading = False
        self.error: str | None = None
        self.last_failure: PatientManagerError | None = None

    # Session

    async def login(self, email: str, password: str) -> Session | None:
        """Sign in. Returns the new session, or None with ``error`` set."""
        self._reset_error()

        if not email or not password:
            field_errors = {}
            if not email:
                field_errors["email"] = "Email is required"
            if not password:
                field_errors["password"] = "Password is required"
            self._fail(FILL_ALL_FIELDS, ValidationError(field_errors, FILL_ALL_FIELDS))
            return None

        try:
            session = await self.auth.login(email, password)
        except InvalidCredentials as e:
            self._fail(LOGIN_FAILED, e)
            return None

        self._return_to_list()
        return session

    def logout(self) -> None:
        """Sign out from any view and drop all view state."""
        self.auth.logout()
        self._return_to_list()
        self.patients = []
        self.error = None
        self.last_failure = None

    def current_session(self) -> Session:
        return self.auth.current_session()

    # View transitions

    def add_patient(self) -> None:
        """Open an empty form."""
        self._reset_error()
        self.editing_patient = None
        self.form_data = PatientRequest.blank(self.today())
        self.form_errors = {}
        self.view = View.ADD

    def edit_patient(self, patient: Patient) -> None:
        """Open the form prefilled with an existing patient."""
        if self.view is not View.LIST:
            raise ValueError(f"Cannot edit a patient from the {self.view} view")

        self._reset_error()
        self.editing_patient = patient
        self.form_data = patient.to_form()
        self.form_errors = {}
        self.view = View.EDIT

    def cancel(self) -> None:
        """Close the form without saving."""
        self._reset_error()
        self._return_to_list()

    def dismiss_error(self) -> None:
        self.error = None

    # Patient operations

    async def submit(self, data: Mapping[str, Any]) -> Patient | None:
        """Validate and save the open form.

        Returns:
            The saved patient, or None if validation failed, a save is
            already in flight, or the request failed
        """
        if self.view is View.LIST:
            raise ValueError("No patient form is open")
        if self.loading:
            logger.warning("Ignoring submit while a save is in progress")
            return None

        self._reset_error()
        self.form_data = {key: "" if value is None else str(value) for key, value in data.items()}

        try:
            request = PatientRequest.from_form(data)
        except ValidationError as e:
            self.form_errors = e.field_errors
            self.last_failure = e
            return None

        self.form_errors = {}
        self.loading = True
        try:
            if self.view is View.EDIT and self.editing_patient is not None:
                patient = await self.repository.update(self.editing_patient.id, request)
            else:
                patient = await self.repository.create(request)
        except Unauthorized as e:
            self._expire_session(e)
            return None
        except PatientManagerError as e:
            logger.error(f"Error saving patient: {e}")
            self._fail(SAVE_FAILED, e)
            return None
        finally:
            self.loading = False

        self._merge_saved(patient)
        self._return_to_list()
        return patient

    async def delete(self, patient_id: str) -> bool:
        """Delete a patient and drop it from the local list without re-fetching."""
        self._reset_error()
        try:
            await self.repository.delete(patient_id)
        except Unauthorized as e:
            self._expire_session(e)
            return False
        except PatientManagerError as e:
            logger.error(f"Error deleting patient {patient_id}: {e}")
            self._fail(DELETE_FAILED, e)
            return False

        self.patients = [patient for patient in self.patients if patient.id != patient_id]
        return True

    async def refresh(self) -> list[Patient] | None:
        """Replace the local list with the server's."""
        self._reset_error()
        self.list_loading = True
        try:
            patients = await self.repository.list()
        except Unauthorized as e:
            self._expire_session(e)
            return None
        except PatientManagerError as e:
            logger.error(f"Error fetching patients: {e}")
            self._fail(FETCH_FAILED, e)
            return None
        finally:
            self.list_loading = False

        self.patients = patients
        return patients

    # UI entry points

    async def dispatch(self, action: str, payload: Any = None) -> Any:
        """Route a named UI event to its handler.

        Raises:
            ValueError: If the action is unknown
        """
        handlers: dict[str, Callable[..., Any]] = {
            "login": self._login_from_payload,
            "logout": self.logout,
            "add_patient": self.add_patient,
            "edit_patient": self.edit_patient,
            "cancel": self.cancel,
            "submit": self.submit,
            "delete": self.delete,
            "refresh": self.refresh,
            "dismiss_error": self.dismiss_error,
        }
        handler = handlers.get(action)
        if handler is None:
            raise ValueError(f"Unknown action: {action}")

        logger.debug(f"Dispatching {action} from the {self.view} view")
        if action in PAYLOAD_ACTIONS:
            if payload is None:
                raise ValueError(f"Action {action} requires a payload")
            result = handler(payload)
        else:
            result = handler()
        if inspect.isawaitable(result):
            result = await result
        return result

    def current_state(self) -> AppState:
        return AppState(
            view=self.view,
            session=self.current_session(),
            patients=tuple(self.patients),
            editing_patient=self.editing_patient,
            form_data=dict(self.form_data),
            form_errors=dict(self.form_errors),
            loading=self.loading,
            list_loading=self.list_loading,
            error=self.error,
        )

    # Helpers

    async def _login_from_payload(self, payload: LoginRequest | Mapping[str, str]) -> Session | None:
        if isinstance(payload, LoginRequest):
            return await self.login(payload.email, payload.password)
        return await self.login(payload.get("email", ""), payload.get("password", ""))

    def _merge_saved(self, patient: Patient) -> None:
        for index, existing in enumerate(self.patients):
            if existing.id == patient.id:
                self.patients[index] = patient
                return
        self.patients.append(patient)

    def _return_to_list(self) -> None:
        self.view = View.LIST
        self.editing_patient = None
        self.form_data = {}
        self.form_errors = {}

    def _reset_error(self) -> None:
        self.error = None
        self.last_failure = None

    def _fail(self, message: str, failure: PatientManagerError) -> None:
        self.error = message
        self.last_failure = failure

    def _expire_session(self, failure: Unauthorized) -> None:
        self.logout()
        self._fail(failure.message, failure)
