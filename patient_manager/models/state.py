"""Application view state models."""

from dataclasses import dataclass, field
from enum import StrEnum

from patient_manager.models.patient import Patient
from patient_manager.models.session import Session


class View(StrEnum):
    """Screens the presentation layer can show."""

    LIST = "list"
    ADD = "add"
    EDIT = "edit"


@dataclass(frozen=True)
class AppState:
    """Read-only snapshot of the controller state for rendering."""

    view: View
    session: Session
    patients: tuple[Patient, ...] = ()
    editing_patient: Patient | None = None
    form_data: dict[str, str] = field(default_factory=dict)
    form_errors: dict[str, str] = field(default_factory=dict)
    loading: bool = False
    list_loading: bool = False
    error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated
