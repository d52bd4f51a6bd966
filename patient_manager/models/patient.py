"""Patient data models."""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from patient_manager.errors import ValidationError

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


@dataclass
class Patient:
    """Patient business model.

    ``id`` is assigned by the patient API and never generated client-side.
    """

    id: str
    name: str
    email: str
    address: str
    date_of_birth: str
    registered_date: str

    def to_form(self) -> dict[str, str]:
        """Return the editable fields of this patient as form data.

        The values are copied as-is. Form rules only apply when the form is
        submitted, so a stored record that breaks them can still be opened.
        """
        return {
            "name": self.name,
            "email": self.email,
            "address": self.address,
            "date_of_birth": self.date_of_birth,
            "registered_date": self.registered_date,
        }


def _required(message: str) -> PydanticCustomError:
    return PydanticCustomError("required", message)


class PatientRequest(BaseModel):
    """Write-side patient shape sent to the patient API.

    Serialised with the API's camelCase keys via ``model_dump(by_alias=True)``.
    """

    model_config = ConfigDict(populate_by_name=True, validate_default=True)

    name: str = ""
    email: str = ""
    address: str = ""
    date_of_birth: str = Field(default="", alias="dateOfBirth")
    registered_date: str = Field(default="", alias="registeredDate")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_missing(cls, v: Any) -> Any:
        """Treat unset form inputs as empty strings."""
        if v is None:
            return ""
        if isinstance(v, date):
            return v.isoformat()
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate patient name is present."""
        if not v.strip():
            raise _required("Name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Validate email is present and looks like local@domain.tld."""
        if not v.strip():
            raise _required("Email is required")
        if not EMAIL_PATTERN.search(v):
            raise PydanticCustomError("email", "Email is invalid")
        return v.strip()

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Validate address is present."""
        if not v.strip():
            raise _required("Address is required")
        return v.strip()

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: str) -> str:
        """Validate date of birth is present."""
        if not v:
            raise _required("Date of birth is required")
        return v

    @field_validator("registered_date")
    @classmethod
    def validate_registered_date(cls, v: str) -> str:
        """Validate registered date is present."""
        if not v:
            raise _required("Registered date is required")
        return v

    @classmethod
    def from_form(cls, data: Mapping[str, Any]) -> "PatientRequest":
        """Validate raw form input, collecting one message per failing field.

        Raises:
            ValidationError: If any field fails; ``field_errors`` maps the
                Python field name to its message.
        """
        try:
            return cls.model_validate(dict(data))
        except PydanticValidationError as e:
            aliases = {field.alias: name for name, field in cls.model_fields.items() if field.alias}
            field_errors: dict[str, str] = {}
            for error in e.errors():
                loc = str(error["loc"][0]) if error["loc"] else "form"
                field_errors.setdefault(aliases.get(loc, loc), error["msg"])
            raise ValidationError(field_errors) from e

    @classmethod
    def blank(cls, today: date | None = None) -> dict[str, str]:
        """Return empty form data with the registered date preset to today."""
        return {
            "name": "",
            "email": "",
            "address": "",
            "date_of_birth": "",
            "registered_date": (today or date.today()).isoformat(),
        }

    def to_wire(self) -> dict[str, str]:
        """Return the JSON body expected by the patient API."""
        return self.model_dump(by_alias=True)


class PatientRecord(BaseModel):
    """Patient record as returned by the patient API.

    The API spells the date-of-birth key ``dataOfBirth`` and never returns a
    registered date.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    email: str
    address: str
    date_of_birth: str = Field(alias="dataOfBirth")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Accept numeric ids and keep them opaque."""
        if isinstance(v, int):
            return str(v)
        return v

    def to_patient(self, registered_date: str) -> Patient:
        """Map this wire record to the domain entity."""
        return Patient(
            id=self.id,
            name=self.name,
            email=self.email,
            address=self.address,
            date_of_birth=self.date_of_birth,
            registered_date=registered_date,
        )
