"""Tests for data models."""

import json
from datetime import date

import pytest

from patient_manager.errors import ValidationError
from patient_manager.models.patient import Patient, PatientRecord, PatientRequest
from patient_manager.models.session import AuthUser, Session
from patient_manager.models.state import AppState, View

VALID_FORM = {
    "name": "John Smith",
    "email": "john@example.com",
    "address": "12 Harbour Road",
    "date_of_birth": "1980-01-01",
    "registered_date": "2024-01-15",
}


class TestPatientRecord:
    """Tests for the wire record returned by the patient API."""

    def test_record_maps_misspelled_date_of_birth(self):
        """Test that dataOfBirth lands on date_of_birth."""
        record = PatientRecord.model_validate(
            {"id": "1", "name": "A", "email": "a@a.com", "address": "X", "dataOfBirth": "2000-01-01"}
        )
        patient = record.to_patient(registered_date="2025-06-01")

        assert patient == Patient(
            id="1",
            name="A",
            email="a@a.com",
            address="X",
            date_of_birth="2000-01-01",
            registered_date="2025-06-01",
        )
        assert not hasattr(patient, "dataOfBirth")
        assert not hasattr(patient, "data_of_birth")

    def test_record_from_json_string(self):
        """Test record parsing from a JSON body."""
        json_string = '{"id": "7", "name": "B", "email": "b@b.com", "address": "Y", "dataOfBirth": "1999-12-31"}'
        record = PatientRecord.model_validate(json.loads(json_string))
        assert record.id == "7"
        assert record.date_of_birth == "1999-12-31"

    def test_record_accepts_numeric_id(self):
        """Test that numeric ids are kept as opaque strings."""
        record = PatientRecord.model_validate(
            {"id": 42, "name": "C", "email": "c@c.com", "address": "Z", "dataOfBirth": "1970-01-01"}
        )
        assert record.id == "42"

    def test_record_ignores_unknown_fields(self):
        """Test that extra wire fields do not break parsing."""
        record = PatientRecord.model_validate(
            {
                "id": "1",
                "name": "A",
                "email": "a@a.com",
                "address": "X",
                "dataOfBirth": "2000-01-01",
                "createdAt": "2024-01-01T00:00:00Z",
            }
        )
        assert record.name == "A"

    def test_record_requires_date_of_birth(self):
        """Test that a record without dataOfBirth is rejected."""
        with pytest.raises(ValueError):
            PatientRecord.model_validate({"id": "1", "name": "A", "email": "a@a.com", "address": "X"})


class TestPatientRequest:
    """Tests for the write-side patient shape and form validation."""

    def test_valid_form(self):
        """Test a fully populated form."""
        request = PatientRequest.from_form(VALID_FORM)
        assert request.name == "John Smith"
        assert request.date_of_birth == "1980-01-01"

    def test_wire_body_uses_camel_case(self):
        """Test the JSON body sent to the API."""
        body = PatientRequest.from_form(VALID_FORM).to_wire()
        assert body == {
            "name": "John Smith",
            "email": "john@example.com",
            "address": "12 Harbour Road",
            "dateOfBirth": "1980-01-01",
            "registeredDate": "2024-01-15",
        }

    def test_accepts_camel_case_keys(self):
        """Test that API-shaped input validates too."""
        request = PatientRequest.model_validate(
            {
                "name": "A",
                "email": "a@a.com",
                "address": "X",
                "dateOfBirth": "2000-01-01",
                "registeredDate": "2024-01-01",
            }
        )
        assert request.registered_date == "2024-01-01"

    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("name", "", "Name is required"),
            ("name", "   ", "Name is required"),
            ("email", "", "Email is required"),
            ("email", "not-an-email", "Email is invalid"),
            ("email", "a@b", "Email is invalid"),
            ("address", "", "Address is required"),
            ("date_of_birth", "", "Date of birth is required"),
            ("date_of_birth", None, "Date of birth is required"),
            ("registered_date", "", "Registered date is required"),
        ],
    )
    def test_each_rule_blocks_independently(self, field, value, message):
        """Test that each invalid field is reported on its own."""
        data = {**VALID_FORM, field: value}

        with pytest.raises(ValidationError) as exc_info:
            PatientRequest.from_form(data)

        assert exc_info.value.field_errors == {field: message}

    def test_missing_fields_all_reported(self):
        """Test that an empty form reports every field."""
        with pytest.raises(ValidationError) as exc_info:
            PatientRequest.from_form({})

        assert exc_info.value.field_errors == {
            "name": "Name is required",
            "email": "Email is required",
            "address": "Address is required",
            "date_of_birth": "Date of birth is required",
            "registered_date": "Registered date is required",
        }

    def test_strips_whitespace(self):
        """Test that text fields are trimmed."""
        request = PatientRequest.from_form({**VALID_FORM, "name": "  Jane Doe "})
        assert request.name == "Jane Doe"

    def test_accepts_date_objects(self):
        """Test that date values are stored as ISO strings."""
        request = PatientRequest.from_form({**VALID_FORM, "date_of_birth": date(1980, 1, 1)})
        assert request.date_of_birth == "1980-01-01"

    def test_blank_form_presets_registered_date(self):
        """Test that a fresh form defaults the registered date to today."""
        form = PatientRequest.blank(date(2025, 3, 9))
        assert form["registered_date"] == "2025-03-09"
        assert form["name"] == ""

    def test_patient_to_form(self):
        """Test converting a patient back into editable form data."""
        patient = Patient(
            id="3",
            name="A",
            email="a@a.com",
            address="X",
            date_of_birth="2000-01-01",
            registered_date="2024-01-01",
        )
        assert patient.to_form() == {
            "name": "A",
            "email": "a@a.com",
            "address": "X",
            "date_of_birth": "2000-01-01",
            "registered_date": "2024-01-01",
        }

    def test_to_form_keeps_values_that_break_form_rules(self):
        """Test that a stored record with bad fields still converts."""
        record = PatientRecord.model_validate(
            {"id": 9, "name": "Legacy", "email": "legacy-no-at", "address": "", "dataOfBirth": "1950-02-02"}
        )
        form = record.to_patient("2025-06-01").to_form()

        assert form["email"] == "legacy-no-at"
        assert form["address"] == ""


class TestSessionModels:
    """Tests for session models."""

    def test_empty_session(self):
        """Test session defaults."""
        session = Session()
        assert session.token is None
        assert session.user is None
        assert session.is_authenticated is False

    def test_authenticated_session(self):
        """Test a session with both token and user."""
        user = AuthUser(id="1", email="admin@example.com", name="Admin User", role="admin")
        session = Session(token="demo-jwt-token-1", user=user)
        assert session.is_authenticated is True

    def test_token_without_user_is_not_authenticated(self):
        """Test that a lone token does not count as signed in."""
        assert Session(token="demo-jwt-token-1").is_authenticated is False

    def test_user_round_trips_through_json(self):
        """Test the persisted user profile format."""
        user = AuthUser(id="2", email="user@example.com", name="Regular User", role="user")
        assert AuthUser.model_validate_json(user.model_dump_json()) == user


class TestAppState:
    """Tests for the view state snapshot."""

    def test_view_values(self):
        """Test the view names exposed to renderers."""
        assert [view.value for view in View] == ["list", "add", "edit"]

    def test_state_defaults(self):
        """Test snapshot defaults."""
        state = AppState(view=View.LIST, session=Session())
        assert state.patients == ()
        assert state.loading is False
        assert state.list_loading is False
        assert state.is_authenticated is False
