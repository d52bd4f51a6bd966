"""In-memory patient storage for the demo API."""

from itertools import count

from patient_manager.models.patient import PatientRecord, PatientRequest


class InMemoryPatientStore:
    """In-memory patient store.

    Assigns sequential string ids and keeps insertion order.
    """

    def __init__(self, seed: list[PatientRequest] | None = None):
        """Initialize with optional seed patients."""
        self.records: dict[str, PatientRecord] = {}
        self._ids = count(1)
        for request in seed or []:
            self.create(request)

    def list_records(self) -> list[PatientRecord]:
        return list(self.records.values())

    def create(self, request: PatientRequest) -> PatientRecord:
        record = self._to_record(str(next(self._ids)), request)
        self.records[record.id] = record
        return record

    def update(self, patient_id: str, request: PatientRequest) -> PatientRecord | None:
        if patient_id not in self.records:
            return None
        record = self._to_record(patient_id, request)
        self.records[patient_id] = record
        return record

    def delete(self, patient_id: str) -> bool:
        return self.records.pop(patient_id, None) is not None

    def _to_record(self, patient_id: str, request: PatientRequest) -> PatientRecord:
        # The registered date is accepted but not stored, matching the production API
        return PatientRecord(
            id=patient_id,
            name=request.name,
            email=request.email,
            address=request.address,
            date_of_birth=request.date_of_birth,
        )


def demo_patients() -> list[PatientRequest]:
    """Seed data for local development."""
    return [
        PatientRequest(
            name="John Smith",
            email="john.smith@example.com",
            address="12 Harbour Road, Springfield",
            date_of_birth="1980-01-01",
            registered_date="2024-01-15",
        ),
        PatientRequest(
            name="Jane Doe",
            email="jane.doe@example.com",
            address="48 Elm Street, Riverton",
            date_of_birth="1985-05-15",
            registered_date="2024-02-03",
        ),
        PatientRequest(
            name="Sarah Wilson",
            email="sarah.wilson@example.com",
            address="7 Orchard Lane, Lakeside",
            date_of_birth="1990-08-30",
            registered_date="2024-03-21",
        ),
    ]
