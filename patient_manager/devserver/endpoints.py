"""Endpoints of the demo patient API."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from pydantic import BaseModel

from patient_manager import __version__
from patient_manager.devserver.store import InMemoryPatientStore
from patient_manager.models.patient import PatientRecord, PatientRequest
from patient_manager.services.auth import TOKEN_PREFIX
from patient_manager.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str


def get_store(request: Request) -> InMemoryPatientStore:
    return request.app.state.patient_store


def require_bearer_token(authorization: Annotated[str | None, Header()] = None) -> str:
    """Accept only tokens issued by the demo identity provider."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.startswith(TOKEN_PREFIX):
        logger.warning("Rejecting request without a valid bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


Store = Annotated[InMemoryPatientStore, Depends(get_store)]
Authenticated = Depends(require_bearer_token)


@router.get("/patients", response_model=list[PatientRecord], dependencies=[Authenticated], tags=["Patients"])
async def list_patients(store: Store) -> list[PatientRecord]:
    """List all patients in insertion order."""
    return store.list_records()


@router.post(
    "/patients",
    response_model=PatientRecord,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Authenticated],
    tags=["Patients"],
)
async def create_patient(patient: PatientRequest, store: Store) -> PatientRecord:
    """Create a patient and assign its id."""
    record = store.create(patient)
    logger.info(f"Created patient {record.id}")
    return record


@router.put("/patients/{patient_id}", response_model=PatientRecord, dependencies=[Authenticated], tags=["Patients"])
async def update_patient(patient_id: str, patient: PatientRequest, store: Store) -> PatientRecord:
    """Replace an existing patient's fields."""
    record = store.update(patient_id, patient)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Patient {patient_id} not found")
    logger.info(f"Updated patient {patient_id}")
    return record


@router.delete("/patients/{patient_id}", dependencies=[Authenticated], tags=["Patients"])
async def delete_patient(patient_id: str, store: Store) -> Response:
    """Delete a patient."""
    if not store.delete(patient_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Patient {patient_id} not found")
    logger.info(f"Deleted patient {patient_id}")
    return Response(status_code=status.HTTP_200_OK)


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
    )
