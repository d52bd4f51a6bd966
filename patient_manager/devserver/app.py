"""Demo patient API for local development and end-to-end tests."""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from patient_manager import __version__
from patient_manager.devserver.endpoints import router
from patient_manager.devserver.store import InMemoryPatientStore, demo_patients
from patient_manager.utils.logging import LogConfig, setup_logging


def create_app(store: InMemoryPatientStore | None = None) -> FastAPI:
    """Create the demo API with its own patient store."""
    app = FastAPI(
        title="Patient Manager Demo API",
        description=(
            "Stand-in for the patient record service. Mirrors its wire format, "
            "including the `dataOfBirth` field name and the missing registered date."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {
                "name": "Patients",
                "description": "Patient record CRUD. Requires a bearer token from the demo login.",
            },
            {
                "name": "Health",
                "description": "Service health monitoring and status checks.",
            },
        ],
    )
    app.state.patient_store = store if store is not None else InMemoryPatientStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Demo server only
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app


app = create_app(InMemoryPatientStore(seed=demo_patients()))


if __name__ == "__main__":
    import uvicorn

    setup_logging(LogConfig(level=os.getenv("LOG_LEVEL", "INFO")))
    port = int(os.getenv("PORT", "4000"))
    uvicorn.run("patient_manager.devserver.app:app", host="0.0.0.0", port=port, reload=True, log_level="info")
