"""Application configuration."""

import os
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_API_URL = "http://localhost:4000"
DEFAULT_STORAGE_PATH = Path.home() / ".patient_manager" / "storage.json"
DEFAULT_LOG_LEVEL = "WARNING"


class AppConfig(BaseModel):
    """Runtime configuration for the patient manager client."""

    api_base_url: str = DEFAULT_API_URL
    request_timeout: float = Field(default=10.0, gt=0)
    storage_path: Path = DEFAULT_STORAGE_PATH
    login_delay: float = Field(default=1.0, ge=0)  # Simulated identity provider latency
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build configuration from environment variables, falling back to defaults."""
        return cls(
            api_base_url=os.getenv("PATIENT_API_URL", DEFAULT_API_URL).rstrip("/"),
            request_timeout=float(os.getenv("PATIENT_API_TIMEOUT", "10.0")),
            storage_path=Path(os.getenv("PATIENT_MANAGER_STORAGE", str(DEFAULT_STORAGE_PATH))).expanduser(),
            login_delay=float(os.getenv("PATIENT_MANAGER_LOGIN_DELAY", "1.0")),
            log_level=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )
