"""
config/settings.py

- Reads environment variables (and .env) and exposes them as application-wide settings.
- pydantic v2 / pydantic-settings v2.
- Every upstream REST service gets its own base URL; defaults point at the local
  development ports (9080-9088) so the console starts without a .env file.
"""

from typing import List, Literal
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # =========================
    # App / runtime
    # =========================
    ENV: Literal["dev", "stage", "prod"] = "dev"
    APP_TITLE: str = "School Admin Console API"
    APP_DESCRIPTION: str = "Administrative console backend for the school management platform"
    APP_VERSION: str = "1.0.0"

    # =========================
    # CORS
    # =========================
    # comma separated string -> List[str]
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, v):
        if isinstance(v, str):
            # "a,b , c" -> ["a","b","c"]
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    # =========================
    # Upstream services
    # =========================
    INSTITUTION_API_BASE_URL: str = "http://localhost:9080/api/v1"
    STUDENT_API_BASE_URL: str = "http://localhost:9081/api/v1/students"
    ATTENDANCE_API_BASE_URL: str = "http://localhost:9082/api/v1/attendance"
    USER_API_BASE_URL: str = "http://localhost:9083/api/v1/users"
    ACADEMIC_API_BASE_URL: str = "http://localhost:9084/api/v1/academic"
    EVENT_API_BASE_URL: str = "http://localhost:9085/api/v1"
    GRADE_API_BASE_URL: str = "http://localhost:9086/api/v1"
    FILE_API_BASE_URL: str = "http://localhost:9087/api/files"
    INCIDENT_API_BASE_URL: str = "http://localhost:9088/api/v1/incidents"
    UPSTREAM_TIMEOUT: float = 15.0

    # institution used by catalog registrations that do not name one
    DEFAULT_INSTITUTION_ID: str = "4fa85f64-5717-4562-b3fc-2c963f66afa6"

    # =========================
    # Console auth
    # =========================
    # empty -> auth disabled (local development)
    CONSOLE_API_TOKEN: str = ""

    # =========================
    # Local store (report-card drafts)
    # =========================
    DATABASE_URL: str = "sqlite:///./console.db"

    # =========================
    # Listing
    # =========================
    DEFAULT_PAGE_SIZE: int = 8
    MAX_PAGE_SIZE: int = 100

    # =========================
    # Uploads (justification documents)
    # =========================
    MAX_UPLOAD_MB: int = 10
    ALLOWED_UPLOAD_TYPES: List[str] = [
        "application/pdf",
        "image/jpeg",
        "image/png",
    ]

    @field_validator("ALLOWED_UPLOAD_TYPES", mode="before")
    @classmethod
    def _split_types(cls, v):
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    # =========================
    # PDF / WeasyPrint (optional)
    # =========================
    WEASYPRINT_FONT_DIR: str = ""

    # =========================
    # Logging
    # =========================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # =========================
    # BaseSettings Config
    # =========================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# ✅ shared settings object
settings = Settings()
