"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MODEL = "gemini-2.5-flash"


@dataclass(frozen=True)
class ExtractionConfig:
    """Document-understanding collaborator settings."""

    api_key: str
    model_name: str


@dataclass(frozen=True)
class IntakeConfig:
    """Limits for document intake batches."""

    max_files: int


@dataclass(frozen=True)
class LoggingConfig:
    """Structured logging configuration."""

    level: str


@dataclass(frozen=True)
class SecurityConfig:
    """API perimeter security settings."""

    cors_allowed_origins: list[str]
    request_max_bytes: int
    upload_max_bytes: int


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    extraction: ExtractionConfig
    intake: IntakeConfig
    logging: LoggingConfig
    security: SecurityConfig

    @staticmethod
    def from_env() -> "AppConfig":
        """Build app config from process environment."""
        api_key = (
            os.getenv("GEMINI_API_KEY", "").strip()
            or os.getenv("GOOGLE_API_KEY", "").strip()
        )
        model_name = os.getenv("GEMINI_MODEL", DEFAULT_MODEL).strip() or DEFAULT_MODEL
        max_files = int(os.getenv("INTAKE_MAX_FILES", "10"))
        log_level = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"
        cors_allowed_origins = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ALLOWED_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if origin.strip()
        ]
        request_max_bytes = int(os.getenv("REQUEST_MAX_BYTES", str(50 * 1024 * 1024)))
        upload_max_bytes = int(os.getenv("UPLOAD_MAX_BYTES", str(20 * 1024 * 1024)))

        return AppConfig(
            extraction=ExtractionConfig(api_key=api_key, model_name=model_name),
            intake=IntakeConfig(max_files=max_files),
            logging=LoggingConfig(level=log_level),
            security=SecurityConfig(
                cors_allowed_origins=cors_allowed_origins,
                request_max_bytes=request_max_bytes,
                upload_max_bytes=upload_max_bytes,
            ),
        )
