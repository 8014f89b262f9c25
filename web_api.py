from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.http_setup import register_exception_handlers, register_http_middleware
from app.api.runtime_routes import RuntimeRouteDeps, register_runtime_routes
from app.assist.router import create_assist_router
from app.assist.service import AssistService
from app.core.config import AppConfig
from app.core.logging import setup_logging
from app.extraction.client import GeminiDocumentClient
from app.forms.router import create_forms_router
from app.forms.service import FormsService
from app.profile.intake_service import ProfileService
from app.profile.router import create_profile_router
from app.session.registry import SessionRegistry

load_dotenv()
APP_CONFIG = AppConfig.from_env()
setup_logging(APP_CONFIG.logging.level)
LOGGER = logging.getLogger(__name__)


def create_app(
    config: AppConfig = APP_CONFIG,
    *,
    client: GeminiDocumentClient | None = None,
    registry: SessionRegistry | None = None,
) -> FastAPI:
    app = FastAPI(title="Document Fill Assistant API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )
    register_http_middleware(app, config=config, logger=LOGGER)
    register_exception_handlers(app, logger=LOGGER)

    if client is None:
        client = GeminiDocumentClient(
            api_key=config.extraction.api_key,
            model_name=config.extraction.model_name,
        )
    if registry is None:
        registry = SessionRegistry()

    profile_service = ProfileService(extractor=client)
    forms_service = FormsService(mapper=client)
    assist_service = AssistService(
        assistant=client,
        transcriber=client if client.available else None,
    )
    upload_max_bytes = config.security.upload_max_bytes

    register_runtime_routes(app, deps=RuntimeRouteDeps(registry=registry))
    app.include_router(
        create_profile_router(
            profile_service,
            registry,
            upload_max_bytes=upload_max_bytes,
            max_files=config.intake.max_files,
        )
    )
    app.include_router(
        create_forms_router(forms_service, registry, upload_max_bytes=upload_max_bytes)
    )
    app.include_router(
        create_assist_router(
            assist_service,
            forms_service,
            registry,
            upload_max_bytes=upload_max_bytes,
        )
    )
    LOGGER.info("Application configured; extraction available: %s", client.available)
    return app


app = create_app()
