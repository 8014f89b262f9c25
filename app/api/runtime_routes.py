"""Runtime route registration for health and session lifecycle endpoints."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI

from app.api.contracts import (
    ApiErrorResponse,
    HealthResponse,
    SessionCreateRequest,
    SessionResponse,
    UserProfileModel,
)
from app.session.registry import SessionRegistry


@dataclass(frozen=True)
class RuntimeRouteDeps:
    """Dependencies required to mount runtime routes."""

    registry: SessionRegistry


def register_runtime_routes(app: FastAPI, *, deps: RuntimeRouteDeps) -> None:
    """Register health and session endpoints."""

    @app.get(
        "/api/health",
        response_model=HealthResponse,
    )
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post(
        "/api/sessions",
        response_model=SessionResponse,
        status_code=201,
        responses={422: {"model": ApiErrorResponse}},
    )
    def create_session(req: SessionCreateRequest | None = None) -> SessionResponse:
        profile = req.profile.to_domain() if req is not None and req.profile else None
        context = deps.registry.create(profile)
        return SessionResponse(
            session_id=context.session_id,
            profile=UserProfileModel.from_domain(context.profile),
        )

    @app.get(
        "/api/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ApiErrorResponse}},
    )
    def get_session(session_id: str) -> SessionResponse:
        context = deps.registry.get(session_id)
        return SessionResponse(
            session_id=context.session_id,
            profile=UserProfileModel.from_domain(context.profile),
        )

    @app.delete(
        "/api/sessions/{session_id}",
        status_code=204,
        responses={404: {"model": ApiErrorResponse}},
    )
    def close_session(session_id: str) -> None:
        deps.registry.close(session_id)
