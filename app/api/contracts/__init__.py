"""Public API request/response contracts."""

from app.api.contracts.models import (
    ApiErrorResponse,
    AssistResponse,
    BoundingBoxModel,
    DeleteTemplateResponse,
    DocumentRecordModel,
    ExtraAttributeModel,
    FieldOverlayModel,
    FormRecordResponse,
    HealthResponse,
    HistoryResponse,
    IntakeResponse,
    OverlayStateModel,
    PendingDocumentsResponse,
    ProfileResponse,
    ScanStateResponse,
    SessionCreateRequest,
    SessionResponse,
    SpokenQuestionResponse,
    TemplateResponse,
    TemplateSaveRequest,
    TemplatesListResponse,
    UserProfileModel,
)

__all__ = [
    "ApiErrorResponse",
    "AssistResponse",
    "BoundingBoxModel",
    "DeleteTemplateResponse",
    "DocumentRecordModel",
    "ExtraAttributeModel",
    "FieldOverlayModel",
    "FormRecordResponse",
    "HealthResponse",
    "HistoryResponse",
    "IntakeResponse",
    "OverlayStateModel",
    "PendingDocumentsResponse",
    "ProfileResponse",
    "ScanStateResponse",
    "SessionCreateRequest",
    "SessionResponse",
    "SpokenQuestionResponse",
    "TemplateResponse",
    "TemplateSaveRequest",
    "TemplatesListResponse",
    "UserProfileModel",
]
