"""Pydantic API request/response models used in OpenAPI contracts."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.forms.navigator import GuidedFillNavigator, OverlayState
from app.forms.overlay import BoundingBox, FieldOverlay
from app.forms.templates import FormTemplate
from app.profile.models import DocumentRecord, ExtraAttribute, UserProfile
from app.session.context import FormRecord


class ApiErrorResponse(BaseModel):
    """Stable error envelope for API responses."""

    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """Health check response payload."""

    status: Literal["ok"]


class ExtraAttributeModel(BaseModel):
    label: str
    value: str = ""


class DocumentRecordModel(BaseModel):
    type: str
    date: str
    verified: bool = True

    @classmethod
    def from_domain(cls, record: DocumentRecord) -> "DocumentRecordModel":
        return cls(type=record.type, date=record.date, verified=record.verified)


class UserProfileModel(BaseModel):
    """Canonical identity profile as exchanged over the API."""

    model_config = ConfigDict(extra="forbid")

    full_name: str = ""
    date_of_birth: str = ""
    gender: str | None = None
    guardian_name: str | None = None
    address: str = ""
    phone_number: str = ""
    email: str = ""
    aadhar_number: str | None = None
    pan_number: str | None = None
    passport_number: str | None = None
    driving_license_number: str | None = None
    voter_id_number: str | None = None
    id_number: str | None = None
    extra_fields: list[ExtraAttributeModel] = Field(default_factory=list)
    documents: list[DocumentRecordModel] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, profile: UserProfile) -> "UserProfileModel":
        return cls(
            full_name=profile.full_name,
            date_of_birth=profile.date_of_birth,
            gender=profile.gender,
            guardian_name=profile.guardian_name,
            address=profile.address,
            phone_number=profile.phone_number,
            email=profile.email,
            aadhar_number=profile.aadhar_number,
            pan_number=profile.pan_number,
            passport_number=profile.passport_number,
            driving_license_number=profile.driving_license_number,
            voter_id_number=profile.voter_id_number,
            id_number=profile.id_number,
            extra_fields=[
                ExtraAttributeModel(label=item.label, value=item.value)
                for item in profile.extra_fields
            ],
            documents=[DocumentRecordModel.from_domain(item) for item in profile.documents],
        )

    def to_domain(self) -> UserProfile:
        data = self.model_dump(exclude={"extra_fields", "documents"})
        return UserProfile(
            **data,
            extra_fields=tuple(
                ExtraAttribute(label=item.label, value=item.value)
                for item in self.extra_fields
            ),
            documents=tuple(
                DocumentRecord(type=item.type, date=item.date, verified=item.verified)
                for item in self.documents
            ),
        )


class SessionCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    profile: UserProfileModel | None = None


class SessionResponse(BaseModel):
    session_id: str
    profile: UserProfileModel


class ProfileResponse(BaseModel):
    """Committed profile plus any intake draft still under review."""

    profile: UserProfileModel
    draft: UserProfileModel | None = None
    pending_documents: list[DocumentRecordModel] = Field(default_factory=list)


class IntakeResponse(BaseModel):
    draft: UserProfileModel
    new_documents: list[DocumentRecordModel]
    pending_documents: list[DocumentRecordModel]
    summaries: list[str]
    message: str


class PendingDocumentsResponse(BaseModel):
    pending_documents: list[DocumentRecordModel]


class BoundingBoxModel(BaseModel):
    ymin: float
    xmin: float
    ymax: float
    xmax: float

    @classmethod
    def from_domain(cls, box: BoundingBox) -> "BoundingBoxModel":
        return cls(ymin=box.ymin, xmin=box.xmin, ymax=box.ymax, xmax=box.xmax)


class FieldOverlayModel(BaseModel):
    field_name: str
    value_to_fill: str
    bounding_box: BoundingBoxModel

    @classmethod
    def from_domain(cls, overlay: FieldOverlay) -> "FieldOverlayModel":
        return cls(
            field_name=overlay.field_name,
            value_to_fill=overlay.value_to_fill,
            bounding_box=BoundingBoxModel.from_domain(overlay.bounding_box),
        )


class OverlayStateModel(FieldOverlayModel):
    index: int
    active: bool
    visible: bool
    show_value: bool
    empty: bool

    @classmethod
    def from_state(cls, state: OverlayState) -> "OverlayStateModel":
        base = FieldOverlayModel.from_domain(state.overlay)
        return cls(
            **base.model_dump(),
            index=state.index,
            active=state.active,
            visible=state.visible,
            show_value=state.show_value,
            empty=state.empty,
        )


class ScanStateResponse(BaseModel):
    """Capture state and, when a result is ready, the guided-fill view."""

    state: str
    template_id: str = ""
    guided: bool = True
    current_index: int = 0
    step_label: str = ""
    has_previous: bool = False
    has_next: bool = False
    current_field: FieldOverlayModel | None = None
    overlays: list[OverlayStateModel] = Field(default_factory=list)

    @classmethod
    def idle(cls, template_id: str = "") -> "ScanStateResponse":
        return cls(state="idle", template_id=template_id)

    @classmethod
    def from_navigator(
        cls, state: str, navigator: GuidedFillNavigator, template_id: str = ""
    ) -> "ScanStateResponse":
        current = navigator.current_overlay
        return cls(
            state=state,
            template_id=template_id,
            guided=navigator.guided,
            current_index=navigator.current_index,
            step_label=navigator.step_label,
            has_previous=navigator.has_previous,
            has_next=navigator.has_next,
            current_field=FieldOverlayModel.from_domain(current) if current else None,
            overlays=[OverlayStateModel.from_state(item) for item in navigator.overlay_states()],
        )


class TemplateSaveRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = ""


class TemplateResponse(BaseModel):
    id: str
    name: str
    created_at: str
    overlays: list[FieldOverlayModel]

    @classmethod
    def from_domain(cls, template: FormTemplate) -> "TemplateResponse":
        return cls(
            id=template.id,
            name=template.name,
            created_at=template.created_at,
            overlays=[FieldOverlayModel.from_domain(item) for item in template.overlays],
        )


class TemplatesListResponse(BaseModel):
    items: list[TemplateResponse]


class DeleteTemplateResponse(BaseModel):
    template_id: str
    deleted: bool


class FormRecordResponse(BaseModel):
    id: str
    date: str
    status: str

    @classmethod
    def from_domain(cls, record: FormRecord) -> "FormRecordResponse":
        return cls(id=record.id, date=record.date, status=record.status)


class HistoryResponse(BaseModel):
    items: list[FormRecordResponse]


class AssistResponse(BaseModel):
    text: str


class SpokenQuestionResponse(BaseModel):
    question: str
    answer: str
