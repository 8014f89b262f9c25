from __future__ import annotations

import asyncio

import pytest

from app.core.errors import CaptureStateError, MappingError, TemplateNotFound
from app.extraction.images import ImagePayload
from app.forms.capture import CaptureState
from app.forms.service import FormsService
from app.profile.models import UserProfile
from app.session.context import SessionContext
from tests.fakes import FakeMapper
from tests.mock_user import JPEG_BYTES, MOCK_PROFILE, PNG_BYTES, overlay

FORM = ImagePayload(data=PNG_BYTES, mime_type="image/png")
SECOND_FORM = ImagePayload(data=JPEG_BYTES, mime_type="image/jpeg")


def _service(mapper: FakeMapper) -> FormsService:
    return FormsService(mapper=mapper, now_iso=lambda: "2026-04-01T09:00:00+00:00")


def _context() -> SessionContext:
    return SessionContext(session_id="s1", profile=MOCK_PROFILE)


def test_capture_maps_against_committed_profile() -> None:
    mapper = FakeMapper([overlay("Name", "ASHA VERMA"), overlay("Email", "")])
    service = _service(mapper)
    context = _context()

    asyncio.run(service.capture(context, FORM))

    assert mapper.calls == [(FORM, MOCK_PROFILE)]
    assert service.navigator(context).step_label == "Step 1 of 2"
    assert service.current_image(context) == FORM


def test_navigation_goes_through_active_capture() -> None:
    service = _service(FakeMapper([overlay("A"), overlay("B")]))
    context = _context()
    asyncio.run(service.capture(context, FORM))

    assert service.next_field(context).current_index == 1
    assert service.next_field(context).current_index == 1
    assert service.previous_field(context).current_index == 0
    assert service.toggle_mode(context).guided is False


def test_navigation_without_capture_is_rejected() -> None:
    service = _service(FakeMapper())

    with pytest.raises(CaptureStateError):
        service.next_field(_context())
    with pytest.raises(CaptureStateError):
        service.current_image(_context())


def test_retake_allows_capturing_a_new_form() -> None:
    mapper = FakeMapper([overlay("A")])
    service = _service(mapper)
    context = _context()
    asyncio.run(service.capture(context, FORM))

    assert service.retake(context).state == CaptureState.IDLE
    asyncio.run(service.capture(context, SECOND_FORM))

    assert [call[0] for call in mapper.calls] == [FORM, SECOND_FORM]


def test_failed_capture_can_be_retried() -> None:
    service = _service(FakeMapper(error=MappingError("no form found")))
    context = _context()

    with pytest.raises(MappingError):
        asyncio.run(service.capture(context, FORM))

    assert context.capture is not None
    assert context.capture.state == CaptureState.IDLE
    with pytest.raises(MappingError):
        asyncio.run(service.capture(context, FORM))


def test_complete_records_history_newest_first_and_clears_capture() -> None:
    service = _service(FakeMapper([overlay("A")]))
    context = _context()

    asyncio.run(service.capture(context, FORM))
    first = service.complete(context)
    asyncio.run(service.capture(context, SECOND_FORM))
    second = service.complete(context)

    assert context.capture is None
    assert service.history(context) == [second, first]
    assert first.status == "completed"
    assert first.date == "2026-04-01T09:00:00+00:00"
    with pytest.raises(CaptureStateError):
        service.complete(context)


def test_saved_template_is_rebound_on_next_capture() -> None:
    mapper = FakeMapper([overlay("Name", "ASHA VERMA"), overlay("Father's Name", "RAMESH VERMA")])
    service = _service(mapper)
    context = _context()
    asyncio.run(service.capture(context, FORM))
    template = service.save_template(context, "Bank KYC")
    service.retake(context)
    context.profile = UserProfile(full_name="NEW NAME")

    scan = asyncio.run(service.capture(context, SECOND_FORM, template_id=template.id))

    assert len(mapper.calls) == 1
    assert [item.value_to_fill for item in scan.overlays] == ["NEW NAME", "RAMESH VERMA"]
    assert [item.name for item in service.list_templates(context)] == ["Bank KYC"]


def test_save_template_requires_result_and_unknown_template_is_rejected() -> None:
    service = _service(FakeMapper([overlay("A")]))
    context = _context()

    with pytest.raises(CaptureStateError):
        service.save_template(context, "x")
    with pytest.raises(TemplateNotFound):
        asyncio.run(service.capture(context, FORM, template_id="missing"))
    with pytest.raises(TemplateNotFound):
        service.delete_template(context, "missing")
