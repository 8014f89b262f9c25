"""Document intake: sequential extraction and all-or-nothing profile merge."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Sequence

from app.core.errors import ExtractionError, IntakeBusy, MergeAbort
from app.extraction.images import ImagePayload
from app.extraction.protocols import ProfileExtractorProtocol
from app.profile.merge import (
    AUTO_DETECT,
    describe_extraction,
    fold,
    is_blank,
    normalize_profile,
    resolve_document_type,
)
from app.profile.models import DocumentRecord, UserProfile
from app.session.context import SessionContext

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntakeResult:
    """Outcome of one successfully processed batch."""

    draft: UserProfile
    new_documents: list[DocumentRecord]
    pending_documents: list[DocumentRecord]
    summaries: list[str]

    @property
    def message(self) -> str:
        return f"Successfully processed {len(self.new_documents)} document(s)."


def _today() -> str:
    return date.today().isoformat()


class ProfileService:
    """Profile intake and save flows over an explicit session context."""

    def __init__(
        self,
        *,
        extractor: ProfileExtractorProtocol,
        today: Callable[[], str] = _today,
    ) -> None:
        self._extractor = extractor
        self._today = today

    async def intake(
        self,
        context: SessionContext,
        images: Sequence[ImagePayload],
        *,
        document_type: str = AUTO_DETECT,
    ) -> IntakeResult:
        """Extract every image in order and fold it into the working profile.

        Each extraction is awaited before the next one starts. Session state
        is only touched after the last image succeeded; any extraction
        failure raises ``MergeAbort`` and leaves the session unchanged. A
        second batch started while one is running raises ``IntakeBusy``.
        """
        if context.intake_in_progress:
            raise IntakeBusy("Another document batch is still being processed.")
        context.intake_in_progress = True
        try:
            return await self._run_intake(context, images, document_type)
        finally:
            context.intake_in_progress = False

    async def _run_intake(
        self,
        context: SessionContext,
        images: Sequence[ImagePayload],
        document_type: str,
    ) -> IntakeResult:
        merged = context.working_profile()
        documents: list[DocumentRecord] = []
        summaries: list[str] = []
        total = len(images)

        for index, image in enumerate(images):
            try:
                extracted = await self._extractor.extract_profile(image)
            except ExtractionError as exc:
                LOGGER.warning(
                    "Intake batch aborted at document %s of %s: %s",
                    index + 1,
                    total,
                    exc,
                    extra={"session_id": context.session_id},
                )
                raise MergeAbort(index=index, total=total, cause=exc) from exc

            merged = fold(merged, extracted.partial_profile)
            final_type = resolve_document_type(document_type, extracted.document_type)
            documents.append(
                DocumentRecord(type=final_type, date=self._today(), verified=True)
            )
            summaries.append(describe_extraction(final_type, extracted.partial_profile))
            LOGGER.info(
                "Document %s of %s merged",
                index + 1,
                total,
                extra={"session_id": context.session_id, "document_type": final_type},
            )

        context.stage_intake(merged, documents)
        return IntakeResult(
            draft=merged,
            new_documents=documents,
            pending_documents=list(context.pending_documents),
            summaries=summaries,
        )

    def remove_pending_document(self, context: SessionContext, index: int) -> list[DocumentRecord]:
        """Drop a pending document before save; out-of-range indexes are ignored."""
        context.pending_documents = [
            item for position, item in enumerate(context.pending_documents) if position != index
        ]
        return list(context.pending_documents)

    def save_profile(
        self, context: SessionContext, edited: UserProfile | None = None
    ) -> UserProfile:
        """Replace the committed profile wholesale.

        Documents already on the committed profile are kept and pending ones
        appended after them. Extra attributes with a blank label or value are
        dropped, and the rest go through ``normalize_profile`` so an edited
        profile cannot repeat a label or shadow a fixed slot.
        """
        source = edited if edited is not None else context.working_profile()
        extras = tuple(
            item
            for item in source.extra_fields
            if not is_blank(item.label) and not is_blank(item.value)
        )
        documents = (*context.profile.documents, *context.pending_documents)
        committed = normalize_profile(
            replace(source, extra_fields=extras, documents=documents)
        )
        context.commit_profile(committed)
        LOGGER.info(
            "Profile saved with %s document(s)",
            len(documents),
            extra={"session_id": context.session_id},
        )
        return committed
