"""Document Synthesizer - in-place DOCX edit with a template fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from resume_studio.exceptions import CorruptDocument, NoOriginalBytesAvailable
from resume_studio.models.enhanced import BulletState, BulletUpdateStatus, EnhancedResume
from resume_studio.models.resume import SourceFormat
from resume_studio.templates.docx_patcher import DocxTextDocument, apply_substitutions
from resume_studio.templates.docx_renderer import render_fallback

logger = logging.getLogger(__name__)


class SynthesisMethod(str, Enum):
    IN_PLACE = "in_place"
    TEMPLATE = "template"


@dataclass
class SynthesisResult:
    document: bytes
    method: SynthesisMethod
    bullet_update_status: list[BulletUpdateStatus] = field(default_factory=list)

    @property
    def written_count(self) -> int:
        return sum(1 for s in self.bullet_update_status if s.state == BulletState.ENHANCED_WRITTEN)

    @property
    def manual_copy_needed(self) -> list[BulletUpdateStatus]:
        return [s for s in self.bullet_update_status if s.needs_manual_copy]


def _original_docx(enhanced: EnhancedResume) -> bytes:
    resume = enhanced.original
    if resume.source_format != SourceFormat.DOCX or not resume.source_bytes:
        raise NoOriginalBytesAvailable(
            f"No editable office document for a {resume.source_format.value} source"
        )
    return resume.source_bytes


def synthesize_resume(enhanced: EnhancedResume) -> SynthesisResult:
    """Produce the output résumé document and the final per-bullet statuses.

    Edits the original DOCX in place when there is one; otherwise, or when
    it cannot be opened, rebuilds a document from the recorded sections.

    Raises:
        DocumentWriteError: the in-place output failed to reopen.
    """
    pending = [s.reopened() for s in enhanced.bullet_update_status]
    try:
        data = _original_docx(enhanced)
        document = DocxTextDocument(data)
    except NoOriginalBytesAvailable as e:
        logger.info("Using template synthesis: %s", e)
    except CorruptDocument as e:
        logger.warning("Original document unusable, using template synthesis: %s", e)
    else:
        statuses = apply_substitutions(document, pending)
        output = document.to_bytes()
        written = sum(1 for s in statuses if s.state == BulletState.ENHANCED_WRITTEN)
        skipped = sum(1 for s in statuses if s.state == BulletState.ENHANCED_NOT_WRITTEN)
        logger.info("In-place synthesis: %d bullets written, %d need manual copy", written, skipped)
        return SynthesisResult(output, SynthesisMethod.IN_PLACE, statuses)

    output = render_fallback(enhanced)
    # the rebuilt document contains every enhanced bullet
    statuses = [
        s.mark_written() if s.state == BulletState.ENHANCED_PENDING_WRITE else s
        for s in pending
    ]
    return SynthesisResult(output, SynthesisMethod.TEMPLATE, statuses)
