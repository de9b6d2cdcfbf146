"""Pydantic models for Content Enhancer output and per-bullet write status."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from resume_studio.models.job import JobPosting
from resume_studio.models.resume import StructuredResume


class BulletState(str, Enum):
    UNCHANGED = "unchanged"
    ENHANCED_PENDING_WRITE = "enhancedPendingWrite"
    ENHANCED_WRITTEN = "enhancedWritten"
    ENHANCED_NOT_WRITTEN = "enhancedNotWritten"


class BulletUpdateStatus(BaseModel):
    """Where one bullet stands between AI rewrite and the output document.

    unchanged -> (no transition)
    enhancedPendingWrite -> enhancedWritten | enhancedNotWritten
    """

    bullet_index: int
    experience_index: int = 0
    ai_enhanced: bool = False
    written_to_document: bool = False
    state: BulletState = BulletState.UNCHANGED
    original_text: str = ""
    enhanced_text: str = ""

    @classmethod
    def from_rewrite(
        cls, bullet_index: int, experience_index: int, original: str, rewritten: str,
    ) -> BulletUpdateStatus:
        enhanced = rewritten.strip() != original.strip()
        return cls(
            bullet_index=bullet_index,
            experience_index=experience_index,
            ai_enhanced=enhanced,
            state=BulletState.ENHANCED_PENDING_WRITE if enhanced else BulletState.UNCHANGED,
            original_text=original,
            enhanced_text=rewritten if enhanced else original,
        )

    @property
    def needs_manual_copy(self) -> bool:
        return self.state == BulletState.ENHANCED_NOT_WRITTEN

    def mark_written(self) -> BulletUpdateStatus:
        self._require_pending()
        return self.model_copy(
            update={"state": BulletState.ENHANCED_WRITTEN, "written_to_document": True}
        )

    def mark_not_written(self) -> BulletUpdateStatus:
        self._require_pending()
        return self.model_copy(
            update={"state": BulletState.ENHANCED_NOT_WRITTEN, "written_to_document": False}
        )

    def reopened(self) -> BulletUpdateStatus:
        """Pending copy of an enhanced bullet, for regenerating from the original bytes."""
        if not self.ai_enhanced or self.state == BulletState.ENHANCED_PENDING_WRITE:
            return self
        return self.model_copy(
            update={"state": BulletState.ENHANCED_PENDING_WRITE, "written_to_document": False}
        )

    def _require_pending(self) -> None:
        if self.state != BulletState.ENHANCED_PENDING_WRITE:
            raise ValueError(
                f"bullet {self.bullet_index} is {self.state.value}, "
                "only enhancedPendingWrite bullets can be written"
            )


class EnhancedResume(BaseModel):
    original: StructuredResume
    job: JobPosting | None = None
    # parallel to original.work_experiences
    enhanced_bullets: list[list[str]] = Field(default_factory=list)
    tailored_summary: str = ""
    cover_letter: str = ""
    cover_letter_ai_generated: bool = False
    bullet_update_status: list[BulletUpdateStatus] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=datetime.now)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def with_statuses(self, statuses: list[BulletUpdateStatus]) -> EnhancedResume:
        return self.model_copy(update={"bullet_update_status": statuses})

    @property
    def full_text(self) -> str:
        """Plain-text rendering of the enhanced résumé, for manual copying."""
        parts: list[str] = []
        if self.tailored_summary:
            parts.append(self.tailored_summary.strip())

        experiences = self.original.work_experiences
        if experiences:
            lines = ["EXPERIENCE", ""]
            for idx, exp in enumerate(experiences):
                bullets = (
                    self.enhanced_bullets[idx]
                    if idx < len(self.enhanced_bullets)
                    else exp.bullet_points
                )
                heading = " | ".join(p for p in (exp.title, exp.company) if p)
                lines.append(heading)
                if exp.start_date:
                    lines.append(f"{exp.start_date} - {exp.end_date or 'Present'}")
                if exp.location:
                    lines.append(exp.location)
                lines.extend(f"• {b}" for b in bullets)
                lines.append("")
            parts.append("\n".join(lines).strip())

        for section in self.original.sections:
            if section.kind.value in ("experience", "summary", "header"):
                continue
            block = section.content.strip()
            if section.title:
                block = f"{section.title.upper()}\n\n{block}"
            parts.append(block)

        return "\n\n".join(p for p in parts if p)
