"""Main pipeline orchestrator - extract, score, enhance, synthesize."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from resume_studio.cache.materials_cache import MaterialsCache
from resume_studio.clients.llm_client import LLMClient
from resume_studio.config import AppConfig
from resume_studio.models.enhanced import EnhancedResume
from resume_studio.models.job import JobPosting
from resume_studio.models.resume import StructuredResume
from resume_studio.models.score import MatchScoreBreakdown
from resume_studio.models.user import UserSettings
from resume_studio.parsers.resume_parser import parse_resume
from resume_studio.pipeline.ai_parser import recover_work_experiences
from resume_studio.pipeline.enhancer import ContentEnhancer, ProgressCallback
from resume_studio.scoring.match_scorer import score_match
from resume_studio.templates.cover_letter import build_cover_letter_docx
from resume_studio.templates.synthesizer import SynthesisResult, synthesize_resume

logger = logging.getLogger(__name__)

PhaseCallback = Callable[[str, str], None]


def job_key(job: JobPosting) -> str:
    """Cache key for a job: its id, or a slug of company and title."""
    if job.id:
        return job.id
    slug = re.sub(r"[^a-z0-9]+", "-", f"{job.company_name} {job.title}".lower()).strip("-")
    return slug or "untitled-job"


@dataclass
class PipelineResult:
    """Complete result from the tailoring pipeline."""

    resume: StructuredResume
    job: JobPosting
    score: MatchScoreBreakdown
    enhanced: EnhancedResume
    synthesis: SynthesisResult
    cover_letter_docx: bytes | None = None
    elapsed_seconds: float = 0.0
    metadata: dict = field(default_factory=dict)


class TailoringPipeline:
    """Runs one résumé through scoring, enhancement and synthesis for a job."""

    def __init__(
        self,
        llm: LLMClient | None,
        config: AppConfig | None = None,
        *,
        cache: MaterialsCache | None = None,
    ):
        self.llm = llm
        self.config = config or AppConfig()
        self.cache = cache
        self.enhancer = ContentEnhancer(llm, config=self.config.enhancer, llm_config=self.config.llm)

    async def run(
        self,
        resume: StructuredResume | str | Path,
        job: JobPosting,
        *,
        include_cover_letter: bool = False,
        user_settings: UserSettings | None = None,
        on_phase: PhaseCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> PipelineResult:
        """Run the full tailoring pipeline.

        Args:
            resume: An extracted résumé, or a path to a résumé file.
            job: Target job posting.
            include_cover_letter: Also render the cover letter document.
            user_settings: Sender details for the cover letter.
            on_phase: Optional callback(phase_name, detail) for progress.
            on_progress: Optional callback(percent, message) during enhancement.
        """
        start = time.monotonic()

        def _notify(phase: str, detail: str = "") -> None:
            if on_phase:
                on_phase(phase, detail)

        if not isinstance(resume, StructuredResume):
            _notify("extract", f"Reading {Path(resume).name}")
            resume = parse_resume(resume)

        if not resume.flattened_bullets():
            _notify("recover", "No bullets found, asking the model for work history")
            resume = await recover_work_experiences(
                resume, self.llm, self.config.enhancer, self.config.llm,
            )

        _notify("score", "Scoring match")
        score = score_match(resume, job, self.config.scoring)
        _notify("score_done", f"Match score {score.overall} ({score.label})")

        _notify("enhance", "Tailoring content")
        enhanced = await self.enhancer.enhance(resume, job, on_progress=on_progress)

        _notify("synthesize", "Writing resume document")
        synthesis = synthesize_resume(enhanced)
        enhanced = enhanced.with_statuses(synthesis.bullet_update_status)

        letter_docx = None
        if include_cover_letter:
            _notify("cover_letter", "Writing cover letter")
            letter_docx = build_cover_letter_docx(enhanced, user_settings)

        if self.cache is not None:
            self.cache.put(job_key(job), enhanced)

        elapsed = time.monotonic() - start
        manual = len(synthesis.manual_copy_needed)
        _notify("done", f"Done in {elapsed:.1f}s, {synthesis.written_count} bullets written")
        logger.info(
            "Tailored resume for %s: score %d, %s synthesis, %d written, %d manual",
            job_key(job), score.overall, synthesis.method.value, synthesis.written_count, manual,
        )

        return PipelineResult(
            resume=resume,
            job=job,
            score=score,
            enhanced=enhanced,
            synthesis=synthesis,
            cover_letter_docx=letter_docx,
            elapsed_seconds=elapsed,
            metadata={
                **enhanced.metadata,
                "synthesis_method": synthesis.method.value,
                "bullets_written": synthesis.written_count,
                "bullets_manual": manual,
            },
        )
