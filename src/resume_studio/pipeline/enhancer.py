"""Content Enhancer - rewrites bullets and drafts a summary and cover letter.

Every call degrades on its own: a failed bullet group keeps the original
wording, a failed summary or cover letter falls back to a template. The run
only raises when every call it made failed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Callable

from resume_studio.clients.llm_client import GenerationTask, LLMClient
from resume_studio.config import EnhancerConfig, LLMConfig
from resume_studio.exceptions import (
    EnhancementError,
    EnhancementRateLimited,
    EnhancementServiceUnavailable,
)
from resume_studio.models.enhanced import BulletUpdateStatus, EnhancedResume
from resume_studio.models.job import JobPosting
from resume_studio.models.resume import SectionKind, StructuredResume, WorkExperience
from resume_studio.utils.json_parser import extract_string_list

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]

SYSTEM_PROMPT = """\
You are a professional resume writer and career coach. You tailor existing
resume content to a specific job without inventing experience, employers,
numbers or skills the candidate does not already claim."""

BULLETS_PROMPT = """\
Rewrite each resume bullet below for the target job.

Rules:
1. Keep every fact. Do not add numbers, tools or achievements that are not in the original.
2. Start with a strong action verb and surface existing metrics.
3. Each rewritten bullet must be the same length as the original or shorter.
4. Use the job's vocabulary where it truthfully applies.
5. Return ONLY a JSON array of {count} strings, in the same order as the input.

Target job: {job_title} at {company}
Key skills: {skills}
Job description (excerpt):
{description}

Role: {role}

Bullets (JSON):
{bullets}"""

SINGLE_BULLET_PROMPT = """\
Rewrite this resume bullet for the target job ({job_title} at {company}).
Keep every fact, start with an action verb, keep it the same length or shorter.
Return only the rewritten bullet text, no quotes or commentary.

Bullet: {bullet}"""

SUMMARY_PROMPT = """\
Write a 2-3 sentence professional summary for this candidate, tailored to the
{job_title} role at {company}. Use only facts from the resume. Return only the
summary text.

Current summary:
{summary}

Resume:
{resume}"""

COVER_LETTER_PROMPT = """\
Write the body of a cover letter for the {job_title} position at {company}.

Requirements:
- {min_words}-{max_words} words, 3-4 paragraphs separated by a blank line
- No salutation, no sign-off, no placeholders in brackets
- Use only facts from the resume

Job description (excerpt):
{description}

Resume:
{resume}"""

_LEADING_MARKER = re.compile(r"^\s*(?:[-*•●▪]\s*|\d+[.)]\s+)")


def task_budget(task: GenerationTask, config: EnhancerConfig, item_count: int = 1) -> int:
    """Maximum output tokens for one request of ``task``."""
    if task == GenerationTask.BULLET_REWRITE:
        return config.bullet_rewrite_tokens + config.bullet_rewrite_tokens_per_bullet * max(item_count, 1)
    if task == GenerationTask.SUMMARY:
        return config.summary_tokens
    if task == GenerationTask.COVER_LETTER:
        return config.cover_letter_tokens
    return config.extraction_tokens


class _RunLedger:
    """Per-run call accounting; one instance per enhance() call."""

    def __init__(self) -> None:
        self.calls = 0
        self.failures: list[EnhancementError] = []
        self.input_tokens = 0
        self.output_tokens = 0

    def record(self, response) -> None:
        self.calls += 1
        self.input_tokens += response.input_tokens
        self.output_tokens += response.output_tokens

    def fail(self, error: EnhancementError) -> None:
        self.calls += 1
        self.failures.append(error)

    @property
    def all_failed(self) -> bool:
        return self.calls > 0 and len(self.failures) == self.calls


class ContentEnhancer:
    """Tailors a StructuredResume to a JobPosting through the text-generation service.

    Args:
        llm: Client for the service; ``None`` means AI is unavailable.
        config: Token budgets, concurrency and cover-letter length.
        llm_config: Provider settings; ``enabled=False`` turns every call off.
        model: Model override; defaults to ``llm_config.model``.
    """

    def __init__(
        self,
        llm: LLMClient | None,
        config: EnhancerConfig | None = None,
        llm_config: LLMConfig | None = None,
        model: str | None = None,
    ):
        self.llm = llm
        self.config = config or EnhancerConfig()
        self.llm_config = llm_config or LLMConfig()
        self.model = model or self.llm_config.model

    @property
    def ai_available(self) -> bool:
        return self.llm is not None and self.llm_config.enabled

    async def enhance(
        self,
        resume: StructuredResume,
        job: JobPosting,
        on_progress: ProgressCallback | None = None,
    ) -> EnhancedResume:
        """Produce an EnhancedResume for ``job``.

        Raises:
            EnhancementRateLimited: every call was rate limited.
            EnhancementServiceUnavailable: every call failed otherwise.
        """
        progress = on_progress or (lambda percent, message: None)
        experiences = resume.work_experiences

        if not self.ai_available:
            logger.info("AI enhancement disabled; returning original content")
            progress(100, "AI disabled, original content kept")
            return self._assemble(
                resume, job,
                enhanced_bullets=[list(e.bullet_points) for e in experiences],
                summary=fallback_summary(resume),
                cover_letter=fallback_cover_letter(resume, job),
                cover_letter_ai=False,
                metadata={"ai_enabled": False},
            )

        ledger = _RunLedger()
        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        total_steps = len(experiences) + 2
        done = 0

        def step(message: str) -> None:
            nonlocal done
            done += 1
            progress(min(99, round(100 * done / total_steps)), message)

        progress(0, "Starting enhancement")

        async def rewrite(idx: int, exp: WorkExperience) -> list[str]:
            async with semaphore:
                result = await self._rewrite_experience(exp, job, ledger)
            step(f"Rewrote bullets for {exp.title or exp.company or f'entry {idx + 1}'}")
            return result

        async def summary() -> str | None:
            async with semaphore:
                result = await self._tailor_summary(resume, job, ledger)
            step("Tailored summary")
            return result

        async def cover_letter() -> str | None:
            async with semaphore:
                result = await self._draft_cover_letter(resume, job, ledger)
            step("Drafted cover letter")
            return result

        results = await asyncio.gather(
            *(rewrite(i, e) for i, e in enumerate(experiences)),
            summary(),
            cover_letter(),
        )
        enhanced_bullets: list[list[str]] = list(results[: len(experiences)])
        tailored_summary, letter = results[len(experiences):]

        if ledger.all_failed:
            if all(isinstance(f, EnhancementRateLimited) for f in ledger.failures):
                raise EnhancementRateLimited(
                    f"All {ledger.calls} enhancement calls were rate limited"
                )
            raise EnhancementServiceUnavailable(
                f"All {ledger.calls} enhancement calls failed: {ledger.failures[-1]}"
            )

        enhanced = self._assemble(
            resume, job,
            enhanced_bullets=enhanced_bullets,
            summary=tailored_summary or fallback_summary(resume),
            cover_letter=letter or fallback_cover_letter(resume, job),
            cover_letter_ai=letter is not None,
            metadata={
                "ai_enabled": True,
                "model": self.model,
                "calls": ledger.calls,
                "failed_calls": len(ledger.failures),
                "input_tokens": ledger.input_tokens,
                "output_tokens": ledger.output_tokens,
            },
        )
        changed = sum(1 for s in enhanced.bullet_update_status if s.ai_enhanced)
        logger.info(
            "Enhanced %d of %d bullets (%d calls, %d failed)",
            changed, len(enhanced.bullet_update_status), ledger.calls, len(ledger.failures),
        )
        progress(100, "Enhancement complete")
        return enhanced

    # ------------------------------------------------------------------
    # Individual calls
    # ------------------------------------------------------------------

    async def _rewrite_experience(
        self, exp: WorkExperience, job: JobPosting, ledger: _RunLedger,
    ) -> list[str]:
        bullets = exp.bullet_points
        if not bullets:
            return []

        prompt = BULLETS_PROMPT.format(
            count=len(bullets),
            job_title=job.title or "the role",
            company=job.company_name or "the company",
            skills=", ".join(job.required_skills + job.preferred_skills) or "(not listed)",
            description=job.description[:3000] or "(none)",
            role=" at ".join(p for p in (exp.title, exp.company) if p) or "(unspecified)",
            bullets=json.dumps(bullets, ensure_ascii=False, indent=2),
        )
        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=SYSTEM_PROMPT,
                model=self.model,
                max_tokens=task_budget(GenerationTask.BULLET_REWRITE, self.config, len(bullets)),
                task=GenerationTask.BULLET_REWRITE,
            )
        except EnhancementError as e:
            logger.warning("Bullet rewrite failed for %r, keeping originals: %s", exp.title, e)
            ledger.fail(e)
            return list(bullets)
        ledger.record(response)

        try:
            rewritten = extract_string_list(response.text, expected_length=len(bullets))
        except ValueError:
            logger.warning("Malformed bullet JSON for %r, rewriting one by one", exp.title)
            return [await self._rewrite_single(b, job, ledger) for b in bullets]

        return [_clean_bullet(new, old) for new, old in zip(rewritten, bullets)]

    async def _rewrite_single(self, bullet: str, job: JobPosting, ledger: _RunLedger) -> str:
        try:
            response = await self.llm.generate(
                prompt=SINGLE_BULLET_PROMPT.format(
                    job_title=job.title or "the role",
                    company=job.company_name or "the company",
                    bullet=bullet,
                ),
                system=SYSTEM_PROMPT,
                model=self.model,
                max_tokens=task_budget(GenerationTask.BULLET_REWRITE, self.config, 1),
                task=GenerationTask.BULLET_REWRITE,
            )
        except EnhancementError as e:
            ledger.fail(e)
            return bullet
        ledger.record(response)
        return _clean_bullet(response.text, bullet)

    async def _tailor_summary(
        self, resume: StructuredResume, job: JobPosting, ledger: _RunLedger,
    ) -> str | None:
        try:
            response = await self.llm.generate(
                prompt=SUMMARY_PROMPT.format(
                    job_title=job.title or "target",
                    company=job.company_name or "the company",
                    summary=resume.summary_text or "(none)",
                    resume=resume.full_text[:6000],
                ),
                system=SYSTEM_PROMPT,
                model=self.model,
                max_tokens=task_budget(GenerationTask.SUMMARY, self.config),
                task=GenerationTask.SUMMARY,
            )
        except EnhancementError as e:
            logger.warning("Summary generation failed, using fallback: %s", e)
            ledger.fail(e)
            return None
        ledger.record(response)
        return response.text.strip()

    async def _draft_cover_letter(
        self, resume: StructuredResume, job: JobPosting, ledger: _RunLedger,
    ) -> str | None:
        try:
            response = await self.llm.generate(
                prompt=COVER_LETTER_PROMPT.format(
                    job_title=job.title or "open",
                    company=job.company_name or "your company",
                    min_words=self.config.cover_letter_min_words,
                    max_words=self.config.cover_letter_max_words,
                    description=job.description[:3000] or "(none)",
                    resume=resume.full_text[:6000],
                ),
                system=SYSTEM_PROMPT,
                model=self.model,
                max_tokens=task_budget(GenerationTask.COVER_LETTER, self.config),
                task=GenerationTask.COVER_LETTER,
            )
        except EnhancementError as e:
            logger.warning("Cover letter generation failed, using template: %s", e)
            ledger.fail(e)
            return None
        ledger.record(response)

        letter = response.text.strip()
        words = len(letter.split())
        if not self.config.cover_letter_min_words <= words <= self.config.cover_letter_max_words:
            logger.debug(
                "Cover letter has %d words (target %d-%d)",
                words, self.config.cover_letter_min_words, self.config.cover_letter_max_words,
            )
        return letter

    # ------------------------------------------------------------------

    @staticmethod
    def _assemble(
        resume: StructuredResume,
        job: JobPosting,
        *,
        enhanced_bullets: list[list[str]],
        summary: str,
        cover_letter: str,
        cover_letter_ai: bool,
        metadata: dict,
    ) -> EnhancedResume:
        statuses = []
        flat_index = 0
        for exp_idx, (exp, rewritten) in enumerate(zip(resume.work_experiences, enhanced_bullets)):
            for original, new in zip(exp.bullet_points, rewritten):
                statuses.append(BulletUpdateStatus.from_rewrite(flat_index, exp_idx, original, new))
                flat_index += 1
        return EnhancedResume(
            original=resume,
            job=job,
            enhanced_bullets=enhanced_bullets,
            tailored_summary=summary,
            cover_letter=cover_letter,
            cover_letter_ai_generated=cover_letter_ai,
            bullet_update_status=statuses,
            metadata=metadata,
        )


def _clean_bullet(text: str, original: str) -> str:
    """Single-line bullet text without markers or quotes; the original if empty."""
    cleaned = _LEADING_MARKER.sub("", text.strip())
    cleaned = " ".join(cleaned.split()).strip().strip('"').strip()
    return cleaned or original


def fallback_summary(resume: StructuredResume) -> str:
    """The résumé's own summary, else the first lines of its first body section."""
    if resume.summary_text:
        return resume.summary_text
    for section in resume.sections:
        if section.kind != SectionKind.HEADER and section.content.strip():
            return " ".join(section.content.strip().splitlines()[:3])
    return ""


def fallback_cover_letter(resume: StructuredResume, job: JobPosting) -> str:
    """Templated cover-letter body built from the résumé summary and job title."""
    title = job.title or "open"
    company = job.company_name or "your company"
    summary = fallback_summary(resume)
    skills = ", ".join(resume.skills[:5])

    paragraphs = [
        f"I am writing to express my interest in the {title} position at {company}.",
    ]
    if summary:
        paragraphs.append(summary)
    if skills:
        paragraphs.append(
            f"My background includes hands-on work with {skills}, and I would welcome "
            f"the chance to apply that experience to the {title} role."
        )
    paragraphs.append(
        f"Thank you for considering my application. I look forward to discussing "
        f"how I can contribute to {company}."
    )
    return "\n\n".join(paragraphs)
