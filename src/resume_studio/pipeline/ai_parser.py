"""AI fallback for résumés whose experience section the heuristics could not split."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from resume_studio.clients.llm_client import GenerationTask, LLMClient
from resume_studio.config import EnhancerConfig, LLMConfig
from resume_studio.exceptions import EnhancementError
from resume_studio.models.resume import BulletPoint, Section, SectionKind, StructuredResume, WorkExperience
from resume_studio.pipeline.enhancer import task_budget

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You extract structured work history from resume text. Copy bullet text exactly
as written; never paraphrase, merge or invent entries."""

EXTRACTION_PROMPT = """\
Extract every work experience entry from the resume below, most recent first.

Respond with ONLY this JSON:
{{
  "work_experiences": [
    {{
      "company": "", "title": "", "start_date": "", "end_date": "",
      "is_current": false, "location": "",
      "bullet_points": ["exact bullet text", "..."]
    }}
  ]
}}

Resume:
{resume}"""


def _squash(text: str) -> str:
    return " ".join(text.split())


async def recover_work_experiences(
    resume: StructuredResume,
    llm: LLMClient | None,
    config: EnhancerConfig | None = None,
    llm_config: LLMConfig | None = None,
) -> StructuredResume:
    """Return ``resume`` with AI-extracted experiences when heuristics found no bullets.

    Only bullets that occur verbatim in the résumé text are kept, and the
    experience section's items are rebuilt from them so the flattened bullet
    order stays consistent. Any failure returns ``resume`` unchanged.
    """
    llm_config = llm_config or LLMConfig()
    if resume.flattened_bullets() or llm is None or not llm_config.enabled:
        return resume

    try:
        data = await llm.generate_json(
            prompt=EXTRACTION_PROMPT.format(resume=resume.full_text[:12000]),
            system=SYSTEM_PROMPT,
            model=llm_config.model,
            temperature=0.0,
            max_tokens=task_budget(GenerationTask.EXTRACTION, config or EnhancerConfig()),
            task=GenerationTask.EXTRACTION,
        )
        raw_entries = data.get("work_experiences", []) if isinstance(data, dict) else []
        candidates = [
            WorkExperience.model_validate({k: v for k, v in e.items() if v is not None})
            for e in raw_entries
            if isinstance(e, dict)
        ]
    except (EnhancementError, ValueError, ValidationError) as e:
        logger.warning("AI experience extraction failed, keeping heuristic result: %s", e)
        return resume

    haystack = _squash(resume.full_text)
    experiences = []
    for exp in candidates:
        kept = [b.strip() for b in exp.bullet_points if b.strip() and _squash(b) in haystack]
        dropped = len(exp.bullet_points) - len(kept)
        if dropped:
            logger.debug("Dropped %d AI bullets not found verbatim for %r", dropped, exp.title)
        experiences.append(exp.model_copy(update={"bullet_points": kept}))

    if not any(exp.bullet_points for exp in experiences):
        logger.info("AI extraction found no verifiable bullets")
        return resume

    items = [BulletPoint(text=b) for exp in experiences for b in exp.bullet_points]
    sections: list[Section] = []
    placed = False
    for section in resume.sections:
        if section.kind == SectionKind.EXPERIENCE:
            section = section.model_copy(update={"items": [] if placed else items})
            placed = True
        sections.append(section)
    if not placed:
        sections.append(
            Section(
                kind=SectionKind.EXPERIENCE,
                title="Experience",
                content="\n".join(b.text for b in items),
                items=items,
            )
        )

    logger.info("AI extraction recovered %d experiences, %d bullets", len(experiences), len(items))
    return resume.model_copy(
        update={
            "work_experiences": experiences,
            "sections": sections,
            "current_title": resume.current_title or next((e.title for e in experiences if e.title), None),
        }
    )
