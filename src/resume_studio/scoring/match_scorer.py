"""Match Scorer - deterministic résumé/job fit breakdown.

Pure function over (StructuredResume, JobPosting): no I/O, no randomness,
no clock. Missing job data lands on neutral defaults instead of raising.
"""

from __future__ import annotations

import math
import re

from resume_studio.config import ScoringConfig
from resume_studio.models.job import JobPosting
from resume_studio.models.resume import StructuredResume
from resume_studio.models.score import MatchScoreBreakdown, ScoreDetails
from resume_studio.parsers.skills import scan_lexicon
from resume_studio.scoring.keywords import keyword_hits, top_keywords
from resume_studio.scoring.skill_matching import dedupe_skills, find_match

NEUTRAL_SKILLS = 70
NEUTRAL_EXPERIENCE = 70
NEUTRAL_KEYWORDS = 70
GENERIC_TITLE_SCORE = 60
MIN_DESCRIPTION_CHARS = 100

# "LinkedIn Job 88213", "Indeed job #4411", "Job 12"
GENERIC_TITLE = re.compile(r"^\s*(?:[\w.&'-]+\s+){0,2}job\s*#?\s*\d+\s*$", re.IGNORECASE)

_TITLE_TOKEN_ALIASES = {
    "sr": "senior",
    "jr": "junior",
    "eng": "engineer",
    "engr": "engineer",
    "dev": "developer",
    "mgr": "manager",
    "swe": "engineer",
}
_TITLE_FILLER = {"of", "and", "the", "for", "a", "an", "at", "in", "to"}


def score_match(
    resume: StructuredResume,
    job: JobPosting,
    config: ScoringConfig | None = None,
    desired_titles: list[str] | tuple[str, ...] | None = None,
) -> MatchScoreBreakdown:
    """Score how well ``resume`` fits ``job``.

    Args:
        resume: Extracted résumé.
        job: Job posting; any optional field may be empty.
        config: Weights and thresholds; defaults to ``ScoringConfig()``.
        desired_titles: Titles the user is aiming for; overrides
            ``config.desired_titles`` when given.
    """
    config = config or ScoringConfig()
    titles = tuple(desired_titles) if desired_titles is not None else config.desired_titles

    skills, matched, missing = _skills_component(resume, job, config.skill_similarity_threshold)
    experience, experience_note = _experience_component(resume, job)
    title, title_note = _title_component(resume, job, titles)
    keywords, hits, total = _keywords_component(resume, job, config.keyword_top_n)

    weighted = (
        config.skills_weight * skills
        + config.experience_weight * experience
        + config.title_weight * title
        + config.keywords_weight * keywords
    )

    return MatchScoreBreakdown(
        overall=_to_score(weighted),
        skills=_to_score(skills),
        experience=_to_score(experience),
        title=_to_score(title),
        keywords=_to_score(keywords),
        details=ScoreDetails(
            matched_skills=matched,
            missing_skills=missing,
            experience_gap_description=experience_note,
            title_similarity_description=title_note,
            keyword_matches=hits,
            total_keywords=total,
        ),
    )


def _to_score(value: float) -> int:
    """Round half up and clamp to 0-100."""
    return max(0, min(100, math.floor(value + 0.5)))


# ---------------------------------------------------------------------------
# Components (each returns an unrounded 0-100 value plus evidence)
# ---------------------------------------------------------------------------


def _skills_component(
    resume: StructuredResume, job: JobPosting, threshold: float,
) -> tuple[float, list[str], list[str]]:
    required = dedupe_skills(job.required_skills)
    preferred = dedupe_skills(job.preferred_skills)
    if not required and not preferred:
        return NEUTRAL_SKILLS, [], []

    resume_skills = resume.skills or scan_lexicon(resume.full_text)
    matched: list[str] = []
    missing: list[str] = []

    def ratio(job_skills: list[str]) -> float:
        hits = 0
        for skill in job_skills:
            if find_match(skill, resume_skills, threshold) is not None:
                hits += 1
                if skill not in matched:
                    matched.append(skill)
            elif skill not in missing:
                missing.append(skill)
        return hits / max(1, len(job_skills))

    required_score = ratio(required)
    preferred_score = ratio(preferred)
    return 100 * (0.70 * required_score + 0.30 * preferred_score), matched, missing


def _experience_component(resume: StructuredResume, job: JobPosting) -> tuple[float, str]:
    required = job.required_experience_years
    if not required or required <= 0:
        return NEUTRAL_EXPERIENCE, "No experience requirement stated"

    have = resume.years_of_experience or 0.0
    gap = required - have
    if gap <= 0:
        return 100, f"Meets requirement ({_years(have)} years vs {_years(required)} required)"

    note = f"{_years(gap)} years short ({_years(have)} years vs {_years(required)} required)"
    if gap <= 1:
        return 80, note
    if gap <= 2:
        return 60, note
    if gap <= 3:
        return 40, note
    return 20, note


def _years(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"


def _title_component(
    resume: StructuredResume, job: JobPosting, desired_titles: tuple[str, ...],
) -> tuple[float, str]:
    job_title = job.title.strip()
    if not job_title or GENERIC_TITLE.match(job_title):
        return GENERIC_TITLE_SCORE, "Job title is missing or generic; neutral score used"

    candidates = [t.strip() for t in (resume.current_title or "", *desired_titles) if t and t.strip()]
    if not candidates:
        return GENERIC_TITLE_SCORE, "No résumé title to compare; neutral score used"

    for candidate in candidates:
        if candidate.lower() == job_title.lower():
            return 100, f"Exact title match: {candidate!r}"

    job_tokens = _title_tokens(job_title)
    best_score, best_title = 0.0, candidates[0]
    for candidate in candidates:
        tokens = _title_tokens(candidate)
        union = job_tokens | tokens
        score = 100 * len(job_tokens & tokens) / len(union) if union else 0.0
        if score > best_score:
            best_score, best_title = score, candidate
    return best_score, f"{job_title!r} vs {best_title!r}: {_to_score(best_score)}% token overlap"


def _title_tokens(title: str) -> set[str]:
    tokens = re.findall(r"[a-z0-9+#]+", title.lower())
    return {_TITLE_TOKEN_ALIASES.get(t, t) for t in tokens if t not in _TITLE_FILLER}


def _keywords_component(
    resume: StructuredResume, job: JobPosting, top_n: int,
) -> tuple[float, int, int]:
    description = job.description.strip()
    if len(description) < MIN_DESCRIPTION_CHARS:
        return NEUTRAL_KEYWORDS, 0, 0

    keywords = top_keywords(description, top_n)
    if not keywords:
        return NEUTRAL_KEYWORDS, 0, 0

    hits = keyword_hits(keywords, resume.full_text)
    return 100 * len(hits) / len(keywords), len(hits), len(keywords)
