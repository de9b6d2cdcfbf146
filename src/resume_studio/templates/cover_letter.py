"""Cover letter DOCX generation (business-letter layout)."""

from __future__ import annotations

import math
import re
from datetime import date
from io import BytesIO

from docx import Document
from docx.shared import Pt

from resume_studio.exceptions import SynthesisError
from resume_studio.models.enhanced import EnhancedResume
from resume_studio.models.resume import StructuredResume
from resume_studio.models.user import UserSettings

PLACEHOLDER_NAME = "Your Name"
MIN_PARAGRAPH_CHARS = 40
SENTENCES_PER_PARAGRAPH = 3
MAX_PARAGRAPHS = 4

_NAME_LINE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z]\.?)?\s+[A-Z][a-z]+$")
_CAPS_NAME_LINE = re.compile(r"^[A-Z]{2,}(?:\s+[A-Z]\.?)?\s+[A-Z]{2,}$")
_PHONE = re.compile(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}")
_SENTENCE = re.compile(r"[^.!?]+(?:[.!?]+[\"')\]]*|$)")


def _is_placeholder_line(line: str) -> bool:
    lower = line.strip().lower()
    return (
        lower.startswith("[")
        or any(marker in lower for marker in ("[your", "[date", "[city", "[company"))
        or "dear hiring manager" in lower
        or lower.startswith(("sincerely", "best regards", "kind regards", "hiring manager"))
    )


def split_cover_letter_body(text: str) -> list[str]:
    """Split an AI-drafted body into letter paragraphs.

    Placeholder, salutation and sign-off lines are dropped. Blank-line breaks
    are kept when they give at least two paragraphs of reasonable length;
    otherwise sentences are grouped three at a time. Never more than four
    paragraphs: extra ones are folded into the last.
    """
    lines = [line for line in text.splitlines() if not _is_placeholder_line(line)]
    cleaned = "\n".join(lines).strip()
    if not cleaned:
        return []

    paragraphs = [" ".join(p.split()) for p in re.split(r"\n\s*\n", cleaned) if p.strip()]
    if len(paragraphs) >= 2 and all(len(p) >= MIN_PARAGRAPH_CHARS for p in paragraphs):
        if len(paragraphs) > MAX_PARAGRAPHS:
            tail = " ".join(paragraphs[MAX_PARAGRAPHS - 1 :])
            paragraphs = [*paragraphs[: MAX_PARAGRAPHS - 1], tail]
        return paragraphs

    flat = " ".join(cleaned.split())
    sentences = [s.strip() for s in _SENTENCE.findall(flat) if s.strip()]
    if not sentences:
        return [flat]
    size = max(SENTENCES_PER_PARAGRAPH, math.ceil(len(sentences) / MAX_PARAGRAPHS))
    return [" ".join(sentences[i : i + size]) for i in range(0, len(sentences), size)]


def _looks_like_name(line: str) -> bool:
    lower = line.lower()
    if not line or len(line) >= 50 or "@" in line or _PHONE.search(line):
        return False
    if any(token in lower for token in ("linkedin", "http", "resume", ".com")):
        return False
    return bool(_NAME_LINE.match(line) or _CAPS_NAME_LINE.match(line))


def resolve_signer_name(resume: StructuredResume, user_settings: UserSettings | None = None) -> str:
    """Name for the signature: saved settings, a name line near the top, the email, a placeholder."""
    if user_settings is not None and user_settings.name.strip():
        return user_settings.name.strip()

    for line in resume.full_text.splitlines()[:5]:
        candidate = line.strip()
        if _looks_like_name(candidate):
            return candidate.title() if candidate.isupper() else candidate

    if resume.contact.email:
        local = resume.contact.email.split("@", 1)[0]
        parts = [p for p in re.split(r"[._-]", local) if p.isalpha()]
        if len(parts) >= 2:
            return " ".join(p.capitalize() for p in parts)

    return PLACEHOLDER_NAME


def format_letter_date(today: date) -> str:
    """'October 18, 2026'."""
    return f"{today:%B} {today.day}, {today.year}"


def build_cover_letter_docx(
    enhanced: EnhancedResume,
    user_settings: UserSettings | None = None,
    today: date | None = None,
) -> bytes:
    """Render the cover letter: sender, date, recipient, salutation, body, signature.

    Raises:
        SynthesisError: the enhanced résumé carries no cover letter text.
    """
    body = split_cover_letter_body(enhanced.cover_letter)
    if not body:
        raise SynthesisError("No cover letter text to render")

    settings = user_settings or UserSettings()
    resume = enhanced.original
    name = resolve_signer_name(resume, settings)
    today = today or date.today()

    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def line(text: str, space_after: int = 0) -> None:
        paragraph = doc.add_paragraph(text)
        paragraph.paragraph_format.space_after = Pt(space_after)

    sender = [
        name,
        settings.address,
        settings.city_line,
        settings.email or resume.contact.email or "",
        settings.phone or resume.contact.phone or "",
        settings.linkedin or resume.contact.linkedin or "",
    ]
    sender = [s for s in sender if s]
    for i, text in enumerate(sender):
        line(text, 12 if i == len(sender) - 1 else 0)

    line(format_letter_date(today), 12)

    job = enhanced.job
    if job is not None and job.company_name:
        recipient = ["Hiring Manager", job.company_name]
        if job.location:
            recipient.append(job.location)
        for i, text in enumerate(recipient):
            line(text, 12 if i == len(recipient) - 1 else 0)

    line("Dear Hiring Manager,", 12)
    for paragraph in body:
        line(paragraph, 12)
    line("Sincerely,", 12)
    line(name)

    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()
