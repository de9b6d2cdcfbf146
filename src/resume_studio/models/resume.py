"""Pydantic models for the structured résumé produced by the extractor."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SectionKind(str, Enum):
    HEADER = "header"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILLS = "skills"
    SUMMARY = "summary"
    CERTIFICATIONS = "certifications"
    OTHER = "other"


class SourceFormat(str, Enum):
    PDF = "pdf"  # page-oriented text, no formatting metadata
    DOCX = "docx"  # office markup container
    TEXT = "text"


class Formatting(BaseModel):
    """Visual attributes of one text unit. Immutable so it can be compared."""

    model_config = ConfigDict(frozen=True)

    bold: bool = False
    italic: bool = False
    font_size_pt: float | None = None
    font_family: str | None = None
    alignment: str = "left"  # left | center | right | justify


class BulletPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    level: int = 0
    formatting: Formatting | None = None


class Section(BaseModel):
    kind: SectionKind
    title: str | None = None
    content: str = ""
    items: list[BulletPoint] = Field(default_factory=list)
    formatting: Formatting | None = None


class WorkExperience(BaseModel):
    company: str = ""
    title: str = ""
    start_date: str | None = None
    end_date: str | None = None
    is_current: bool = False
    location: str | None = None
    bullet_points: list[str] = Field(default_factory=list)


class Education(BaseModel):
    school: str
    degree: str = ""
    field: str | None = None
    graduation_date: str | None = None
    gpa: str | None = None
    location: str | None = None


class ContactInfo(BaseModel):
    email: str | None = None
    phone: str | None = None
    linkedin: str | None = None
    website: str | None = None


class StructuredResume(BaseModel):
    """Everything the scorer, enhancer and synthesizer know about a résumé.

    ``source_bytes`` keeps the uploaded file verbatim so the synthesizer can
    edit it in place later; it serializes as base64 in JSON.
    """

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    full_text: str
    sections: list[Section] = Field(default_factory=list)
    work_experiences: list[WorkExperience] = Field(default_factory=list)
    education_entries: list[Education] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    contact: ContactInfo = Field(default_factory=ContactInfo)
    source_bytes: bytes | None = None
    source_format: SourceFormat = SourceFormat.TEXT
    current_title: str | None = None
    years_of_experience: float | None = None

    def flattened_bullets(self) -> list[tuple[int, str]]:
        """Return ``(experience_index, text)`` for every bullet, in order.

        The position in this list is the flattened bullet index shared by
        the enhancer, the synthesizer and ``BulletUpdateStatus``.
        """
        return [
            (exp_idx, bullet)
            for exp_idx, exp in enumerate(self.work_experiences)
            for bullet in exp.bullet_points
        ]

    def section(self, kind: SectionKind) -> Section | None:
        """First section of the given kind, if any."""
        for section in self.sections:
            if section.kind == kind:
                return section
        return None

    @property
    def summary_text(self) -> str:
        section = self.section(SectionKind.SUMMARY)
        return section.content.strip() if section else ""
