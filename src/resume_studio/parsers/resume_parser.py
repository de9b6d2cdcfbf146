"""Document Extractor - turn résumé bytes into a StructuredResume."""

from __future__ import annotations

import logging
from pathlib import Path

from resume_studio.exceptions import EmptyDocument, UnsupportedFormat
from resume_studio.models.resume import (
    BulletPoint,
    Section,
    SectionKind,
    SourceFormat,
    StructuredResume,
    WorkExperience,
)
from resume_studio.parsers.fields import (
    estimate_years_of_experience,
    extract_contact,
    extract_education,
    infer_current_title,
)
from resume_studio.parsers.readers import SourceParagraph, read_docx, read_pdf, read_text
from resume_studio.parsers.segmenter import (
    SegmentedSection,
    group_experience_entries,
    segment_sections,
    strip_bullet_marker,
)
from resume_studio.parsers.skills import merge_skills, scan_lexicon, split_skills_section

logger = logging.getLogger(__name__)

_FORMATS = {
    "pdf": SourceFormat.PDF,
    "docx": SourceFormat.DOCX,
    "txt": SourceFormat.TEXT,
    "text": SourceFormat.TEXT,
    "md": SourceFormat.TEXT,
    "markdown": SourceFormat.TEXT,
}


def parse_resume(file_path: str | Path) -> StructuredResume:
    """Parse a resume file (PDF, DOCX, TXT, MD) into a StructuredResume."""
    path = Path(file_path)
    suffix = path.suffix.lower().lstrip(".")
    if suffix not in _FORMATS:
        raise UnsupportedFormat(f"Unsupported file format: {path.suffix or '(none)'}", path.name)
    return extract_resume(path.read_bytes(), suffix)


def extract_resume(data: bytes, file_format: str | SourceFormat) -> StructuredResume:
    """Extract a StructuredResume from raw document bytes.

    Raises:
        UnsupportedFormat: the declared format is not pdf, docx, txt or md.
        CorruptDocument: the container or PDF stream cannot be opened.
        EmptyDocument: no text could be extracted.
    """
    source_format = _resolve_format(file_format)

    if source_format == SourceFormat.DOCX:
        paragraphs = read_docx(data)
    elif source_format == SourceFormat.PDF:
        paragraphs = read_pdf(data)
    else:
        paragraphs = read_text(data.decode("utf-8-sig", errors="replace"))

    paragraphs = [p for p in paragraphs if p.text.strip()]
    if not paragraphs:
        raise EmptyDocument("No extractable text in document", source_format.value)

    full_text = "\n".join(p.text for p in paragraphs)
    segmented = segment_sections(paragraphs)

    sections: list[Section] = []
    experiences: list[WorkExperience] = []
    for seg in segmented:
        items: list[BulletPoint] = []
        try:
            if seg.kind == SectionKind.EXPERIENCE:
                grouped = group_experience_entries(seg.paragraphs)
                for experience, bullets in grouped:
                    experiences.append(experience)
                    items.extend(bullets)
            else:
                items = _list_items(seg.paragraphs)
        except ValueError:
            logger.warning("Could not structure %s section %r, keeping text only", seg.kind.value, seg.title)
            items = []
        sections.append(
            Section(
                kind=seg.kind,
                title=seg.title,
                content=seg.content,
                items=items,
                formatting=seg.formatting,
            )
        )

    header_lines = _lines_of(segmented, SectionKind.HEADER)
    skills = merge_skills(
        split_skills_section([strip_bullet_marker(line)[1] for line in _lines_of(segmented, SectionKind.SKILLS)]),
        scan_lexicon(full_text),
    )

    resume = StructuredResume(
        full_text=full_text,
        sections=sections,
        work_experiences=experiences,
        education_entries=extract_education(_lines_of(segmented, SectionKind.EDUCATION)),
        skills=skills,
        contact=extract_contact("\n".join(header_lines), full_text),
        source_bytes=None if source_format == SourceFormat.TEXT else data,
        source_format=source_format,
        current_title=infer_current_title(experiences, header_lines),
        years_of_experience=estimate_years_of_experience(full_text, experiences),
    )
    logger.info(
        "Extracted %s resume: %d sections, %d experiences, %d bullets, %d skills",
        source_format.value,
        len(sections),
        len(experiences),
        len(resume.flattened_bullets()),
        len(skills),
    )
    return resume


def _resolve_format(file_format: str | SourceFormat) -> SourceFormat:
    if isinstance(file_format, SourceFormat):
        return file_format
    key = str(file_format).lower().lstrip(".")
    if key not in _FORMATS:
        raise UnsupportedFormat(f"Unsupported file format: {file_format!r}")
    return _FORMATS[key]


def _lines_of(segmented: list[SegmentedSection], kind: SectionKind) -> list[str]:
    return [p.text for seg in segmented if seg.kind == kind for p in seg.paragraphs]


def _list_items(paragraphs: list[SourceParagraph]) -> list[BulletPoint]:
    items = []
    for paragraph in paragraphs:
        marked, text = strip_bullet_marker(paragraph.text)
        if marked or paragraph.list_kind:
            items.append(BulletPoint(text=text, level=paragraph.list_level, formatting=paragraph.formatting))
    return items
