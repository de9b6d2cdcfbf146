"""DOCX fallback renderer: section-template rebuild and simple layout.

Used when there is no original office document to edit in place. Output
keeps each section's recorded formatting where it exists but makes no
promise of matching the source layout.
"""

from __future__ import annotations

from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor

from resume_studio.models.enhanced import EnhancedResume
from resume_studio.models.resume import Formatting, Section, SectionKind, WorkExperience
from resume_studio.templates.cover_letter import resolve_signer_name

_ALIGNMENT = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
    "justify": WD_ALIGN_PARAGRAPH.JUSTIFY,
}


def render_fallback(enhanced: EnhancedResume) -> bytes:
    """Rebuild from sections when there are any, else use the simple layout."""
    if enhanced.original.sections:
        return render_from_sections(enhanced)
    return render_simple(enhanced)


def _new_document() -> Document:
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(10.5)
    return doc


def _to_bytes(doc: Document) -> bytes:
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def _apply_formatting(paragraph, formatting: Formatting | None) -> None:
    if formatting is None:
        return
    paragraph.alignment = _ALIGNMENT.get(formatting.alignment, WD_ALIGN_PARAGRAPH.LEFT)
    for run in paragraph.runs:
        run.bold = formatting.bold or None
        run.italic = formatting.italic or None
        if formatting.font_size_pt:
            run.font.size = Pt(formatting.font_size_pt)
        if formatting.font_family:
            run.font.name = formatting.font_family


def _add_line(doc: Document, text: str, formatting: Formatting | None = None, style: str | None = None):
    paragraph = doc.add_paragraph(style=style)
    paragraph.add_run(text)
    _apply_formatting(paragraph, formatting)
    return paragraph


def _add_bullet(doc: Document, text: str, level: int = 0, formatting: Formatting | None = None) -> None:
    style = "List Bullet 2" if level > 0 else "List Bullet"
    paragraph = _add_line(doc, text, formatting, style=style)
    # bullets take the list style's alignment
    paragraph.alignment = None


def _add_heading(doc: Document, text: str, formatting: Formatting | None = None) -> None:
    if formatting is None:
        heading = doc.add_heading(text, level=2)
        heading.runs[0].font.color.rgb = RGBColor(0x1A, 0x1A, 0x1A)
        return
    _add_line(doc, text, formatting.model_copy(update={"bold": True}) if not formatting.bold else formatting)


def _add_experience(doc: Document, exp: WorkExperience, bullets: list[str]) -> None:
    heading = " | ".join(p for p in (exp.title, exp.company) if p)
    if heading:
        paragraph = doc.add_paragraph()
        run = paragraph.add_run(heading)
        run.bold = True
        run.font.size = Pt(11.5)
    meta = []
    if exp.start_date:
        meta.append(f"{exp.start_date} - {exp.end_date or 'Present'}")
    if exp.location:
        meta.append(exp.location)
    if meta:
        paragraph = doc.add_paragraph()
        paragraph.add_run(" | ".join(meta)).italic = True
    for bullet in bullets:
        _add_bullet(doc, bullet)


def _bullets_for(enhanced: EnhancedResume, index: int, exp: WorkExperience) -> list[str]:
    if index < len(enhanced.enhanced_bullets):
        return enhanced.enhanced_bullets[index]
    return exp.bullet_points


# ---------------------------------------------------------------------------
# Mode 1: rebuild from recorded sections
# ---------------------------------------------------------------------------


def render_from_sections(enhanced: EnhancedResume) -> bytes:
    """Rebuild the résumé section by section with enhanced content swapped in.

    All work experiences are written under the first experience section;
    later experience sections would only repeat them.
    """
    resume = enhanced.original
    doc = _new_document()
    experiences_written = False

    for section in resume.sections:
        if section.kind == SectionKind.EXPERIENCE:
            if experiences_written:
                continue
            experiences_written = True
            if section.title:
                _add_heading(doc, section.title, section.formatting)
            for idx, exp in enumerate(resume.work_experiences):
                _add_experience(doc, exp, _bullets_for(enhanced, idx, exp))
            continue

        if section.kind == SectionKind.HEADER:
            _render_header(doc, section)
            continue

        if section.title:
            _add_heading(doc, section.title, section.formatting)
        if section.kind == SectionKind.SUMMARY and enhanced.tailored_summary:
            _add_line(doc, enhanced.tailored_summary.strip())
        else:
            _render_body(doc, section)

    return _to_bytes(doc)


def _render_header(doc: Document, section: Section) -> None:
    lines = [line for line in section.content.splitlines() if line.strip()]
    for i, line in enumerate(lines):
        paragraph = doc.add_paragraph()
        run = paragraph.add_run(line.strip())
        if i == 0:
            run.bold = True
            run.font.size = Pt(16)
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        if section.formatting is not None and i > 0:
            _apply_formatting(paragraph, section.formatting.model_copy(update={"bold": False}))


def _render_body(doc: Document, section: Section) -> None:
    item_texts = {item.text for item in section.items}
    items = iter(section.items)
    for line in section.content.splitlines():
        text = line.strip()
        if not text:
            continue
        stripped = text.lstrip("•●○◦■▪-*– ").strip()
        if stripped in item_texts:
            item = next(items, None)
            if item is not None:
                _add_bullet(doc, item.text, item.level, item.formatting)
                continue
        _add_line(doc, text)


# ---------------------------------------------------------------------------
# Mode 2: simple layout (no sections recorded)
# ---------------------------------------------------------------------------


def render_simple(enhanced: EnhancedResume) -> bytes:
    """Name, contact line, summary, experience, skills and education."""
    resume = enhanced.original
    doc = _new_document()

    title = doc.add_heading(resolve_signer_name(resume).upper(), level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    contact = resume.contact
    parts = [p for p in (contact.email, contact.phone, contact.linkedin, contact.website) if p]
    if parts:
        paragraph = doc.add_paragraph(" | ".join(parts))
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER

    if enhanced.tailored_summary:
        _add_heading(doc, "PROFESSIONAL SUMMARY")
        doc.add_paragraph(enhanced.tailored_summary.strip())

    if resume.work_experiences:
        _add_heading(doc, "EXPERIENCE")
        for idx, exp in enumerate(resume.work_experiences):
            _add_experience(doc, exp, _bullets_for(enhanced, idx, exp))

    if resume.skills:
        _add_heading(doc, "SKILLS")
        doc.add_paragraph(", ".join(resume.skills))

    if resume.education_entries:
        _add_heading(doc, "EDUCATION")
        for edu in resume.education_entries:
            degree = " in ".join(p for p in (edu.degree, edu.field) if p)
            line = " | ".join(p for p in (edu.school, degree, edu.graduation_date) if p)
            doc.add_paragraph(line)

    return _to_bytes(doc)
