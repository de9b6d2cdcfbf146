"""Format-specific readers that flatten a document into SourceParagraphs.

Only the DOCX reader can see formatting; PDF and plain text yield bare lines.
"""

from __future__ import annotations

import logging
import re
import zipfile
from dataclasses import dataclass
from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.opc.exceptions import PackageNotFoundError
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph
from lxml import etree

from resume_studio.exceptions import CorruptDocument
from resume_studio.models.resume import Formatting

logger = logging.getLogger(__name__)

# Shared emoji pattern for Google Docs / LLM output cleanup
EMOJI_PATTERN = (
    r"[\U0001f4e7\U0001f4de\U0001f4cd\U0001f4bc\U0001f4c5\U0001f393"
    r"\U0001f3e2\U0001f4dd\U0001f4c4\U0001f517\U0001f310\U0001f4f1"
    r"☎✉✆✂]\s*"
)

_ALIGNMENTS = {
    WD_ALIGN_PARAGRAPH.CENTER: "center",
    WD_ALIGN_PARAGRAPH.RIGHT: "right",
    WD_ALIGN_PARAGRAPH.JUSTIFY: "justify",
}


@dataclass(frozen=True)
class SourceParagraph:
    """One paragraph (DOCX) or line (PDF/text) of the source document."""

    text: str
    formatting: Formatting | None = None
    list_kind: str | None = None  # "ordered" | "unordered"
    list_level: int = 0
    heading_level: int | None = None
    indented: bool = False


# ---------------------------------------------------------------------------
# DOCX
# ---------------------------------------------------------------------------


def read_docx(data: bytes) -> list[SourceParagraph]:
    """Read body paragraphs (tables included, in order) with formatting.

    Page-header text is put first so contact details kept there are seen.
    """
    try:
        doc = Document(BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError, etree.XMLSyntaxError) as e:
        raise CorruptDocument(f"Cannot open office document: {e}", "docx") from e

    numbering = _numbering_formats(doc)
    paragraphs: list[SourceParagraph] = []

    seen_header_text: set[str] = set()
    for section in doc.sections:
        for para in section.header.paragraphs:
            text = para.text.strip()
            if text and text not in seen_header_text:
                seen_header_text.add(text)
                paragraphs.append(SourceParagraph(text=text))

    for para in _iter_body_paragraphs(doc):
        if not para.text.strip():
            continue
        try:
            paragraphs.append(_describe_paragraph(para, numbering))
        except (AttributeError, ValueError, TypeError):
            # keep the text even when its properties are unreadable
            logger.debug("Unreadable paragraph properties, keeping text only", exc_info=True)
            paragraphs.append(SourceParagraph(text=para.text.strip()))
    return paragraphs


def _iter_body_paragraphs(doc):
    for child in doc.element.body.iterchildren():
        if child.tag == qn("w:p"):
            yield Paragraph(child, doc)
        elif child.tag == qn("w:tbl"):
            table = Table(child, doc)
            for row in table.rows:
                seen_cells: set[int] = set()
                for cell in row.cells:
                    if id(cell._tc) in seen_cells:
                        continue
                    seen_cells.add(id(cell._tc))
                    yield from cell.paragraphs


def _describe_paragraph(para: Paragraph, numbering: dict) -> SourceParagraph:
    text = para.text.strip()
    style = para.style
    style_name = style.name if style is not None else ""

    list_kind, list_level = _list_kind(para, style_name, numbering)
    heading_level = None
    heading_match = re.match(r"Heading (\d)", style_name)
    if heading_match:
        heading_level = int(heading_match.group(1))
    elif style_name == "Title":
        heading_level = 1

    left_indent = para.paragraph_format.left_indent
    return SourceParagraph(
        text=text,
        formatting=_paragraph_formatting(para),
        list_kind=list_kind,
        list_level=list_level,
        heading_level=heading_level,
        indented=bool(left_indent and left_indent > 0),
    )


def _paragraph_formatting(para: Paragraph) -> Formatting:
    style_font = para.style.font if para.style is not None else None
    runs = [r for r in para.runs if r.text.strip()]

    def effective(run, attr: str):
        value = getattr(run, attr)
        if value is None and style_font is not None:
            value = getattr(style_font, attr)
        return bool(value)

    bold = bool(runs) and all(effective(r, "bold") for r in runs)
    italic = bool(runs) and all(effective(r, "italic") for r in runs)

    size = None
    family = None
    for run in runs:
        if size is None and run.font.size is not None:
            size = run.font.size.pt
        if family is None and run.font.name:
            family = run.font.name
    if style_font is not None:
        if size is None and style_font.size is not None:
            size = style_font.size.pt
        family = family or style_font.name

    alignment = para.alignment
    if alignment is None and para.style is not None:
        alignment = para.style.paragraph_format.alignment

    return Formatting(
        bold=bold,
        italic=italic,
        font_size_pt=size,
        font_family=family,
        alignment=_ALIGNMENTS.get(alignment, "left"),
    )


def _list_kind(para: Paragraph, style_name: str, numbering: dict) -> tuple[str | None, int]:
    p_pr = para._p.pPr
    num_pr = p_pr.numPr if p_pr is not None else None
    if num_pr is not None and num_pr.numId is not None:
        num_id = num_pr.numId.val
        level = num_pr.ilvl.val if num_pr.ilvl is not None else 0
        if num_id == 0:  # numbering explicitly removed
            return None, 0
        fmt = numbering.get((num_id, level), "bullet")
        return ("unordered" if fmt == "bullet" else "ordered"), level

    if style_name.startswith("List Bullet"):
        return "unordered", 0
    if style_name.startswith("List Number"):
        return "ordered", 0
    return None, 0


def _numbering_formats(doc) -> dict[tuple[int, int], str]:
    """Map (numId, ilvl) to the w:numFmt value from the numbering part."""
    try:
        numbering_el = doc.part.numbering_part.element
    except (KeyError, NotImplementedError):
        return {}

    formats: dict[tuple[int, int], str] = {}
    for num in numbering_el.findall(qn("w:num")):
        abstract_ref = num.find(qn("w:abstractNumId"))
        if abstract_ref is None:
            continue
        num_id = int(num.get(qn("w:numId")))
        abstract_id = abstract_ref.get(qn("w:val"))
        for lvl in numbering_el.xpath(
            f'./w:abstractNum[@w:abstractNumId="{abstract_id}"]/w:lvl'
        ):
            fmt = lvl.find(qn("w:numFmt"))
            level = int(lvl.get(qn("w:ilvl"), "0"))
            formats[(num_id, level)] = fmt.get(qn("w:val")) if fmt is not None else "bullet"
    return formats


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------


def read_pdf(data: bytes) -> list[SourceParagraph]:
    """One SourceParagraph per non-empty text line, pages in order."""
    import fitz  # pymupdf

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise CorruptDocument(f"Cannot open PDF: {e}", "pdf") from e

    paragraphs: list[SourceParagraph] = []
    try:
        for page in doc:
            for line in page.get_text().splitlines():
                if line.strip():
                    paragraphs.append(SourceParagraph(text=line.strip()))
    finally:
        doc.close()
    return paragraphs


# ---------------------------------------------------------------------------
# Plain text / markdown
# ---------------------------------------------------------------------------


def read_text(raw: str) -> list[SourceParagraph]:
    """Lines of a cleaned text or markdown résumé; '#' headings keep their level."""
    paragraphs: list[SourceParagraph] = []
    for line in clean_markdown(raw).splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        heading = re.match(r"^(#{1,6})\s+(.*)$", stripped)
        if heading:
            paragraphs.append(
                SourceParagraph(text=heading.group(2).strip(), heading_level=len(heading.group(1)))
            )
            continue
        paragraphs.append(SourceParagraph(text=stripped, indented=line != line.lstrip()))
    return paragraphs


def clean_markdown(text: str) -> str:
    """Clean Google Docs markdown export artifacts.

    Handles: unicode artifacts, emoji icons, excessive whitespace,
    inconsistent bullet styles, and trailing whitespace.
    """
    text = text.lstrip("﻿")
    text = re.sub(r"[​‌‍­⁠﻿]", "", text)
    text = re.sub(EMOJI_PATTERN, "", text)

    # ●, •, ◦, ◆, ■, ▪, ★, ○ -> "- "
    text = re.sub(r"^(\s*)[●•◦◆■▪★○]\s*", r"\1- ", text, flags=re.MULTILINE)
    text = re.sub(r"^(\s*)\*\s{2,}", r"\1- ", text, flags=re.MULTILINE)

    cleaned_lines = []
    for line in text.splitlines():
        stripped = line.lstrip()
        indent = " " * len(line[: len(line) - len(stripped)].replace("\t", "    "))
        stripped = re.sub(r"[ \t]{2,}", " ", stripped).rstrip()
        cleaned_lines.append(f"{indent}{stripped}" if stripped else "")
    text = "\n".join(cleaned_lines)

    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
