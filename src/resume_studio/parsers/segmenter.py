"""Section segmentation and experience-entry grouping.

Each classifier pass is a separate function so it can be tested on its own:

- ``classify_header``: is this paragraph a section heading, and of which kind
- ``find_date_range``: does this line carry an employment date range
- ``strip_bullet_marker``: is this line a bullet, and what is its text

``segment_sections`` and ``group_experience_entries`` combine them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from resume_studio.models.resume import BulletPoint, Formatting, SectionKind, WorkExperience
from resume_studio.parsers.readers import SourceParagraph

SECTION_KEYWORDS: dict[SectionKind, tuple[str, ...]] = {
    SectionKind.EXPERIENCE: (
        "experience", "work experience", "professional experience", "relevant experience",
        "employment", "employment history", "work history", "career history",
        "professional background",
    ),
    SectionKind.EDUCATION: (
        "education", "academic background", "academics", "education and training",
    ),
    SectionKind.SKILLS: (
        "skills", "technical skills", "core skills", "key skills", "core competencies",
        "competencies", "technologies", "tech stack", "skills and tools", "tools",
    ),
    SectionKind.SUMMARY: (
        "summary", "professional summary", "career summary", "profile",
        "professional profile", "about me", "about", "objective", "career objective",
    ),
    SectionKind.CERTIFICATIONS: (
        "certifications", "certification", "certificates", "licenses",
        "licenses and certifications", "certifications and licenses",
    ),
    SectionKind.OTHER: (
        "projects", "personal projects", "publications", "volunteer", "volunteering",
        "volunteer experience", "awards", "honors", "honors and awards", "languages",
        "interests", "activities", "references", "achievements", "leadership",
    ),
}

_KEYWORD_TO_KIND = {
    keyword: kind for kind, keywords in SECTION_KEYWORDS.items() for keyword in keywords
}

_MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?"
)
_YEAR = r"(?:19|20)\d{2}"
_DATE = rf"(?:{_MONTH}\s*,?\s*{_YEAR}|\d{{1,2}}/{_YEAR}|{_YEAR})"
_CURRENT = r"(?:present|current|now|today|ongoing)"
_DATE_RANGE = re.compile(
    rf"(?P<start>{_DATE})\s*(?:-|–|—|to|until|through)\s*(?P<end>{_DATE}|{_CURRENT})\b",
    re.IGNORECASE,
)
_SINCE = re.compile(rf"\b(?:since|from)\s+(?P<start>{_DATE})\b", re.IGNORECASE)
_DATE_THEN_CURRENT = re.compile(rf"(?P<start>{_DATE})\b.*?\b(?P<end>{_CURRENT})\b", re.IGNORECASE)

_BULLET = re.compile(r"^\s*(?:[•●○◦■□▪▫‣⁃➢►▸✓❖]\s*|[-*–]\s+|\d{1,2}[.)]\s+)")

TITLE_WORDS = re.compile(
    r"\b(?:engineer|developer|programmer|manager|analyst|designer|director|lead|intern"
    r"|consultant|specialist|architect|scientist|administrator|coordinator|associate"
    r"|officer|head|vp|president|founder|assistant|executive|representative|technician"
    r"|teacher|researcher|owner|supervisor|advisor|strategist|writer|editor|accountant)\b",
    re.IGNORECASE,
)
_TITLE_AT_COMPANY = re.compile(r"^(?P<title>.+?)\s+(?:at|@)\s+(?P<company>.+)$")
_LOCATION = re.compile(r"^(?:[A-Z][A-Za-z.' -]+,\s*(?:[A-Z]{2}|[A-Z][a-z]+)|remote|hybrid)$", re.IGNORECASE)
_PART_SPLIT = re.compile(r"\s*(?:\||·|•|\t|\s[–—-]\s)\s*")
_CONNECTORS = {"and", "or", "to", "of", "the", "with", "for", "in", "on", "by", "a", "an", "across"}


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str | None
    is_current: bool
    span: tuple[int, int]


@dataclass
class SegmentedSection:
    kind: SectionKind
    title: str | None = None
    formatting: Formatting | None = None
    paragraphs: list[SourceParagraph] = field(default_factory=list)

    @property
    def content(self) -> str:
        return "\n".join(p.text for p in self.paragraphs)


GroupedEntry = tuple[WorkExperience, list[BulletPoint]]


# ---------------------------------------------------------------------------
# Classifier passes
# ---------------------------------------------------------------------------


def _normalize_heading(text: str) -> str:
    text = text.strip().rstrip(":").replace("&", " and ").lower()
    text = re.sub(r"[^a-z ]", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def _has_heading_cue(paragraph: SourceParagraph) -> bool:
    text = paragraph.text.strip()
    if paragraph.heading_level is not None:
        return True
    if text.endswith(":"):
        return True
    letters = [c for c in text if c.isalpha()]
    if letters and text.upper() == text:
        return True
    return bool(paragraph.formatting and paragraph.formatting.bold)


def classify_header(paragraph: SourceParagraph) -> SectionKind | None:
    """Return the section kind this paragraph opens, or None for body text.

    A short line equal to a keyword is always a heading; a line that merely
    contains one needs a formatting cue (heading style, all caps, bold or a
    trailing colon). Bullets and list paragraphs are never headings.
    """
    text = paragraph.text.strip()
    if not text or paragraph.list_kind or _BULLET.match(text):
        return None
    if len(text) > 50 or len(text.split()) > 5 or find_date_range(text):
        return None

    normalized = _normalize_heading(text)
    if normalized in _KEYWORD_TO_KIND:
        return _KEYWORD_TO_KIND[normalized]

    if not _has_heading_cue(paragraph):
        return None
    for kind, keywords in SECTION_KEYWORDS.items():
        for keyword in keywords:
            if re.search(rf"\b{keyword}\b", normalized):
                return kind
    return None


def split_inline_header(text: str) -> tuple[SectionKind, str] | None:
    """Split "Skills: Python, Go" into (SKILLS, "Python, Go")."""
    match = re.match(r"^([A-Za-z &]{3,40}):\s*(\S.*)$", text.strip())
    if not match:
        return None
    kind = _KEYWORD_TO_KIND.get(_normalize_heading(match.group(1)))
    if kind not in (SectionKind.SKILLS, SectionKind.SUMMARY):
        return None
    return kind, match.group(2).strip()


def find_date_range(text: str) -> DateRange | None:
    """Find an employment date range such as "Jan 2020 - Present" or "2018 – 2021"."""
    match = _DATE_RANGE.search(text)
    if match is None:
        match = _DATE_THEN_CURRENT.search(text) or _SINCE.search(text)
        if match is None:
            return None
        return DateRange(start=_tidy_date(match.group("start")), end=None, is_current=True, span=match.span())

    end = match.group("end")
    is_current = re.fullmatch(_CURRENT, end, re.IGNORECASE) is not None
    return DateRange(
        start=_tidy_date(match.group("start")),
        end=None if is_current else _tidy_date(end),
        is_current=is_current,
        span=match.span(),
    )


def _tidy_date(value: str) -> str:
    return re.sub(r"\s+", " ", value.replace(",", " ")).strip()


def strip_bullet_marker(text: str) -> tuple[bool, str]:
    """Return (is_bullet, text without its leading marker)."""
    match = _BULLET.match(text)
    if match is None:
        return False, text.strip()
    return True, text[match.end():].strip()


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------


def segment_sections(paragraphs: list[SourceParagraph]) -> list[SegmentedSection]:
    """Split paragraphs into sections; the leading unmatched block is the header."""
    sections: list[SegmentedSection] = []
    current = SegmentedSection(kind=SectionKind.HEADER)

    for paragraph in paragraphs:
        kind = classify_header(paragraph)
        if kind is not None:
            if current.paragraphs or current.kind != SectionKind.HEADER:
                sections.append(current)
            current = SegmentedSection(
                kind=kind, title=paragraph.text.strip().rstrip(":"), formatting=paragraph.formatting,
            )
            continue

        inline = split_inline_header(paragraph.text)
        if inline is not None and inline[0] != current.kind:
            if current.paragraphs or current.kind != SectionKind.HEADER:
                sections.append(current)
            title = paragraph.text.split(":", 1)[0].strip()
            current = SegmentedSection(kind=inline[0], title=title, formatting=paragraph.formatting)
            current.paragraphs.append(SourceParagraph(text=inline[1], formatting=paragraph.formatting))
            continue

        current.paragraphs.append(paragraph)

    if current.paragraphs or current.kind != SectionKind.HEADER:
        sections.append(current)
    return sections


# ---------------------------------------------------------------------------
# Experience entries
# ---------------------------------------------------------------------------


@dataclass
class _EntryDraft:
    header_lines: list[str] = field(default_factory=list)
    dates: DateRange | None = None
    bullets: list[BulletPoint] = field(default_factory=list)


def group_experience_entries(paragraphs: list[SourceParagraph]) -> list[GroupedEntry]:
    """Group an experience section's paragraphs into entries with bullets.

    A line carrying a date range opens an entry; the non-bullet lines right
    before it (since the previous entry's bullets) and right after it hold
    title, company and location. Bullet-marked, list or indented lines are
    bullets. In line-based sources (no formatting), a wrapped line continues
    the previous bullet.
    """
    drafts: list[_EntryDraft] = []
    current: _EntryDraft | None = None
    pending: list[SourceParagraph] = []

    for paragraph in paragraphs:
        text = paragraph.text.strip()
        if not text:
            continue
        marked, bullet_text = strip_bullet_marker(text)
        dates = None if marked or paragraph.list_kind else find_date_range(text)

        if dates is not None:
            # lines since the last bullet belong to the new entry unless they wrap it
            header = _flush_pending(current, pending)
            current = _EntryDraft(dates=dates)
            remainder = (text[: dates.span[0]] + " " + text[dates.span[1]:]).strip(" |,–—-·\t()")
            current.header_lines = header + ([remainder] if remainder else [])
            drafts.append(current)
            continue

        if (
            paragraph.indented
            and not marked
            and paragraph.formatting is None
            and current is not None
            and current.bullets
            and not pending
            and _continues(current.bullets[-1].text, text)
        ):
            last = current.bullets[-1]
            current.bullets[-1] = last.model_copy(update={"text": f"{last.text} {text}"})
            continue

        is_bullet = marked or paragraph.list_kind is not None or (
            paragraph.indented
            and current is not None
            and bool(current.bullets or current.header_lines or pending)
        )
        if is_bullet:
            if current is None:
                current = _EntryDraft()
                drafts.append(current)
            if pending:
                leftover = _flush_pending(current, pending)
                # plain lines between bullets are sub-headings, not entry headers
                if not current.bullets:
                    current.header_lines.extend(leftover)
            current.bullets.append(
                BulletPoint(
                    text=bullet_text,
                    level=paragraph.list_level,
                    formatting=paragraph.formatting,
                )
            )
            continue

        pending.append(paragraph)

    if current is not None and pending:
        leftover = _flush_pending(current, pending)
        if not current.bullets:
            current.header_lines.extend(leftover)

    return [(_build_experience(d), d.bullets) for d in drafts]


def _flush_pending(current: _EntryDraft | None, pending: list[SourceParagraph]) -> list[str]:
    """Attach wrapped lines to the last bullet and return the rest. Empties ``pending``."""
    rest: list[str] = []
    for paragraph in pending:
        text = paragraph.text.strip()
        if (
            current is not None
            and current.bullets
            and not rest
            and paragraph.formatting is None
            and _continues(current.bullets[-1].text, text)
        ):
            last = current.bullets[-1]
            current.bullets[-1] = last.model_copy(update={"text": f"{last.text} {text}"})
            continue
        rest.append(text)
    pending.clear()
    return rest


def _continues(previous: str, line: str) -> bool:
    if not line or not previous:
        return False
    if line[0].islower() or line[0] in "(&%$0123456789":
        return True
    if previous.rstrip()[-1] in ",;/&(-":
        return True
    last_word = previous.rstrip().rsplit(" ", 1)[-1].lower()
    return last_word in _CONNECTORS


def _build_experience(draft: _EntryDraft) -> WorkExperience:
    title, company, location = _split_header_lines(draft.header_lines)
    dates = draft.dates
    return WorkExperience(
        company=company,
        title=title,
        start_date=dates.start if dates else None,
        end_date=dates.end if dates else None,
        is_current=dates.is_current if dates else False,
        location=location,
        bullet_points=[b.text for b in draft.bullets],
    )


def _split_header_lines(lines: list[str]) -> tuple[str, str, str | None]:
    parts: list[str] = []
    for line in lines:
        parts.extend(p.strip(" ,()") for p in _PART_SPLIT.split(line) if p.strip(" ,()"))

    location = None
    remaining: list[str] = []
    for part in parts:
        if location is None and _LOCATION.match(part) and not TITLE_WORDS.search(part):
            location = part
        else:
            remaining.append(part)

    for part in remaining:
        match = _TITLE_AT_COMPANY.match(part)
        if match:
            return match.group("title").strip(), match.group("company").strip(), location

    if len(remaining) == 1 and "," in remaining[0]:
        first, second = (s.strip() for s in remaining[0].split(",", 1))
        if TITLE_WORDS.search(second) and not TITLE_WORDS.search(first):
            return second, first, location
        return first, second, location

    titled = [p for p in remaining if TITLE_WORDS.search(p)]
    if titled:
        title = titled[0]
        company = next((p for p in remaining if p != title), "")
        return title, company, location
    if len(remaining) >= 2:
        return remaining[0], remaining[1], location
    if remaining:
        return "", remaining[0], location
    return "", "", location
