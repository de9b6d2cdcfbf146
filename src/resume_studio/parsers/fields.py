"""Field extractors: contact details, education entries, years and title."""

from __future__ import annotations

import re
from datetime import date

from resume_studio.models.resume import ContactInfo, Education, WorkExperience
from resume_studio.parsers.segmenter import TITLE_WORDS, find_date_range

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_PATTERN = re.compile(r"(?<!\d)(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)")
LINKEDIN_PATTERN = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/in/[\w-]+/?", re.IGNORECASE)
WEBSITE_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?[a-z0-9-]+(?:\.[a-z0-9-]+)*"
    r"\.(?:com|io|dev|net|org|me|co|app|tech|ai|site)(?:/[\w./-]*)?\b",
    re.IGNORECASE,
)

_SCHOOL_WORDS = re.compile(
    r"\b(?:university|college|institute|school|academy|polytechnic|universidad|université)\b",
    re.IGNORECASE,
)
_DEGREE_WORDS = re.compile(
    r"\b(?:bachelor(?:'s)?|master(?:'s)?|associate(?:'s)?|doctor(?:ate)?|diploma|mba"
    r"|ph\.?\s?d\.?|b\.?\s?s\.?|b\.?\s?a\.?|m\.?\s?s\.?|m\.?\s?a\.?|b\.?\s?sc\.?|m\.?\s?sc\.?"
    r"|b\.?\s?eng\.?|m\.?\s?eng\.?|b\.?\s?tech|m\.?\s?tech|certificate)(?=\W|$)",
    re.IGNORECASE,
)
_FIELD_IN = re.compile(r"\bin\s+(?P<field>[A-Za-z&/ ]{3,60})$", re.IGNORECASE)
_FIELD_AFTER_DEGREE = re.compile(r"\bof\s+(?P<field>[A-Za-z&/ ]{3,60})$", re.IGNORECASE)
_GPA = re.compile(r"\bGPA\b[:\s]*(?P<gpa>[0-4]\.\d{1,2})(?:\s*/\s*4\.0+)?", re.IGNORECASE)
_YEAR = re.compile(r"\b(?:19|20)\d{2}\b")
_PART_SPLIT = re.compile(r"\s*(?:\||·|•|\t|\s[–—-]\s|,)\s*")
_STATE_CODE = re.compile(r"^[A-Z]{2}$")
_EXPLICIT_YEARS = re.compile(
    r"(?P<years>\d{1,2}(?:\.\d)?)\+?\s*(?:years?|yrs?)\s+(?:of\s+)?"
    r"(?:[a-z-]+\s+){0,2}experience",
    re.IGNORECASE,
)
_MONTHS = {
    m: i for i, m in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"), start=1,
    )
}


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------


def extract_contact(header_text: str, full_text: str) -> ContactInfo:
    """Regex scan for contact fields, header section first, then the full text."""

    def first(pattern: re.Pattern, exclude: re.Pattern | None = None) -> str | None:
        for text in (header_text, full_text):
            if exclude is not None:
                text = exclude.sub(" ", text)
            match = pattern.search(text)
            if match:
                return match.group(0).strip().rstrip("/.")
        return None

    not_website = re.compile(rf"{EMAIL_PATTERN.pattern}|{LINKEDIN_PATTERN.pattern}", re.IGNORECASE)
    return ContactInfo(
        email=first(EMAIL_PATTERN),
        phone=first(PHONE_PATTERN),
        linkedin=first(LINKEDIN_PATTERN),
        website=first(WEBSITE_PATTERN, exclude=not_website),
    )


# ---------------------------------------------------------------------------
# Education
# ---------------------------------------------------------------------------


def extract_education(lines: list[str]) -> list[Education]:
    """Build education entries from the education section's lines.

    A part naming a school opens an entry; degree, field, year and GPA parts
    attach to the entry being built.
    """
    entries: list[dict] = []
    current: dict | None = None

    for line in lines:
        gpa_match = _GPA.search(line)
        line_wo_gpa = _GPA.sub(" ", line)
        dates = find_date_range(line_wo_gpa)
        years = _YEAR.findall(line_wo_gpa)

        for part in _PART_SPLIT.split(line_wo_gpa):
            part = part.strip(" ()")
            if not part or _STATE_CODE.match(part) or _YEAR.fullmatch(part):
                continue
            if _SCHOOL_WORDS.search(part):
                if current is None or current.get("school"):
                    current = {}
                    entries.append(current)
                current["school"] = part
            elif _DEGREE_WORDS.search(part):
                if current is None or current.get("degree"):
                    current = {}
                    entries.append(current)
                degree, field = _split_degree(part)
                current["degree"] = degree
                if field:
                    current["field"] = field
            elif current is not None and "school" in current and "location" not in current:
                if re.match(r"^[A-Z][A-Za-z .'-]+$", part) and len(part.split()) <= 3 and not find_date_range(part):
                    current["location"] = part

        if current is None:
            continue
        if dates is not None:
            current["graduation_date"] = dates.end or dates.start
        elif years:
            current["graduation_date"] = years[-1]
        if gpa_match:
            current["gpa"] = gpa_match.group("gpa")

    return [
        Education(
            school=e.get("school", ""),
            degree=e.get("degree", ""),
            field=e.get("field"),
            graduation_date=e.get("graduation_date"),
            gpa=e.get("gpa"),
            location=e.get("location"),
        )
        for e in entries
        if e.get("school") or e.get("degree")
    ]


def _split_degree(part: str) -> tuple[str, str | None]:
    # "Bachelor of Science in Computer Science": the field follows "in"
    match = _FIELD_IN.search(part) or _FIELD_AFTER_DEGREE.search(part)
    if match:
        return part[: match.start()].strip(), match.group("field").strip()
    degree = _DEGREE_WORDS.search(part)
    rest = part[degree.end():].strip(" .,") if degree else ""
    # "B.S. Computer Science"
    if degree and rest and degree.start() == 0:
        return part[: degree.end()].strip(), rest
    return part.strip(), None


# ---------------------------------------------------------------------------
# Years of experience and current title
# ---------------------------------------------------------------------------


def estimate_years_of_experience(
    full_text: str,
    experiences: list[WorkExperience],
    today: date | None = None,
) -> float | None:
    """An explicit "N years of experience" phrase, else the span of all entries."""
    match = _EXPLICIT_YEARS.search(full_text)
    if match:
        return float(match.group("years"))

    today = today or date.today()
    starts: list[int] = []
    ends: list[int] = []
    for exp in experiences:
        start = _month_index(exp.start_date)
        if start is None:
            continue
        end = today.year * 12 + today.month - 1 if exp.is_current else _month_index(exp.end_date)
        starts.append(start)
        ends.append(end if end is not None else start)
    if not starts:
        return None
    months = max(ends) - min(starts)
    return round(max(months, 0) / 12, 1)


def _month_index(value: str | None) -> int | None:
    if not value:
        return None
    year = _YEAR.search(value)
    if not year:
        return None
    month = 1
    lowered = value.lower()
    slash = re.match(r"(\d{1,2})/", lowered)
    if slash:
        month = min(max(int(slash.group(1)), 1), 12)
    else:
        for prefix, number in _MONTHS.items():
            if lowered.startswith(prefix):
                month = number
                break
    return int(year.group(0)) * 12 + month - 1


def infer_current_title(experiences: list[WorkExperience], header_lines: list[str]) -> str | None:
    """The first entry's title, else a title-looking line under the name."""
    for exp in experiences:
        if exp.title:
            return exp.title
    for line in header_lines[1:4]:
        if TITLE_WORDS.search(line) and not re.search(r"[@\d]", line) and len(line) <= 60:
            return line.strip()
    return None
