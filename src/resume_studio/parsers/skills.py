"""Skill detection: a lexicon scan of the whole text plus the skills section."""

from __future__ import annotations

import re

SKILL_LEXICON: dict[str, tuple[str, ...]] = {
    "languages": (
        "JavaScript", "TypeScript", "Python", "Java", "C++", "C#", "Ruby", "PHP",
        "Swift", "Kotlin", "Go", "Rust", "Scala", "Perl", "R",
    ),
    "web": (
        "React", "Angular", "Vue", "Node.js", "Express", "HTML", "CSS", "SASS",
        "LESS", "Tailwind", "Bootstrap", "jQuery", "Next.js", "Nuxt", "Gatsby",
    ),
    "backend": (
        "Django", "Flask", "FastAPI", "Spring", "Spring Boot", ".NET", "ASP.NET",
        "Laravel", "Rails", "Sinatra",
    ),
    "databases": (
        "SQL", "PostgreSQL", "MySQL", "MongoDB", "Redis", "DynamoDB", "Cassandra",
        "Oracle", "SQLite", "MariaDB", "Elasticsearch",
    ),
    "cloud": (
        "AWS", "Azure", "GCP", "Google Cloud", "Docker", "Kubernetes", "Jenkins",
        "CI/CD", "Git", "GitHub", "GitLab", "Terraform", "Ansible", "Chef", "Puppet",
    ),
    "testing": (
        "Jest", "Mocha", "Cypress", "Selenium", "JUnit", "PyTest",
        "Unit Testing", "Integration Testing", "TDD",
    ),
    "design": ("Figma", "Sketch", "Adobe XD", "Photoshop", "Illustrator", "InDesign"),
    "data": (
        "Excel", "Tableau", "Power BI", "Data Analysis", "Data Visualization",
        "Pandas", "NumPy", "SciPy",
    ),
    "methodologies": ("Agile", "Scrum", "Kanban", "Waterfall", "DevOps", "JIRA", "Confluence"),
    "apis": ("REST", "GraphQL", "SOAP", "Microservices", "WebSocket"),
    "soft": (
        "Leadership", "Communication", "Problem Solving", "Teamwork",
        "Project Management", "Time Management", "Critical Thinking",
    ),
}

_CATEGORY_LINE = re.compile(r"^([^:]{1,60}):\s*(.+)$")
_SPLIT = re.compile(r"\s*(?:[,;|•●▪·]|\s/\s)\s*")
_NOISE = re.compile(r"^(?:and|or|&|etc\.?|\d+)$", re.IGNORECASE)


def _lexicon_pattern(skill: str) -> re.Pattern:
    escaped = re.escape(skill)
    body = rf"(?<![\w+#.]){escaped}(?![\w+#])"
    # "R", "Go", "C#" would match ordinary words when case-folded
    flags = 0 if len(skill) <= 2 else re.IGNORECASE
    return re.compile(body, flags)


_LEXICON_PATTERNS = [
    (skill, _lexicon_pattern(skill))
    for skills in SKILL_LEXICON.values()
    for skill in skills
]


def scan_lexicon(text: str) -> list[str]:
    """Lexicon skills found in ``text``, lower-cased, in lexicon order."""
    return [skill.lower() for skill, pattern in _LEXICON_PATTERNS if pattern.search(text)]


def split_skills_section(lines: list[str]) -> list[str]:
    """Split skills-section lines ("Languages: Python, Go" or "Python, Go") into skills."""
    found: list[str] = []
    for line in lines:
        text = line.strip()
        if not text:
            continue
        match = _CATEGORY_LINE.match(text)
        if match:
            text = match.group(2)
        elif len(text) > 200:
            continue
        for part in _SPLIT.split(text):
            part = part.strip(" .\t")
            if part and len(part) < 60 and not _NOISE.match(part):
                found.append(part.lower())
    return found


def merge_skills(*sources: list[str]) -> list[str]:
    """Union several skill lists, first occurrence wins, case-insensitive."""
    seen: set[str] = set()
    merged: list[str] = []
    for source in sources:
        for skill in source:
            key = skill.strip().lower()
            if key and key not in seen:
                seen.add(key)
                merged.append(key)
    return merged
