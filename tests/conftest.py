"""Shared test fixtures."""

from __future__ import annotations

from io import BytesIO
from unittest.mock import AsyncMock

import pytest
from docx import Document

from resume_studio.clients.llm_client import LLMClient, LLMResponse
from resume_studio.models.job import JobPosting
from resume_studio.models.resume import (
    BulletPoint,
    ContactInfo,
    Section,
    SectionKind,
    SourceFormat,
    StructuredResume,
    WorkExperience,
)


def build_docx(paragraphs: list[tuple[str, str | None]]) -> bytes:
    """Create DOCX bytes from (text, style) pairs; style None means Normal."""
    doc = Document()
    for text, style in paragraphs:
        if style and style.startswith("Heading "):
            doc.add_heading(text, level=int(style.split()[-1]))
        else:
            doc.add_paragraph(text, style=style)
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


SAMPLE_DOCX_PARAGRAPHS: list[tuple[str, str | None]] = [
    ("Jane Doe", "Title"),
    ("jane.doe@example.com | (555) 123-4567 | linkedin.com/in/janedoe", None),
    ("Summary", "Heading 1"),
    ("Backend engineer focused on Python services and cloud infrastructure.", None),
    ("Experience", "Heading 1"),
    ("Senior Software Engineer", None),
    ("Acme Corp | Jan 2020 - Present", None),
    ("Managed team of 5 developers", "List Bullet"),
    ("Built REST APIs in Python and Django", "List Bullet"),
    ("Software Engineer", None),
    ("Globex | Jun 2016 - Dec 2019", None),
    ("Maintained PostgreSQL reporting pipelines", "List Bullet"),
    ("Education", "Heading 1"),
    ("State University | B.S. in Computer Science | 2016", None),
    ("Skills", "Heading 1"),
    ("Python, Django, PostgreSQL, Docker, AWS", None),
]


@pytest.fixture
def make_docx():
    return build_docx


@pytest.fixture
def sample_docx_bytes() -> bytes:
    return build_docx(SAMPLE_DOCX_PARAGRAPHS)


@pytest.fixture
def sample_resume_text() -> str:
    return """Jane Doe
jane.doe@example.com | (555) 123-4567

SUMMARY
Backend engineer focused on Python services and cloud infrastructure.

EXPERIENCE
Senior Software Engineer
Acme Corp | Jan 2020 - Present
- Managed team of 5 developers
- Built REST APIs in Python and Django

Software Engineer
Globex | Jun 2016 - Dec 2019
- Maintained PostgreSQL reporting pipelines

EDUCATION
State University | B.S. in Computer Science | 2016

SKILLS
Python, Django, PostgreSQL, Docker, AWS
"""


@pytest.fixture
def sample_resume() -> StructuredResume:
    bullets = [
        "Managed team of 5 developers",
        "Built REST APIs in Python and Django",
        "Maintained PostgreSQL reporting pipelines",
    ]
    return StructuredResume(
        full_text="Jane Doe\njane.doe@example.com\nExperience\n" + "\n".join(bullets),
        sections=[
            Section(kind=SectionKind.HEADER, content="Jane Doe\njane.doe@example.com"),
            Section(
                kind=SectionKind.EXPERIENCE,
                title="Experience",
                content="\n".join(bullets),
                items=[BulletPoint(text=b) for b in bullets],
            ),
        ],
        work_experiences=[
            WorkExperience(
                company="Acme Corp",
                title="Senior Software Engineer",
                start_date="Jan 2020",
                is_current=True,
                bullet_points=bullets[:2],
            ),
            WorkExperience(
                company="Globex",
                title="Software Engineer",
                start_date="Jun 2016",
                end_date="Dec 2019",
                bullet_points=bullets[2:],
            ),
        ],
        skills=["python", "django", "postgresql"],
        contact=ContactInfo(email="jane.doe@example.com"),
        source_format=SourceFormat.TEXT,
        current_title="Senior Software Engineer",
        years_of_experience=9.0,
    )


@pytest.fixture
def sample_job() -> JobPosting:
    return JobPosting(
        id="job-42",
        title="Backend Engineer",
        company_name="Initech",
        description=(
            "Initech is hiring a backend engineer to build Python services. "
            "You will design APIs, operate PostgreSQL databases and deploy to AWS "
            "with Docker and Kubernetes."
        ),
        required_skills=["Python", "PostgreSQL"],
        preferred_skills=["Kubernetes"],
        required_experience_years=5,
        location="Austin, TX",
    )


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    )
    client.generate_json = AsyncMock(return_value={})
    return client
