"""Tests for section classification, segmentation and experience grouping."""

from __future__ import annotations

import pytest

from resume_studio.models.resume import Formatting, SectionKind
from resume_studio.parsers.readers import SourceParagraph, read_text
from resume_studio.parsers.segmenter import (
    classify_header,
    find_date_range,
    group_experience_entries,
    segment_sections,
    split_inline_header,
    strip_bullet_marker,
)


def _p(text: str, **kwargs) -> SourceParagraph:
    return SourceParagraph(text=text, **kwargs)


class TestClassifyHeader:
    @pytest.mark.parametrize(
        "text, kind",
        [
            ("Work Experience", SectionKind.EXPERIENCE),
            ("EDUCATION", SectionKind.EDUCATION),
            ("Technical Skills:", SectionKind.SKILLS),
            ("Professional Summary", SectionKind.SUMMARY),
            ("Licenses & Certifications", SectionKind.CERTIFICATIONS),
            ("Projects", SectionKind.OTHER),
        ],
    )
    def test_keyword_headings(self, text, kind):
        assert classify_header(_p(text)) == kind

    def test_contained_keyword_needs_cue(self):
        assert classify_header(_p("Relevant Industry Experience")) is None
        assert classify_header(_p("RELEVANT INDUSTRY EXPERIENCE")) == SectionKind.EXPERIENCE
        assert classify_header(
            _p("Relevant Industry Experience", formatting=Formatting(bold=True))
        ) == SectionKind.EXPERIENCE

    def test_body_text_is_not_a_heading(self):
        assert classify_header(_p("I have experience with teams")) is None
        assert classify_header(_p("Led the skills assessment program for new hires")) is None

    def test_bullets_are_never_headings(self):
        assert classify_header(_p("- Experience")) is None
        assert classify_header(_p("Experience", list_kind="unordered")) is None

    def test_date_lines_are_not_headings(self):
        assert classify_header(_p("EXPERIENCE 2019 - 2021")) is None


class TestSplitInlineHeader:
    def test_skills_inline(self):
        assert split_inline_header("Skills: Python, Go") == (SectionKind.SKILLS, "Python, Go")

    def test_other_labels_ignored(self):
        assert split_inline_header("Email: jane@example.com") is None
        assert split_inline_header("Education: State University") is None


class TestFindDateRange:
    def test_month_to_present(self):
        dates = find_date_range("Acme Corp | Jan 2020 - Present")
        assert dates.start == "Jan 2020"
        assert dates.end is None
        assert dates.is_current is True

    def test_years_only(self):
        dates = find_date_range("2018 – 2021")
        assert (dates.start, dates.end, dates.is_current) == ("2018", "2021", False)

    def test_numeric_months(self):
        dates = find_date_range("03/2019 to 11/2021")
        assert (dates.start, dates.end) == ("03/2019", "11/2021")

    def test_since(self):
        dates = find_date_range("Since March 2021")
        assert dates.start == "March 2021"
        assert dates.is_current is True

    def test_comma_in_date(self):
        dates = find_date_range("Sept, 2017 - June, 2019")
        assert (dates.start, dates.end) == ("Sept 2017", "June 2019")

    def test_no_range(self):
        assert find_date_range("Graduated 2016") is None
        assert find_date_range("Reduced costs by 20%") is None


class TestStripBulletMarker:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("• Led team", (True, "Led team")),
            ("- Led team", (True, "Led team")),
            ("1. Led team", (True, "Led team")),
            ("2020 was a good year", (False, "2020 was a good year")),
            ("-5% churn", (False, "-5% churn")),
        ],
    )
    def test_markers(self, text, expected):
        assert strip_bullet_marker(text) == expected


class TestSegmentSections:
    def test_header_then_sections(self):
        sections = segment_sections(read_text(
            "Jane Doe\njane@example.com\n\nEXPERIENCE\nAcme | 2019 - 2021\n- Did it\n\nSKILLS\nPython"
        ))
        assert [s.kind for s in sections] == [
            SectionKind.HEADER, SectionKind.EXPERIENCE, SectionKind.SKILLS,
        ]
        assert sections[0].content == "Jane Doe\njane@example.com"
        assert sections[1].title == "EXPERIENCE"

    def test_inline_skills_line_opens_section(self):
        sections = segment_sections(read_text("EDUCATION\nState University\nSkills: Python, SQL"))
        assert sections[-1].kind == SectionKind.SKILLS
        assert sections[-1].content == "Python, SQL"
        assert sections[-1].title == "Skills"

    def test_no_headings_is_one_header_section(self):
        sections = segment_sections(read_text("Jane Doe\nSome text"))
        assert len(sections) == 1
        assert sections[0].kind == SectionKind.HEADER


class TestGroupExperienceEntries:
    def test_title_line_then_company_date_line(self):
        entries = group_experience_entries(read_text(
            "Senior Software Engineer\nAcme Corp | Jan 2020 - Present\n"
            "- Managed team of 5 developers\n- Built REST APIs\n"
            "Software Engineer\nGlobex | Jun 2016 - Dec 2019\n- Maintained pipelines"
        ))
        assert len(entries) == 2
        first, bullets = entries[0]
        assert first.title == "Senior Software Engineer"
        assert first.company == "Acme Corp"
        assert first.is_current is True
        assert first.bullet_points == ["Managed team of 5 developers", "Built REST APIs"]
        assert [b.text for b in bullets] == first.bullet_points
        second, _ = entries[1]
        assert (second.title, second.company) == ("Software Engineer", "Globex")
        assert (second.start_date, second.end_date) == ("Jun 2016", "Dec 2019")

    def test_single_line_header_with_location(self):
        entries = group_experience_entries(read_text(
            "Data Analyst, Initech | Austin, TX | 2018 - 2020\n• Built dashboards"
        ))
        exp, _ = entries[0]
        assert exp.title == "Data Analyst"
        assert exp.company == "Initech"
        assert exp.location == "Austin, TX"
        assert exp.bullet_points == ["Built dashboards"]

    def test_title_at_company(self):
        entries = group_experience_entries(read_text(
            "Product Manager at Hooli\n2015 - 2018\n- Shipped features"
        ))
        exp, _ = entries[0]
        assert (exp.title, exp.company) == ("Product Manager", "Hooli")

    def test_wrapped_bullet_lines_are_joined(self):
        entries = group_experience_entries(read_text(
            "Acme | 2019 - 2021\n- Reduced cloud spend by 30% across\nthree regions\n"
            "- Migrated services to\n    Kubernetes clusters"
        ))
        exp, _ = entries[0]
        assert exp.bullet_points == [
            "Reduced cloud spend by 30% across three regions",
            "Migrated services to Kubernetes clusters",
        ]

    def test_list_paragraphs_are_bullets(self):
        entries = group_experience_entries([
            _p("Engineer", formatting=Formatting()),
            _p("Acme | 2019 - 2021", formatting=Formatting()),
            _p("Wrote code", formatting=Formatting(), list_kind="unordered"),
            _p("Reviewed code", formatting=Formatting(), list_kind="unordered", list_level=1),
        ])
        exp, bullets = entries[0]
        assert exp.bullet_points == ["Wrote code", "Reviewed code"]
        assert bullets[1].level == 1

    def test_bullets_without_dates_make_undated_entry(self):
        entries = group_experience_entries(read_text("- Did one thing\n- Did another"))
        exp, _ = entries[0]
        assert exp.start_date is None
        assert exp.bullet_points == ["Did one thing", "Did another"]

    def test_empty_section(self):
        assert group_experience_entries([]) == []
