"""Pydantic model for a job posting captured outside the core."""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator


class JobPosting(BaseModel):
    """Read-only job record. Missing or malformed optional data never raises."""

    id: str | None = None
    title: str = ""
    company_name: str = ""
    description: str = ""
    required_skills: list[str] = Field(default_factory=list)
    preferred_skills: list[str] = Field(default_factory=list)
    required_experience_years: float | None = None
    location: str = ""
    salary_range: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value):
        return None if value is None else str(value)

    @field_validator("title", "company_name", "description", "location", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else str(value)

    @field_validator("required_skills", "preferred_skills", mode="before")
    @classmethod
    def _split_skills(cls, value):
        # browser capture stores skills as one comma-separated string
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        elif not isinstance(value, (list, tuple, set)):
            # scalars from malformed records carry no usable skill list
            return []
        return [str(s).strip() for s in value if s is not None and str(s).strip()]

    @field_validator("required_experience_years", mode="before")
    @classmethod
    def _parse_years(cls, value):
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value) if value > 0 else None
        match = re.search(r"\d+(?:\.\d+)?", str(value))
        if not match:
            return None
        years = float(match.group(0))
        return years if years > 0 else None

    @field_validator("salary_range", mode="before")
    @classmethod
    def _salary_as_string(cls, value):
        if value is None or value == "":
            return None
        return str(value)
