"""Pydantic models for the match score breakdown."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ScoreDetails(BaseModel):
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    experience_gap_description: str = ""
    title_similarity_description: str = ""
    keyword_matches: int = 0
    total_keywords: int = 0


class MatchScoreBreakdown(BaseModel):
    overall: int = Field(ge=0, le=100)
    skills: int = Field(ge=0, le=100)
    experience: int = Field(ge=0, le=100)
    title: int = Field(ge=0, le=100)
    keywords: int = Field(ge=0, le=100)
    details: ScoreDetails = Field(default_factory=ScoreDetails)

    @property
    def label(self) -> str:
        if self.overall >= 80:
            return "Excellent Match"
        if self.overall >= 60:
            return "Good Match"
        if self.overall >= 40:
            return "Fair Match"
        return "Low Match"
