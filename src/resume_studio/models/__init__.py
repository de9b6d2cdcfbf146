"""Data models for the resume studio pipeline."""

from resume_studio.models.enhanced import BulletState, BulletUpdateStatus, EnhancedResume
from resume_studio.models.job import JobPosting
from resume_studio.models.resume import (
    BulletPoint,
    ContactInfo,
    Education,
    Formatting,
    Section,
    SectionKind,
    SourceFormat,
    StructuredResume,
    WorkExperience,
)
from resume_studio.models.score import MatchScoreBreakdown, ScoreDetails
from resume_studio.models.user import UserSettings

__all__ = [
    "BulletPoint",
    "BulletState",
    "BulletUpdateStatus",
    "ContactInfo",
    "Education",
    "EnhancedResume",
    "Formatting",
    "JobPosting",
    "MatchScoreBreakdown",
    "ScoreDetails",
    "Section",
    "SectionKind",
    "SourceFormat",
    "StructuredResume",
    "UserSettings",
    "WorkExperience",
]
