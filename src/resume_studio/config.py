"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


def _check_range(name: str, value: float, low: float, high: float) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


@dataclass(frozen=True)
class LLMConfig:
    """Text-generation provider settings, passed explicitly to the enhancer."""

    enabled: bool = True
    model: str = "claude-haiku-4-5-20251001"
    max_retries: int = 3
    timeout: int = 60
    temperature: float = 0.3

    def __post_init__(self) -> None:
        _check_range("max_retries", self.max_retries, 1, 10)
        _check_range("timeout", self.timeout, 1, 600)
        _check_range("temperature", self.temperature, 0.0, 1.0)


@dataclass(frozen=True)
class EnhancerConfig:
    # max output tokens per task; bullet rewrites add per_bullet for each bullet
    bullet_rewrite_tokens: int = 200
    bullet_rewrite_tokens_per_bullet: int = 120
    summary_tokens: int = 400
    cover_letter_tokens: int = 1200
    extraction_tokens: int = 4000
    max_concurrency: int = 2
    cover_letter_min_words: int = 250
    cover_letter_max_words: int = 350

    def __post_init__(self) -> None:
        _check_range("max_concurrency", self.max_concurrency, 1, 8)
        for name in (
            "bullet_rewrite_tokens",
            "bullet_rewrite_tokens_per_bullet",
            "summary_tokens",
            "cover_letter_tokens",
            "extraction_tokens",
        ):
            _check_range(name, getattr(self, name), 1, 16000)
        if self.cover_letter_min_words > self.cover_letter_max_words:
            raise ValueError("cover_letter_min_words must not exceed cover_letter_max_words")


@dataclass(frozen=True)
class ScoringConfig:
    skills_weight: float = 0.40
    experience_weight: float = 0.25
    title_weight: float = 0.20
    keywords_weight: float = 0.15
    desired_titles: tuple[str, ...] = ()
    keyword_top_n: int = 20
    skill_similarity_threshold: float = 0.85

    def __post_init__(self) -> None:
        for name in ("skills_weight", "experience_weight", "title_weight", "keywords_weight"):
            _check_range(name, getattr(self, name), 0.0, 1.0)
        total = self.skills_weight + self.experience_weight + self.title_weight + self.keywords_weight
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"scoring weights must sum to 1.0, got {total:.3f}")
        _check_range("keyword_top_n", self.keyword_top_n, 1, 100)
        _check_range("skill_similarity_threshold", self.skill_similarity_threshold, 0.5, 1.0)
        # YAML hands us a list
        object.__setattr__(self, "desired_titles", tuple(self.desired_titles))


@dataclass(frozen=True)
class CacheConfig:
    ttl_days: int = 30  # 0 disables expiry
    db_path: str = "~/.resume-studio/materials.db"

    def __post_init__(self) -> None:
        _check_range("ttl_days", self.ttl_days, 0, 365)

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    enhancer: EnhancerConfig = field(default_factory=EnhancerConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        enhancer=EnhancerConfig(**raw.get("enhancer", {})),
        scoring=ScoringConfig(**raw.get("scoring", {})),
        cache=CacheConfig(**raw.get("cache", {})),
    )
