"""Skill-name normalisation and fuzzy matching used by the match scorer."""

from __future__ import annotations

import re
from difflib import SequenceMatcher

# canonical spellings after normalize_skill(); both sides are looked up
SKILL_ALIASES: dict[str, str] = {
    "js": "javascript",
    "ecmascript": "javascript",
    "ts": "typescript",
    "py": "python",
    "python3": "python",
    "golang": "go",
    "postgres": "postgresql",
    "psql": "postgresql",
    "mongo": "mongodb",
    "k8s": "kubernetes",
    "gcp": "google cloud",
    "google cloud platform": "google cloud",
    "amazon web services": "aws",
    "ms azure": "azure",
    "microsoft azure": "azure",
    "ci cd": "cicd",
    "continuous integration": "cicd",
    "restful": "rest",
    "rest api": "rest",
    "restful api": "rest",
    "restful apis": "rest",
    "rest apis": "rest",
    "ml": "machine learning",
    "ai": "artificial intelligence",
    "nlp": "natural language processing",
    "powerbi": "power bi",
    "sklearn": "scikit learn",
}

_SYMBOLS = (("c++", "cpp"), ("c#", "csharp"), ("f#", "fsharp"), (".net", "dotnet"))


def normalize_skill(skill: str) -> str:
    """Lowercase, spell out symbol names, drop ``.js``/``js`` suffixes and punctuation."""
    text = skill.strip().lower()
    for symbol, word in _SYMBOLS:
        text = text.replace(symbol, word)
    text = re.sub(r"\.?js$", "", text) if len(text) > 3 and text.endswith("js") else text
    text = re.sub(r"[-_/]", " ", text)
    text = re.sub(r"[^a-z0-9 ]", "", text)
    return re.sub(r"\s+", " ", text).strip()


def canonical_skill(skill: str) -> str:
    normalized = normalize_skill(skill)
    return SKILL_ALIASES.get(normalized, normalized)


def find_match(job_skill: str, resume_skills: list[str], threshold: float = 0.85) -> str | None:
    """Return the résumé skill matching ``job_skill``, or None.

    Equal canonical forms match first; otherwise the closest résumé skill
    with a similarity ratio at or above ``threshold``. There is no substring
    matching, so "sql" does not match "postgresql".
    """
    target = canonical_skill(job_skill)
    if not target:
        return None

    canon = [(canonical_skill(s), s) for s in resume_skills]
    for value, original in canon:
        if value == target:
            return original

    best: tuple[float, str] | None = None
    for value, original in canon:
        if not value:
            continue
        ratio = SequenceMatcher(None, target, value).ratio()
        if ratio >= threshold and (best is None or ratio > best[0]):
            best = (ratio, original)
    return best[1] if best else None


def dedupe_skills(skills: list[str]) -> list[str]:
    """Drop skills whose canonical form was already seen, keeping order."""
    seen: set[str] = set()
    result = []
    for skill in skills:
        key = canonical_skill(skill)
        if key and key not in seen:
            seen.add(key)
            result.append(skill.strip())
    return result
