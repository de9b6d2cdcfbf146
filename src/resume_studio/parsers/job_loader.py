"""Load a JobPosting from a JSON, YAML or plain-text file."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

import yaml

from resume_studio.models.job import JobPosting

logger = logging.getLogger(__name__)

# keys used by browser captures and older exports
_KEY_ALIASES = {
    "company": "company_name",
    "experience_years": "required_experience_years",
    "years_required": "required_experience_years",
    "salary": "salary_range",
    "job_title": "title",
    "job_description": "description",
}


def _snake(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def job_from_dict(data: dict) -> JobPosting:
    """Build a JobPosting from a loosely shaped record (camelCase or snake_case keys)."""
    normalized = {}
    for key, value in data.items():
        name = _snake(str(key))
        normalized[_KEY_ALIASES.get(name, name)] = value
    known = {k: v for k, v in normalized.items() if k in JobPosting.model_fields}
    ignored = sorted(set(normalized) - set(known))
    if ignored:
        logger.debug("Ignoring job posting fields: %s", ", ".join(ignored))
    return JobPosting(**known)


def load_job_posting(file_path: str | Path) -> JobPosting:
    """Load a job posting from a .json, .yaml/.yml, or plain-text description file."""
    path = Path(file_path)
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = json.loads(text)
    elif suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        # plain description; the first line is usually the title
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        return JobPosting(title=lines[0] if lines else "", description=text.strip())

    if not isinstance(data, dict):
        raise ValueError(f"Job posting file must contain a mapping: {path}")
    return job_from_dict(data)
