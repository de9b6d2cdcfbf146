"""Tests for the typer CLI."""

import json
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from resume_studio import cli
from resume_studio.clients.llm_client import LLMResponse
from resume_studio.config import AppConfig, CacheConfig, LLMConfig
from resume_studio.exceptions import EnhancementServiceUnavailable

runner = CliRunner()


@pytest.fixture
def resume_file(tmp_path, sample_resume_text):
    path = tmp_path / "jane.txt"
    path.write_text(sample_resume_text, encoding="utf-8")
    return path


@pytest.fixture
def job_file(tmp_path):
    path = tmp_path / "job.json"
    path.write_text(
        json.dumps({
            "id": "job-42",
            "title": "Backend Engineer",
            "companyName": "Initech",
            "requiredSkills": ["Python", "PostgreSQL"],
            "requiredExperienceYears": 5,
        }),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def offline_config(tmp_path, monkeypatch):
    config = AppConfig(
        llm=LLMConfig(enabled=False),
        cache=CacheConfig(db_path=str(tmp_path / "cache" / "materials.db")),
    )
    monkeypatch.setattr(cli, "load_config", lambda: config)
    return config


def test_parse_table(resume_file):
    result = runner.invoke(cli.app, ["parse", str(resume_file)])
    assert result.exit_code == 0
    assert "jane.doe@example.com" in result.output
    assert "Managed team of 5 developers" in result.output


def test_parse_json(resume_file):
    result = runner.invoke(cli.app, ["parse", str(resume_file), "--json"])
    assert result.exit_code == 0
    assert '"source_format": "text"' in result.output


def test_parse_missing_file(tmp_path):
    result = runner.invoke(cli.app, ["parse", str(tmp_path / "nope.pdf")])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_score(resume_file, job_file, offline_config):
    result = runner.invoke(cli.app, ["score", str(resume_file), "--job", str(job_file)])
    assert result.exit_code == 0
    assert "/100" in result.output
    assert "Initech" in result.output


def test_tailor_without_ai(resume_file, job_file, offline_config, tmp_path):
    output = tmp_path / "out" / "tailored.docx"
    result = runner.invoke(
        cli.app,
        ["tailor", str(resume_file), "--job", str(job_file), "--output", str(output), "--cover-letter"],
    )
    assert result.exit_code == 0, result.output
    assert output.exists()
    assert (tmp_path / "out" / "tailored_cover_letter.docx").exists()

    stats = runner.invoke(cli.app, ["cache-stats"])
    assert "Entries: 1" in stats.output
    cleared = runner.invoke(cli.app, ["cache-clear"])
    assert "Removed 1" in cleared.output


def test_tailor_reports_token_usage(resume_file, job_file, tmp_path, monkeypatch, mock_llm_client):
    config = AppConfig(cache=CacheConfig(db_path=str(tmp_path / "cache" / "materials.db")))
    monkeypatch.setattr(cli, "load_config", lambda: config)
    mock_llm_client.get_token_summary = MagicMock(
        return_value={"input": 1200, "output": 340, "calls": [("summary", "m", 1200, 340)]}
    )
    monkeypatch.setattr(cli, "LLMClient", lambda config: mock_llm_client)

    def partial_failure(**kwargs):
        if kwargs["task"] == "summary":
            return LLMResponse(text="Tailored summary.", input_tokens=1200, output_tokens=340)
        raise EnhancementServiceUnavailable("down")

    mock_llm_client.generate.side_effect = partial_failure
    output = tmp_path / "tailored.docx"
    result = runner.invoke(
        cli.app, ["tailor", str(resume_file), "--job", str(job_file), "--output", str(output)],
    )

    assert result.exit_code == 0, result.output
    assert "Tokens: 1,200 in / 340 out (1 calls)" in result.output
    mock_llm_client.get_token_summary.assert_called_once()
