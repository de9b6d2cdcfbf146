"""Tests for the tailoring pipeline."""

import json

import pytest

from resume_studio.cache.materials_cache import MaterialsCache
from resume_studio.clients.llm_client import GenerationTask, LLMResponse
from resume_studio.config import AppConfig, LLMConfig
from resume_studio.exceptions import EnhancementServiceUnavailable, UnsupportedFormat
from resume_studio.models.enhanced import BulletState
from resume_studio.models.job import JobPosting
from resume_studio.pipeline.orchestrator import PipelineResult, TailoringPipeline, job_key
from resume_studio.templates.synthesizer import SynthesisMethod


async def _generate(**kwargs):
    task = kwargs["task"]
    if task == GenerationTask.BULLET_REWRITE:
        bullets = json.loads(kwargs["prompt"].split("Bullets (JSON):\n", 1)[1])
        text = json.dumps([f"Delivered: {b}" for b in bullets])
    elif task == GenerationTask.SUMMARY:
        text = "Backend engineer with nine years of Python experience."
    else:
        text = (
            "I am applying for the Backend Engineer role at Initech.\n\n"
            "At Acme Corp I led a team of five developers building Python services."
        )
    return LLMResponse(text=text, input_tokens=10, output_tokens=5)


@pytest.fixture
def cache(tmp_path):
    return MaterialsCache(db_path=tmp_path / "materials.db", ttl_days=0)


@pytest.fixture
def resume_file(tmp_path, sample_resume_text):
    path = tmp_path / "jane.txt"
    path.write_text(sample_resume_text, encoding="utf-8")
    return path


class TestJobKey:
    def test_uses_id(self, sample_job):
        assert job_key(sample_job) == "job-42"

    def test_slug_without_id(self):
        job = JobPosting(title="Senior Backend Engineer (Python)", company_name="Initech, Inc.")
        assert job_key(job) == "initech-inc-senior-backend-engineer-python"

    def test_untitled(self):
        assert job_key(JobPosting()) == "untitled-job"


class TestTailoringPipeline:
    @pytest.mark.asyncio
    async def test_full_run_from_text_file(self, mock_llm_client, sample_job, resume_file, cache):
        mock_llm_client.generate.side_effect = _generate
        phases: list[str] = []
        pipeline = TailoringPipeline(mock_llm_client, AppConfig(), cache=cache)

        result = await pipeline.run(
            resume_file,
            sample_job,
            include_cover_letter=True,
            on_phase=lambda phase, detail: phases.append(phase),
        )

        assert isinstance(result, PipelineResult)
        assert phases[0] == "extract"
        assert phases[-1] == "done"
        assert "recover" not in phases
        assert result.score.overall > 0
        assert result.synthesis.method == SynthesisMethod.TEMPLATE
        assert result.synthesis.written_count == 3
        assert all(s.state == BulletState.ENHANCED_WRITTEN for s in result.enhanced.bullet_update_status)
        assert result.cover_letter_docx is not None
        assert result.metadata["synthesis_method"] == "template"
        assert result.metadata["bullets_written"] == 3
        assert result.metadata["bullets_manual"] == 0
        assert result.metadata["calls"] == 4
        assert result.elapsed_seconds >= 0

        cached = cache.get("job-42")
        assert cached is not None
        assert cached.bullet_update_status == result.enhanced.bullet_update_status

    @pytest.mark.asyncio
    async def test_docx_is_edited_in_place(self, mock_llm_client, sample_job, sample_docx_bytes, tmp_path):
        mock_llm_client.generate.side_effect = _generate
        path = tmp_path / "jane.docx"
        path.write_bytes(sample_docx_bytes)

        result = await TailoringPipeline(mock_llm_client).run(path, sample_job)

        assert result.synthesis.method == SynthesisMethod.IN_PLACE
        assert result.synthesis.written_count == 3
        assert result.cover_letter_docx is None

    @pytest.mark.asyncio
    async def test_accepts_extracted_resume(self, sample_resume, sample_job):
        config = AppConfig(llm=LLMConfig(enabled=False))
        result = await TailoringPipeline(None, config).run(sample_resume, sample_job)

        assert result.resume is sample_resume
        assert result.metadata["ai_enabled"] is False
        assert result.synthesis.written_count == 0
        assert result.enhanced.enhanced_bullets == [
            exp.bullet_points for exp in sample_resume.work_experiences
        ]

    @pytest.mark.asyncio
    async def test_recovers_experiences_when_no_bullets(self, mock_llm_client, sample_job, tmp_path):
        path = tmp_path / "plain.txt"
        path.write_text("Jane Doe\nShipped the billing system in six months\n", encoding="utf-8")
        mock_llm_client.generate_json.return_value = {
            "work_experiences": [
                {"company": "Acme", "title": "Engineer", "bullet_points": ["Shipped the billing system in six months"]}
            ]
        }
        mock_llm_client.generate.side_effect = _generate
        phases: list[str] = []

        result = await TailoringPipeline(mock_llm_client).run(
            path, sample_job, on_phase=lambda phase, detail: phases.append(phase),
        )

        assert "recover" in phases
        assert result.resume.work_experiences[0].bullet_points == ["Shipped the billing system in six months"]
        assert result.enhanced.enhanced_bullets == [["Delivered: Shipped the billing system in six months"]]

    @pytest.mark.asyncio
    async def test_total_failure_propagates_without_caching(
        self, mock_llm_client, sample_resume, sample_job, cache,
    ):
        mock_llm_client.generate.side_effect = EnhancementServiceUnavailable("down")
        with pytest.raises(EnhancementServiceUnavailable):
            await TailoringPipeline(mock_llm_client, cache=cache).run(sample_resume, sample_job)
        assert cache.get("job-42") is None

    @pytest.mark.asyncio
    async def test_unsupported_file(self, mock_llm_client, sample_job, tmp_path):
        path = tmp_path / "resume.rtf"
        path.write_text("{\\rtf1}", encoding="utf-8")
        with pytest.raises(UnsupportedFormat):
            await TailoringPipeline(mock_llm_client).run(path, sample_job)
