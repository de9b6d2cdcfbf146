"""Tests for config loading."""

import pytest

from resume_studio.config import AppConfig, CacheConfig, LLMConfig, ScoringConfig, load_config


class TestConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.llm.model == "claude-haiku-4-5-20251001"
        assert config.llm.enabled is True
        assert config.enhancer.max_concurrency == 2
        assert config.scoring.skills_weight == 0.40
        assert config.cache.ttl_days == 30

    def test_load_config_defaults(self, tmp_path):
        """Loading from non-existent path returns defaults."""
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config == AppConfig()

    def test_load_config_from_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            "llm:\n  model: test-model\n  enabled: false\n"
            "scoring:\n  desired_titles: [Staff Engineer, Tech Lead]\n"
        )
        config = load_config(yaml_path)
        assert config.llm.model == "test-model"
        assert config.llm.enabled is False
        assert config.scoring.desired_titles == ("Staff Engineer", "Tech Lead")
        # Defaults for unspecified
        assert config.enhancer.summary_tokens == 400
        assert config.cache.ttl_days == 30

    def test_empty_yaml_gives_defaults(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text("")
        assert load_config(yaml_path) == AppConfig()

    def test_cache_resolved_path(self):
        cache = CacheConfig(db_path="~/test.db")
        resolved = cache.resolved_db_path
        assert "~" not in str(resolved)
        assert resolved.name == "test.db"

    def test_frozen_config(self):
        config = LLMConfig()
        with pytest.raises(AttributeError):
            config.model = "changed"

    def test_desired_titles_become_tuple(self):
        config = ScoringConfig(desired_titles=["Data Engineer"])
        assert config.desired_titles == ("Data Engineer",)
