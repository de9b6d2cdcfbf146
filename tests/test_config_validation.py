"""Tests for config validation."""

import pytest

from resume_studio.config import EnhancerConfig, ScoringConfig, load_config


class TestConfigValidation:
    def test_valid_defaults(self, tmp_path):
        """Default config passes validation without raising."""
        config = load_config(tmp_path / "missing.yaml")
        assert config.llm.timeout == 60
        assert config.llm.max_retries == 3

    def test_invalid_timeout(self, tmp_path):
        """timeout of 0 (below minimum of 1) raises ValueError."""
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("llm:\n  timeout: 0\n")
        with pytest.raises(ValueError, match="timeout"):
            load_config(yaml)

    def test_invalid_max_retries(self, tmp_path):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("llm:\n  max_retries: 99\n")
        with pytest.raises(ValueError, match="max_retries"):
            load_config(yaml)

    def test_invalid_temperature(self, tmp_path):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("llm:\n  temperature: 1.5\n")
        with pytest.raises(ValueError, match="temperature"):
            load_config(yaml)

    def test_invalid_ttl_days(self, tmp_path):
        """ttl_days above 365 raises ValueError."""
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("cache:\n  ttl_days: 999\n")
        with pytest.raises(ValueError, match="ttl_days"):
            load_config(yaml)

    def test_ttl_zero_is_allowed(self, tmp_path):
        yaml = tmp_path / "ok.yaml"
        yaml.write_text("cache:\n  ttl_days: 0\n")
        assert load_config(yaml).cache.ttl_days == 0

    def test_invalid_concurrency(self):
        with pytest.raises(ValueError, match="max_concurrency"):
            EnhancerConfig(max_concurrency=0)

    def test_cover_letter_word_range(self):
        with pytest.raises(ValueError, match="cover_letter_min_words"):
            EnhancerConfig(cover_letter_min_words=400, cover_letter_max_words=300)

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError, match="sum to 1.0"):
            ScoringConfig(skills_weight=0.5)

    def test_weights_rebalanced(self):
        config = ScoringConfig(
            skills_weight=0.25, experience_weight=0.25, title_weight=0.25, keywords_weight=0.25,
        )
        assert config.title_weight == 0.25

    def test_invalid_similarity_threshold(self):
        with pytest.raises(ValueError, match="skill_similarity_threshold"):
            ScoringConfig(skill_similarity_threshold=0.2)

    def test_unknown_key_raises(self, tmp_path):
        yaml = tmp_path / "bad.yaml"
        yaml.write_text("llm:\n  haiku_model: x\n")
        with pytest.raises(TypeError):
            load_config(yaml)
