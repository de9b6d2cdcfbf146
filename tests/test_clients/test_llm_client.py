"""Tests for LLMClient (Claude API wrapper)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest
from tenacity import wait_none

from resume_studio.clients.llm_client import GenerationTask, LLMClient, LLMResponse
from resume_studio.config import LLMConfig
from resume_studio.exceptions import EnhancementRateLimited, EnhancementServiceUnavailable

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _make_api_message(
    text: str, input_tokens: int = 100, output_tokens: int = 50, stop_reason: str = "end_turn",
) -> MagicMock:
    """Build a mock anthropic Message-like object."""
    message = MagicMock()
    message.usage.input_tokens = input_tokens
    message.usage.output_tokens = output_tokens
    message.stop_reason = stop_reason
    message.content = [MagicMock(type="text", text=text)]
    return message


def _status_error(cls, status: int):
    return cls("error", response=httpx.Response(status, request=_REQUEST), body=None)


def _client_with(create: AsyncMock, config: LLMConfig | None = None) -> LLMClient:
    with patch("resume_studio.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
        mock_client = MagicMock()
        mock_client.messages.create = create
        mock_cls.return_value = mock_client
        return LLMClient(config=config, retry_wait=wait_none())


class TestLLMClientInit:
    def test_init_default_passes_timeout_and_disables_sdk_retries(self):
        """SDK retries are off; tenacity owns the retry loop."""
        with patch("resume_studio.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient()
            mock_cls.assert_called_once_with(timeout=60.0, max_retries=0)

    def test_init_with_api_key_passes_key(self):
        with patch("resume_studio.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient(api_key="test-key", config=LLMConfig(timeout=30))
            mock_cls.assert_called_once_with(timeout=30.0, max_retries=0, api_key="test-key")


class TestLLMClientGenerate:
    async def test_generate_returns_llm_response(self):
        """generate() wraps API response fields into an LLMResponse dataclass."""
        create = AsyncMock(return_value=_make_api_message("hello world", 100, 50))
        llm = _client_with(create)
        result = await llm.generate("say hello", system="be brief", task=GenerationTask.SUMMARY)

        assert isinstance(result, LLMResponse)
        assert result.text == "hello world"
        assert result.input_tokens == 100
        assert result.output_tokens == 50
        kwargs = create.call_args.kwargs
        assert kwargs["system"] == "be brief"
        assert kwargs["model"] == "claude-haiku-4-5-20251001"
        assert kwargs["temperature"] == 0.3

    async def test_explicit_temperature_and_budget(self):
        create = AsyncMock(return_value=_make_api_message("ok"))
        llm = _client_with(create)
        await llm.generate("p", temperature=0.0, max_tokens=321)
        kwargs = create.call_args.kwargs
        assert kwargs["temperature"] == 0.0
        assert kwargs["max_tokens"] == 321
        assert "system" not in kwargs

    async def test_non_text_blocks_ignored(self):
        message = _make_api_message("answer")
        message.content = [MagicMock(type="thinking", text="hmm"), MagicMock(type="text", text="answer")]
        llm = _client_with(AsyncMock(return_value=message))
        assert (await llm.generate("p")).text == "answer"

    async def test_token_log_stores_task_model_and_counts(self):
        create = AsyncMock(return_value=_make_api_message("resp", input_tokens=20, output_tokens=8))
        llm = _client_with(create)
        await llm.generate("prompt", model="claude-sonnet-4-5-20250929", task=GenerationTask.COVER_LETTER)

        task, model, inp, out = llm._token_log[0]
        assert task == "cover_letter"
        assert model == "claude-sonnet-4-5-20250929"
        assert (inp, out) == (20, 8)


class TestLLMClientErrors:
    async def test_transient_error_is_retried(self):
        create = AsyncMock(side_effect=[
            _status_error(anthropic.RateLimitError, 429),
            _make_api_message("recovered"),
        ])
        llm = _client_with(create)
        result = await llm.generate("p")
        assert result.text == "recovered"
        assert create.await_count == 2

    async def test_rate_limit_exhausted(self):
        create = AsyncMock(side_effect=_status_error(anthropic.RateLimitError, 429))
        llm = _client_with(create, LLMConfig(max_retries=3))
        with pytest.raises(EnhancementRateLimited):
            await llm.generate("p")
        assert create.await_count == 3

    async def test_connection_error_maps_to_unavailable(self):
        create = AsyncMock(side_effect=anthropic.APIConnectionError(request=_REQUEST))
        llm = _client_with(create, LLMConfig(max_retries=2))
        with pytest.raises(EnhancementServiceUnavailable):
            await llm.generate("p")
        assert create.await_count == 2

    async def test_bad_request_not_retried(self):
        create = AsyncMock(side_effect=_status_error(anthropic.BadRequestError, 400))
        llm = _client_with(create)
        with pytest.raises(EnhancementServiceUnavailable):
            await llm.generate("p")
        assert create.await_count == 1

    async def test_empty_response_is_unavailable(self):
        llm = _client_with(AsyncMock(return_value=_make_api_message("   ")))
        with pytest.raises(EnhancementServiceUnavailable, match="Empty response"):
            await llm.generate("p")
        assert llm._token_log == []


class TestLLMClientGenerateJson:
    async def test_generate_json_parses_valid_json_text(self):
        llm = _client_with(AsyncMock(return_value=_make_api_message('{"key": "value", "count": 3}')))
        assert await llm.generate_json("give me json") == {"key": "value", "count": 3}

    async def test_generate_json_raises_on_non_json_response(self):
        llm = _client_with(AsyncMock(return_value=_make_api_message("this is plain text, not json")))
        with pytest.raises(ValueError):
            await llm.generate_json("give me json")


class TestLLMClientTokenSummary:
    def test_get_token_summary_returns_correct_totals(self):
        llm = _client_with(AsyncMock())
        llm._token_log = [
            ("summary", "claude-haiku-4-5-20251001", 100, 50),
            ("bullet_rewrite", "claude-haiku-4-5-20251001", 200, 80),
        ]
        summary = llm.get_token_summary()
        assert summary["input"] == 300
        assert summary["output"] == 130
        assert len(summary["calls"]) == 2

    def test_get_token_summary_clears_log_after_return(self):
        llm = _client_with(AsyncMock())
        llm._token_log = [("summary", "claude-haiku-4-5-20251001", 50, 25)]
        llm.get_token_summary()
        second_summary = llm.get_token_summary()
        assert second_summary == {"input": 0, "output": 0, "calls": []}
