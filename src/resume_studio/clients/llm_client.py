"""Text-generation service client: async Claude calls with bounded retries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import anthropic
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from resume_studio.config import LLMConfig
from resume_studio.exceptions import EnhancementRateLimited, EnhancementServiceUnavailable
from resume_studio.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

# retried with backoff; anything else fails on the first attempt
TRANSIENT_ERRORS = (
    anthropic.RateLimitError,
    anthropic.APIConnectionError,  # includes APITimeoutError
    anthropic.InternalServerError,
)


class GenerationTask(str, Enum):
    """Kinds of request; each has its own output budget."""

    BULLET_REWRITE = "bullet_rewrite"
    SUMMARY = "summary"
    COVER_LETTER = "cover_letter"
    EXTRACTION = "extraction"


@dataclass
class LLMResponse:
    """Generated text with the token usage it cost."""

    text: str
    input_tokens: int
    output_tokens: int


class LLMClient:
    """Async Claude API client with exponential-backoff retries.

    Failures surface as ``EnhancementRateLimited`` when the service is still
    rate limiting after the last attempt, ``EnhancementServiceUnavailable``
    for everything else (auth, bad request, outage, empty reply).
    """

    def __init__(
        self,
        api_key: str | None = None,
        config: LLMConfig | None = None,
        retry_wait=None,
    ):
        self.config = config or LLMConfig()
        kwargs: dict = {"timeout": float(self.config.timeout), "max_retries": 0}
        if api_key is not None:
            kwargs["api_key"] = api_key
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self._retry_wait = retry_wait or wait_exponential(min=1, max=10)
        self._token_log: list[tuple[str, str, int, int]] = []  # (task, model, input, output)

    async def _call_api(self, **kwargs) -> anthropic.types.Message:
        """messages.create, retried on transient errors only."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retries),
            wait=self._retry_wait,
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )
        return await retrying(self.client.messages.create, **kwargs)

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int = 1024,
        task: GenerationTask | str = "",
    ) -> LLMResponse:
        """Run one generation request and return its text and token usage."""
        model = model or self.config.model
        task_name = task.value if isinstance(task, GenerationTask) else task
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": self.config.temperature if temperature is None else temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        logger.debug("LLM call: task=%s model=%s max_tokens=%d", task_name or "-", model, max_tokens)
        try:
            message = await self._call_api(**kwargs)
        except anthropic.RateLimitError as e:
            logger.warning("LLM rate limited after %d attempts", self.config.max_retries)
            raise EnhancementRateLimited(str(e)) from e
        except anthropic.APIError as e:
            logger.error("LLM call failed", exc_info=True)
            raise EnhancementServiceUnavailable(str(e)) from e

        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        if not text.strip():
            raise EnhancementServiceUnavailable("Empty response from text-generation service")

        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        if message.stop_reason == "max_tokens":
            logger.warning("LLM output hit the %d token budget (task=%s)", max_tokens, task_name or "-")
        self._token_log.append((task_name, model, input_tokens, output_tokens))
        return LLMResponse(text=text, input_tokens=input_tokens, output_tokens=output_tokens)

    async def generate_json(
        self,
        prompt: str,
        system: str = "",
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int = 1024,
        task: GenerationTask | str = "",
    ) -> dict | list:
        """Send a prompt and parse JSON from response.

        Raises:
            ValueError: the response holds no parseable JSON.
        """
        response = await self.generate(
            prompt=prompt,
            system=system,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            task=task,
        )
        return extract_json(response.text)

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[2] for t in self._token_log),
            "output": sum(t[3] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary
