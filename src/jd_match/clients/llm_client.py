"""LLM backends that stream model output as a sequence of events."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

import anthropic
import openai
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from jd_match.config import ModelProviderConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextEvent:
    """An incremental text fragment."""

    content: str
    type: str = "text"


@dataclass(frozen=True)
class MessageEvent:
    """A finalized message; text blocks are concatenated in block order."""

    content: list[dict] = field(default_factory=list)
    type: str = "message"

    @property
    def text(self) -> str:
        return "".join(
            block.get("text", "")
            for block in self.content
            if block.get("type") == "text" and isinstance(block.get("text"), str)
        )


@dataclass(frozen=True)
class ErrorEvent:
    """The backend failed; the call must be treated as a failure."""

    error: BaseException
    type: str = "error"


ModelEvent = TextEvent | MessageEvent | ErrorEvent


class LLMBackend:
    """Base class: ``stream()`` yields ModelEvents for a single prompt."""

    name = "base"

    def __init__(
        self,
        model: str,
        *,
        max_iterations: int = 3,
        max_tokens: int = 2048,
        temperature: float = 0.0,
    ):
        self.model = model
        self.max_iterations = max_iterations
        self.max_tokens = max_tokens
        self.temperature = temperature

    def stream(self, prompt: str, system: str = "") -> AsyncIterator[ModelEvent]:
        raise NotImplementedError

    def _retrying(self, transient: tuple[type[BaseException], ...]) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_iterations),
            wait=wait_exponential(min=1, max=10),
            retry=retry_if_exception_type(transient),
            reraise=True,
        )


class OpenAICompatibleBackend(LLMBackend):
    """Streaming chat completions for OpenAI and OpenAI-compatible endpoints (Groq)."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        **kwargs,
    ):
        super().__init__(model, **kwargs)
        client_kwargs: dict = {"api_key": api_key, "max_retries": 0}
        if base_url is not None:
            client_kwargs["base_url"] = base_url
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        self.client = openai.AsyncOpenAI(**client_kwargs)

    async def _open_stream(self, messages: list[dict]):
        async for attempt in self._retrying(
            (openai.RateLimitError, openai.APIConnectionError)
        ):
            with attempt:
                return await self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    stream=True,
                )

    async def stream(self, prompt: str, system: str = "") -> AsyncIterator[ModelEvent]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        logger.debug("LLM call: backend=%s model=%s", self.name, self.model)
        try:
            response = await self._open_stream(messages)
            async for chunk in response:
                if not chunk.choices:
                    continue
                text = getattr(chunk.choices[0].delta, "content", None)
                if text:
                    yield TextEvent(text)
        except openai.OpenAIError as exc:
            logger.error("LLM stream failed: %s", type(exc).__name__)
            yield ErrorEvent(exc)


class AnthropicBackend(LLMBackend):
    """Claude messages API; emits one finalized MessageEvent per call."""

    name = "anthropic"

    def __init__(self, api_key: str | None, model: str, *, timeout: float | None = None, **kwargs):
        super().__init__(model, **kwargs)
        client_kwargs: dict = {"max_retries": 0}
        if api_key is not None:
            client_kwargs["api_key"] = api_key
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**client_kwargs)

    async def _call_api(self, prompt: str, system: str):
        """Make the actual API call with retry logic."""
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        async for attempt in self._retrying(
            (anthropic.RateLimitError, anthropic.APIConnectionError)
        ):
            with attempt:
                return await self.client.messages.create(**kwargs)

    async def stream(self, prompt: str, system: str = "") -> AsyncIterator[ModelEvent]:
        logger.debug("LLM call: backend=%s model=%s", self.name, self.model)
        try:
            message = await self._call_api(prompt, system)
        except anthropic.APIError as exc:
            logger.error("LLM call failed: %s", type(exc).__name__)
            yield ErrorEvent(exc)
            return
        logger.debug(
            "LLM response: %d input, %d output tokens",
            message.usage.input_tokens,
            message.usage.output_tokens,
        )
        blocks = [
            {"type": getattr(block, "type", None), "text": getattr(block, "text", None)}
            for block in message.content
        ]
        yield MessageEvent(blocks)


def create_backend(
    provider: ModelProviderConfig,
    *,
    timeout: float | None = None,
    max_iterations: int = 3,
    max_tokens: int = 2048,
    temperature: float = 0.0,
) -> LLMBackend:
    """Build the backend for a selected provider config."""
    kwargs = {
        "timeout": timeout,
        "max_iterations": max_iterations,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    if provider.name == "anthropic":
        return AnthropicBackend(provider.api_key, provider.model, **kwargs)
    if provider.name in ("openai", "groq"):
        backend = OpenAICompatibleBackend(
            provider.api_key, provider.model, base_url=provider.base_url, **kwargs
        )
        backend.name = provider.name
        return backend
    raise ValueError(f"Unsupported provider: {provider.name!r}")
