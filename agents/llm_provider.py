"""LLM Provider abstraction layer for OpenAI, Anthropic, Cohere, and OpenRouter.

Provides a unified async "complete one chat turn" interface to multiple LLM
backends.  Every call carries its own deadline and is attempted exactly once:
timeouts, transport faults, provider error statuses and blank completions are
raised as typed ``TurnFailure`` subclasses and never retried here.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal, TypedDict

from agents.errors import (
    EmptyCompletion,
    GatewayTimeout,
    ProviderError,
    TransportError,
    TurnFailure,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------

class ChatMessage(TypedDict):
    """One role-tagged message sent to a provider."""

    role: Literal["system", "user", "assistant"]
    content: str


@dataclass(frozen=True)
class LLMResponse:
    """Standardised response from any LLM provider."""

    text: str
    tokens_used: int
    model: str
    provider: str
    latency_ms: float
    raw: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class LLMProvider(ABC):
    """Provider-agnostic interface that all LLM backends implement."""

    name: str  # e.g. "openai", "anthropic", "cohere"
    # Whether the chat endpoint accepts response_format={"type": "json_object"}
    supports_json_mode: bool = False

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        api_key_env: str | None = None,
        timeout: float = 30,
    ) -> None:
        self.model = model
        self.timeout = timeout

        # Resolve API key: explicit > env var > raise
        self.api_key = api_key or os.getenv(api_key_env or "")
        if not self.api_key:
            raise ValueError(
                f"No API key for {self.name}. "
                f"Set {api_key_env!r} or pass api_key explicitly."
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Complete one chat turn within *timeout* seconds.

        Falls back to the provider-wide ``timeout`` when no deadline is given.
        Raises a ``TurnFailure`` subclass instead of returning a blank reply.
        """
        deadline = self.timeout if timeout is None else timeout
        start = time.perf_counter()
        try:
            payload = await asyncio.wait_for(
                self._call_api(
                    messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    **kwargs,
                ),
                timeout=deadline,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("[%s] %s timed out after %ss", self.name, self.model, deadline)
            raise GatewayTimeout(deadline) from exc
        except TurnFailure as exc:
            logger.warning("[%s] %s failed: %s", self.name, self.model, exc)
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("[%s] %s raised %s", self.name, self.model, type(exc).__name__)
            raise TransportError(f"[{self.name}] {exc}") from exc

        elapsed = (time.perf_counter() - start) * 1000
        text = payload.get("text") or ""
        if not text.strip():
            raise EmptyCompletion(f"[{self.name}] {self.model} returned an empty completion")

        response = LLMResponse(
            text=text,
            tokens_used=payload.get("tokens_used", 0),
            model=self.model,
            provider=self.name,
            latency_ms=round(elapsed, 1),
            raw=payload.get("raw", {}),
        )
        logger.debug(
            "[%s] %s responded (%d tokens, %.0f ms)",
            self.name,
            self.model,
            response.tokens_used,
            response.latency_ms,
        )
        return response

    # ------------------------------------------------------------------
    # Backend-specific implementation (override in subclasses)
    # ------------------------------------------------------------------

    @abstractmethod
    async def _call_api(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Return ``{"text": ..., "tokens_used": ..., "raw": ...}``.

        SDK exceptions should be translated into ``TurnFailure`` subclasses.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------

class OpenAIProvider(LLMProvider):
    """Async OpenAI provider using the ``openai>=1.0`` client."""

    name = "openai"
    base_url: str | None = None
    supports_json_mode = True

    def __init__(self, model: str = "gpt-4o", **kwargs: Any) -> None:
        kwargs.setdefault("api_key_env", "OPENAI_API_KEY")
        super().__init__(model=model, **kwargs)
        import openai
        self._client = openai.AsyncOpenAI(
            base_url=self.base_url,
            api_key=self.api_key,
            timeout=self.timeout,
            max_retries=0,
        )

    async def _call_api(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
        **kwargs: Any,
    ) -> dict[str, Any]:
        import openai

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
        except openai.APITimeoutError as exc:
            raise GatewayTimeout(self.timeout) from exc
        except openai.APIConnectionError as exc:
            raise TransportError(str(exc)) from exc
        except openai.APIStatusError as exc:
            raise ProviderError(exc.status_code, exc.message) from exc

        if not response.choices:
            return {"text": "", "tokens_used": 0, "raw": response.model_dump()}
        choice = response.choices[0]
        usage = response.usage
        return {
            "text": choice.message.content or "",
            "tokens_used": usage.total_tokens if usage else 0,
            "raw": response.model_dump(),
        }


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------

class AnthropicProvider(LLMProvider):
    """Async Anthropic provider using the ``anthropic>=0.18`` client."""

    name = "anthropic"

    def __init__(
        self, model: str = "claude-sonnet-4-5", **kwargs: Any
    ) -> None:
        kwargs.setdefault("api_key_env", "ANTHROPIC_API_KEY")
        super().__init__(model=model, **kwargs)
        import anthropic
        self._client = anthropic.AsyncAnthropic(
            api_key=self.api_key,
            timeout=self.timeout,
            max_retries=0,
        )

    async def _call_api(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
        **kwargs: Any,
    ) -> dict[str, Any]:
        import anthropic

        # Anthropic uses a separate system parameter
        system_msg = ""
        api_messages: list[ChatMessage] = []
        for msg in messages:
            if msg["role"] == "system":
                system_msg = msg["content"]
            else:
                api_messages.append(msg)

        create_kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": api_messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            **kwargs,
        }
        if system_msg:
            create_kwargs["system"] = system_msg

        try:
            response = await self._client.messages.create(**create_kwargs)
        except anthropic.APITimeoutError as exc:
            raise GatewayTimeout(self.timeout) from exc
        except anthropic.APIConnectionError as exc:
            raise TransportError(str(exc)) from exc
        except anthropic.APIStatusError as exc:
            raise ProviderError(exc.status_code, exc.message) from exc

        text_block = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        tokens = (response.usage.input_tokens + response.usage.output_tokens) if response.usage else 0
        return {
            "text": text_block,
            "tokens_used": tokens,
            "raw": response.model_dump() if hasattr(response, "model_dump") else {},
        }


# ---------------------------------------------------------------------------
# Cohere
# ---------------------------------------------------------------------------

class CohereProvider(LLMProvider):
    """Async Cohere provider using the ``cohere>=5.0`` client."""

    name = "cohere"
    supports_json_mode = True

    def __init__(self, model: str = "command-r-plus", **kwargs: Any) -> None:
        kwargs.setdefault("api_key_env", "COHERE_API_KEY")
        super().__init__(model=model, **kwargs)
        import cohere
        self._client = cohere.AsyncClientV2(api_key=self.api_key, timeout=self.timeout)

    async def _call_api(
        self,
        messages: list[ChatMessage],
        *,
        temperature: float,
        max_tokens: int,
        **kwargs: Any,
    ) -> dict[str, Any]:
        import httpx
        from cohere.core.api_error import ApiError

        try:
            response = await self._client.chat(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                request_options={"max_retries": 0},
                **kwargs,
            )
        except httpx.TimeoutException as exc:
            raise GatewayTimeout(self.timeout) from exc
        except httpx.TransportError as exc:
            raise TransportError(str(exc)) from exc
        except ApiError as exc:
            raise ProviderError(exc.status_code, str(exc.body)) from exc

        text = response.message.content[0].text if response.message and response.message.content else ""
        tokens = 0
        if response.usage and response.usage.tokens:
            tokens = int(
                (response.usage.tokens.input_tokens or 0)
                + (response.usage.tokens.output_tokens or 0)
            )
        return {
            "text": text,
            "tokens_used": tokens,
            "raw": response.model_dump() if hasattr(response, "model_dump") else {},
        }


# ---------------------------------------------------------------------------
# OpenRouter
# ---------------------------------------------------------------------------

class OpenRouterProvider(OpenAIProvider):
    """Async OpenRouter provider using the OpenAI-compatible API.

    OpenRouter provides unified access to multiple LLM providers through a
    single API key.  Model names use OpenRouter's format, e.g.:
    - "anthropic/claude-3-haiku"
    - "deepseek/deepseek-chat-v3-0324"
    - "meta-llama/llama-3.1-70b-instruct"
    """

    name = "openrouter"
    base_url = "https://openrouter.ai/api/v1"

    def __init__(
        self,
        model: str = "anthropic/claude-3-haiku",
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("api_key_env", "OPENROUTER_API_KEY")
        super().__init__(model=model, **kwargs)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_PROVIDERS: dict[str, type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "cohere": CohereProvider,
    "openrouter": OpenRouterProvider,
}


def create_provider(name: str, **kwargs: Any) -> LLMProvider:
    """Instantiate an LLM provider by its short name.

    >>> provider = create_provider("openrouter", model="anthropic/claude-3-haiku")
    """
    cls = _PROVIDERS.get(name.lower())
    if cls is None:
        raise ValueError(
            f"Unknown provider {name!r}. Choose from {list(_PROVIDERS)}"
        )
    return cls(**kwargs)
