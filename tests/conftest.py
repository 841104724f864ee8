"""Shared fixtures for the test suite.

Provides a MockProvider that scripts LLM replies, failures and stalls without
network calls, plus pre-built debaters, judges and transcripts.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import pytest

from agents.base import DebateConfig, Side, Utterance
from agents.debater import Debater
from agents.judge import Judge
from agents.llm_provider import LLMProvider
from orchestration.debate_manager import DebateManager


# ---------------------------------------------------------------------------
# Mock LLM provider
# ---------------------------------------------------------------------------

@dataclass
class Stall:
    """Scripted reply that sleeps before answering (or past the deadline)."""

    seconds: float
    text: str = "A delayed but otherwise ordinary argument about the topic."


class MockProvider(LLMProvider):
    """Deterministic mock provider for testing – no network calls.

    Each scripted item is either reply text, an exception instance to raise,
    or a ``Stall``.  Items are consumed in order and cycle when exhausted.
    """

    name = "mock"
    supports_json_mode = True

    def __init__(
        self,
        model: str = "mock-v1",
        responses: list[Any] | None = None,
        **kwargs: Any,
    ) -> None:
        # Bypass API-key validation
        self.model = model
        self.timeout = kwargs.get("timeout", 30)
        self.api_key = "mock-key"

        self._responses = responses or [
            "Regulation protects the public. Studies show unchecked systems "
            "cause measurable harm, and my opponent overlooks this evidence."
        ]
        self._call_count = 0
        self.call_log: list[dict[str, Any]] = []

    async def _call_api(
        self,
        messages,
        *,
        temperature: float,
        max_tokens: int,
        **kwargs: Any,
    ) -> dict[str, Any]:
        item = self._responses[self._call_count % len(self._responses)]
        self._call_count += 1
        self.call_log.append(
            {
                "messages": messages,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "kwargs": kwargs,
            }
        )
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, Stall):
            await asyncio.sleep(item.seconds)
            item = item.text
        return {"text": item, "tokens_used": len(item.split()) * 2, "raw": {}}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def config() -> DebateConfig:
    return DebateConfig(topic="Should AI be regulated?", total_rounds=3)


def make_manager(provider: LLMProvider, **kwargs: Any) -> DebateManager:
    """Manager whose two debaters share *provider*, so replies alternate PRO/CON."""
    return DebateManager(
        Debater(Side.PRO, provider),
        Debater(Side.CON, provider),
        **kwargs,
    )


@pytest.fixture
def manager(mock_provider: MockProvider) -> DebateManager:
    return make_manager(mock_provider)


@pytest.fixture
def judge_provider() -> MockProvider:
    return MockProvider(
        responses=[
            '{"winner": "PRO", "score": "2-1", "commentary": "PRO engaged '
            'more directly with the evidence.", "roundsWon": {"pro": 2, "con": 1}}'
        ]
    )


@pytest.fixture
def judge(judge_provider: MockProvider) -> Judge:
    return Judge(judge_provider)


@pytest.fixture
def sample_transcript() -> list[Utterance]:
    """A completed three-round debate."""
    return [
        Utterance(Side.PRO, "AI regulation is essential.\n\n• It prevents harm.\n\n• It builds trust.", 1),
        Utterance(Side.CON, "Regulation would stifle innovation and entrench incumbents.", 1),
        Utterance(Side.PRO, "However, my opponent overlooks how safety rules enabled aviation to grow.", 2),
        Utterance(Side.CON, "This fails because aviation is not software; rules there took decades.", 2),
        Utterance(Side.PRO, "Therefore, sensible rules make AI trustworthy and widely adopted!", 3),
        Utterance(Side.CON, "Therefore, flexible norms beat rigid laws for a fast-moving field!", 3),
    ]
