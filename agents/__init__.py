"""AI debate arena - debaters, judge and LLM providers."""

from agents.base import (
    AgentResponse,
    AgentRole,
    BaseAgent,
    DebateConfig,
    DebateState,
    Phase,
    Side,
    Utterance,
)
from agents.debater import Debater
from agents.judge import Judge, Verdict, Winner
from agents.llm_provider import (
    LLMProvider,
    OpenAIProvider,
    AnthropicProvider,
    CohereProvider,
    OpenRouterProvider,
    create_provider,
)

__all__ = [
    "AgentResponse",
    "AgentRole",
    "BaseAgent",
    "DebateConfig",
    "DebateState",
    "Debater",
    "Judge",
    "Phase",
    "Side",
    "Utterance",
    "Verdict",
    "Winner",
    "LLMProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "CohereProvider",
    "OpenRouterProvider",
    "create_provider",
]
