"""Core debate types and the provider-agnostic base agent.

Every debate participant inherits from ``BaseAgent`` which provides:
- A single provider-agnostic ``generate_response`` call with a deadline
- Automatic token tracking and structured response types

The value types (``Side``, ``Phase``, ``Utterance``, ``DebateConfig`` and
``DebateState``) are shared by the debaters, the judge and the orchestrator.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from agents.errors import InvalidConfig
from agents.llm_provider import ChatMessage, LLMProvider, LLMResponse

logger = logging.getLogger(__name__)

MIN_ROUNDS = 1
MAX_ROUNDS = 5

NO_PREVIOUS_ARGUMENTS = "No previous arguments"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Side(str, Enum):
    """The two fixed debate positions."""

    PRO = "PRO"
    CON = "CON"

    @property
    def label(self) -> str:
        return self.value

    @property
    def opponent(self) -> Side:
        return Side.CON if self is Side.PRO else Side.PRO


class Phase(str, Enum):
    """Debate phase; governs the prompt strategy and normalisation."""

    OPENING = "opening"
    REBUTTAL = "rebuttal"
    CLOSING = "closing"

    @classmethod
    def for_round(cls, round_number: int, total_rounds: int) -> Phase:
        # Opening wins when round 1 is also the final round.
        if round_number == 1:
            return cls.OPENING
        if round_number == total_rounds:
            return cls.CLOSING
        return cls.REBUTTAL


class AgentRole(str, Enum):
    """Well-known roles in the debate system."""

    PRO = "pro"
    CON = "con"
    JUDGE = "judge"


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Utterance:
    """One contribution to the debate transcript."""

    side: Side
    text: str
    round: int
    is_concession: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "side": self.side.value,
            "text": self.text,
            "round": self.round,
            "isConcession": self.is_concession,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Utterance:
        return cls(
            side=Side(data["side"]),
            text=data["text"],
            round=int(data["round"]),
            is_concession=bool(data.get("isConcession", False)),
        )


@dataclass(frozen=True)
class DebateConfig:
    """Immutable input to a debate run."""

    topic: str
    total_rounds: int = 3

    def __post_init__(self) -> None:
        if not isinstance(self.topic, str) or not self.topic.strip():
            raise InvalidConfig("A debate topic is required")
        if (
            isinstance(self.total_rounds, bool)
            or not isinstance(self.total_rounds, int)
            or not MIN_ROUNDS <= self.total_rounds <= MAX_ROUNDS
        ):
            raise InvalidConfig(
                f"total_rounds must be an integer between {MIN_ROUNDS} and "
                f"{MAX_ROUNDS}, got {self.total_rounds!r}"
            )


@dataclass(frozen=True)
class DebateState:
    """Snapshot of the debate visible to a debater when it takes a turn."""

    topic: str
    side: Side
    phase: Phase
    round: int
    total_rounds: int
    own_arguments: tuple[str, ...] = ()
    opponent_arguments: tuple[str, ...] = ()
    last_opponent_utterance: str = NO_PREVIOUS_ARGUMENTS

    @classmethod
    def from_transcript(
        cls,
        config: DebateConfig,
        transcript: tuple[Utterance, ...] | list[Utterance],
        side: Side,
        round_number: int,
        phase: Phase | None = None,
    ) -> DebateState:
        """Build the view *side* sees on its turn in *round_number*.

        *phase* defaults to ``Phase.for_round``; a protocol may supply its own.
        """
        own = tuple(u.text for u in transcript if u.side is side)
        opponent = tuple(u.text for u in transcript if u.side is not side)
        return cls(
            topic=config.topic,
            side=side,
            phase=phase or Phase.for_round(round_number, config.total_rounds),
            round=round_number,
            total_rounds=config.total_rounds,
            own_arguments=own,
            opponent_arguments=opponent,
            last_opponent_utterance=opponent[-1] if opponent else NO_PREVIOUS_ARGUMENTS,
        )


@dataclass
class AgentResponse:
    """Structured response emitted by an agent on each turn."""

    agent_id: str
    role: AgentRole
    content: str
    round: int
    tokens_used: int
    provider: str
    model: str
    latency_ms: float
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    metadata: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# BaseAgent
# ---------------------------------------------------------------------------

class BaseAgent:
    """Provider-agnostic base class for every debate agent.

    Agents keep no conversation memory: everything a turn needs is rebuilt
    from the transcript and sent as one system instruction.

    Parameters
    ----------
    role : AgentRole
        The functional role this agent plays in the debate.
    provider : LLMProvider
        The LLM backend used for generation.
    agent_id : str | None
        Unique identifier; auto-generated if not supplied.
    temperature : float
        Sampling temperature forwarded to the provider.
    max_tokens : int
        Max output tokens forwarded to the provider.
    """

    role: AgentRole

    def __init__(
        self,
        *,
        role: AgentRole,
        provider: LLMProvider,
        agent_id: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 250,
    ) -> None:
        self.agent_id = agent_id or f"{role.value}_{uuid.uuid4().hex[:8]}"
        self.role = role
        self.provider = provider
        self.temperature = temperature
        self.max_tokens = max_tokens

        self._total_tokens_used: int = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate_response(
        self,
        instruction: str,
        prompt: str,
        *,
        timeout: float | None = None,
        round_number: int = 0,
        **kwargs: Any,
    ) -> AgentResponse:
        """Send *instruction* as the system message plus *prompt* and return the reply.

        Provider failures propagate unchanged as ``TurnFailure`` subclasses.
        """
        messages = self._build_messages(instruction, prompt)
        llm_resp: LLMResponse = await self.provider.generate(
            messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=timeout,
            **kwargs,
        )
        self._total_tokens_used += llm_resp.tokens_used

        return AgentResponse(
            agent_id=self.agent_id,
            role=self.role,
            content=llm_resp.text,
            round=round_number,
            tokens_used=llm_resp.tokens_used,
            provider=llm_resp.provider,
            model=llm_resp.model,
            latency_ms=llm_resp.latency_ms,
        )

    def _build_messages(self, instruction: str, prompt: str) -> list[ChatMessage]:
        """Assemble the message list for the provider."""
        return [
            {"role": "system", "content": instruction},
            {"role": "user", "content": prompt},
        ]

    @property
    def total_tokens_used(self) -> int:
        return self._total_tokens_used

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.agent_id!r}, "
            f"role={self.role.value!r}, provider={self.provider})"
        )
