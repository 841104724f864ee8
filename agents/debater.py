"""Debater agent – argues one fixed side of the motion for the whole run."""

from __future__ import annotations

import logging

from agents.base import AgentResponse, AgentRole, BaseAgent, DebateState, Side
from agents.llm_provider import LLMProvider
from agents.normalizer import normalize
from agents.prompts import build_strategy, build_turn_prompt

logger = logging.getLogger(__name__)

# Fixed replies used when a side yields the floor without calling the model.
SURRENDER_MESSAGES: dict[Side, str] = {
    Side.PRO: "I concede the point - your arguments are compelling.",
    Side.CON: "I yield - your position is stronger in this debate.",
}

FAILURE_NOTICE = "Response failed. The {side} side forfeits the debate."


class Debater(BaseAgent):
    """Persona bound to one ``Side``; builds, sends and cleans each turn."""

    def __init__(
        self,
        side: Side,
        provider: LLMProvider,
        *,
        agent_id: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 250,
    ) -> None:
        super().__init__(
            role=AgentRole(side.value.lower()),
            provider=provider,
            agent_id=agent_id,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        self.side = side

    async def process_turn(
        self, state: DebateState, *, timeout: float | None = None
    ) -> AgentResponse:
        """Produce one normalised utterance for *state*.

        Raises ``TurnFailure`` if the provider fails and ``EmptyResponse`` if
        nothing survives normalisation.
        """
        if state.side is not self.side:
            raise ValueError(f"{self!r} cannot speak for the {state.side.label} side")

        instruction = build_strategy(state)
        response = await self.generate_response(
            instruction,
            build_turn_prompt(state),
            timeout=timeout,
            round_number=state.round,
        )
        response.content = normalize(response.content, state.phase)
        response.metadata["phase"] = state.phase.value
        return response

    def surrender_message(self) -> str:
        return SURRENDER_MESSAGES[self.side]

    def failure_notice(self) -> str:
        return FAILURE_NOTICE.format(side=self.side.label)
