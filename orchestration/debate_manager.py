"""DebateManager – orchestrates two-sided debates end-to-end.

Coordinates turn-taking, builds each turn's view of the transcript, turns
provider failures into concessions, and collects metrics.  Each call to
``run_debate`` returns an independent ``DebateRun`` owning its own
``RunState``; runs share nothing mutable and can be driven concurrently.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from agents.base import AgentResponse, DebateConfig, DebateState, Phase, Side, Utterance
from agents.debater import Debater
from agents.errors import EmptyResponse, TurnFailure
from evaluation.metrics import compute_all_metrics
from evaluation.validators import DebateValidator
from orchestration.protocols import DebateProtocol, create_protocol

logger = logging.getLogger(__name__)

UtteranceObserver = Callable[[Utterance, tuple[Utterance, ...]], None]


class TerminationReason(str, Enum):
    COMPLETED = "completed"
    CONCESSION = "concession"
    FAILURE = "failure"


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    CONCEDED = "conceded"
    FAILED = "failed"


@dataclass
class RunState:
    """Mutable state of one run; only ``DebateRun`` advances it."""

    current_round: int = 1
    current_side: Side = Side.PRO
    transcript: list[Utterance] = field(default_factory=list)
    terminated: bool = False
    termination_reason: TerminationReason | None = None
    conceded_by: Side | None = None

    @property
    def status(self) -> RunStatus:
        if not self.terminated:
            return RunStatus.RUNNING
        if self.termination_reason is TerminationReason.COMPLETED:
            return RunStatus.COMPLETED
        if self.termination_reason is TerminationReason.CONCESSION:
            return RunStatus.CONCEDED
        return RunStatus.FAILED

    def terminate(self, reason: TerminationReason, conceded_by: Side | None = None) -> None:
        self.terminated = True
        self.termination_reason = reason
        self.conceded_by = conceded_by


@dataclass
class DebateResult:
    """Aggregated outcome of a finished debate run."""

    topic: str
    total_rounds: int
    protocol: str
    transcript: tuple[Utterance, ...]
    termination_reason: TerminationReason
    conceded_by: Side | None = None
    responses: list[AgentResponse] = field(default_factory=list)
    metrics: dict[str, Any] = field(default_factory=dict)

    @property
    def status(self) -> RunStatus:
        return {
            TerminationReason.COMPLETED: RunStatus.COMPLETED,
            TerminationReason.CONCESSION: RunStatus.CONCEDED,
            TerminationReason.FAILURE: RunStatus.FAILED,
        }[self.termination_reason]

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic": self.topic,
            "total_rounds": self.total_rounds,
            "protocol": self.protocol,
            "status": self.status.value,
            "termination_reason": self.termination_reason.value,
            "conceded_by": self.conceded_by.value if self.conceded_by else None,
            "transcript": [u.to_dict() for u in self.transcript],
            "metrics": self.metrics,
        }


class DebateRun:
    """One in-memory debate, advanced one turn at a time.

    Iterate with ``async for utterance in run`` or call ``step()`` directly
    to pass a per-turn ``opponent_surrendered`` override.
    """

    def __init__(
        self,
        config: DebateConfig,
        debaters: dict[Side, Debater],
        protocol: DebateProtocol,
        *,
        turn_timeout: float,
        closing_timeout: float,
        validator: DebateValidator,
        on_utterance: UtteranceObserver | None = None,
    ) -> None:
        self.config = config
        self.protocol = protocol
        self._debaters = debaters
        self._turn_timeout = turn_timeout
        self._closing_timeout = closing_timeout
        self._validator = validator
        self._on_utterance = on_utterance

        self.state = RunState(current_side=protocol.first_speaker(1))
        self.responses: list[AgentResponse] = []
        self._turns_taken = 0
        self._spoken_this_round = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def transcript(self) -> tuple[Utterance, ...]:
        return tuple(self.state.transcript)

    @property
    def terminated(self) -> bool:
        return self.state.terminated

    @property
    def status(self) -> RunStatus:
        return self.state.status

    @property
    def termination_reason(self) -> TerminationReason | None:
        return self.state.termination_reason

    @property
    def conceded_by(self) -> Side | None:
        return self.state.conceded_by

    def __aiter__(self) -> AsyncIterator[Utterance]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Utterance]:
        while not self.state.terminated:
            utterance = await self.step()
            if utterance is not None:
                yield utterance

    async def step(self, *, opponent_surrendered: bool = False) -> Utterance | None:
        """Take one turn for the current side and return the appended utterance.

        With ``opponent_surrendered`` the current side concedes without a
        provider call.  Returns ``None`` once the run has terminated.
        """
        state = self.state
        if state.terminated:
            return None
        if self._turns_taken >= self.protocol.max_turns(self.config.total_rounds):
            self._finish(TerminationReason.COMPLETED)
            return None

        side = state.current_side
        debater = self._debaters[side]
        turn_state = DebateState.from_transcript(
            self.config,
            state.transcript,
            side,
            state.current_round,
            phase=self.protocol.phase(state.current_round, self.config.total_rounds),
        )
        self._turns_taken += 1

        if opponent_surrendered:
            logger.info("[Round %d] %s concedes by request", state.current_round, side.label)
            utterance = Utterance(
                side=side,
                text=debater.surrender_message(),
                round=state.current_round,
                is_concession=True,
            )
            self._append(utterance)
            self._finish(TerminationReason.CONCESSION, side)
            return utterance

        logger.info(
            "[Round %d/%d] %s %s turn",
            state.current_round,
            self.config.total_rounds,
            side.label,
            turn_state.phase.value,
        )
        try:
            response = await debater.process_turn(turn_state, timeout=self._timeout_for(turn_state))
        except (TurnFailure, EmptyResponse) as exc:
            logger.warning(
                "[Round %d] %s turn failed (%s: %s); ending debate",
                state.current_round,
                side.label,
                type(exc).__name__,
                exc,
            )
            utterance = Utterance(
                side=side,
                text=debater.failure_notice(),
                round=state.current_round,
                is_concession=True,
            )
            self._append(utterance)
            self._finish(TerminationReason.FAILURE, side)
            return utterance

        self.responses.append(response)
        check = self._validator.validate_response(response.content, turn_state)
        if not check:
            response.metadata["issues"] = check.issues

        utterance = Utterance(side=side, text=response.content, round=state.current_round)
        self._append(utterance)
        logger.info(
            "[Round %d] %s (%s/%s): %s",
            state.current_round,
            side.label,
            response.provider,
            response.model,
            utterance.text[:80] + "…" if len(utterance.text) > 80 else utterance.text,
        )
        self._advance()
        return utterance

    def result(self) -> DebateResult:
        """Summarise the finished run."""
        if not self.state.terminated:
            raise RuntimeError("Debate run has not terminated yet")
        transcript = self.transcript
        metrics = compute_all_metrics(transcript, self.responses, topic=self.config.topic)
        return DebateResult(
            topic=self.config.topic,
            total_rounds=self.config.total_rounds,
            protocol=self.protocol.name,
            transcript=transcript,
            termination_reason=self.state.termination_reason,
            conceded_by=self.state.conceded_by,
            responses=list(self.responses),
            metrics=metrics.to_dict(),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _timeout_for(self, turn_state: DebateState) -> float:
        if turn_state.phase is Phase.CLOSING:
            return self._closing_timeout
        return self._turn_timeout

    def _append(self, utterance: Utterance) -> None:
        self.state.transcript.append(utterance)
        if self._on_utterance is not None:
            self._on_utterance(utterance, self.transcript)

    def _advance(self) -> None:
        """Move to the next speaker, and to the next round once both have spoken."""
        state = self.state
        self._spoken_this_round += 1
        if self._spoken_this_round < 2:
            state.current_side = self.protocol.turn_order(state.current_round)[1]
            return

        self._spoken_this_round = 0
        state.current_round += 1
        if state.current_round > self.config.total_rounds:
            self._finish(TerminationReason.COMPLETED)
            return
        state.current_side = self.protocol.first_speaker(state.current_round)

    def _finish(self, reason: TerminationReason, conceded_by: Side | None = None) -> None:
        self.state.terminate(reason, conceded_by)
        logger.info(
            "Debate on '%s' ended: %s after %d utterances",
            self.config.topic,
            reason.value,
            len(self.state.transcript),
        )
        for issue in self._validator.validate_transcript(self.transcript, self.config).issues:
            logger.warning("Transcript invariant violated: %s", issue)


class DebateManager:
    """High-level controller that runs PRO-vs-CON debates.

    Parameters
    ----------
    pro, con : Debater
        The two personas; each must be bound to the matching side.
    protocol : str | DebateProtocol
        Turn-taking strategy.
    turn_timeout : float
        Deadline in seconds for opening and rebuttal turns.
    closing_timeout : float
        Deadline in seconds for closing turns.
    """

    def __init__(
        self,
        pro: Debater,
        con: Debater,
        *,
        protocol: str | DebateProtocol = "pro_first",
        turn_timeout: float = 20.0,
        closing_timeout: float = 25.0,
        validator: DebateValidator | None = None,
    ) -> None:
        if pro.side is not Side.PRO or con.side is not Side.CON:
            raise ValueError("DebateManager needs a PRO debater and a CON debater")
        self.debaters = {Side.PRO: pro, Side.CON: con}
        self.protocol: DebateProtocol = (
            create_protocol(protocol) if isinstance(protocol, str) else protocol
        )
        self.turn_timeout = turn_timeout
        self.closing_timeout = closing_timeout
        self.validator = validator or DebateValidator()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run_debate(
        self,
        config: DebateConfig,
        on_utterance: UtteranceObserver | None = None,
    ) -> DebateRun:
        """Start a fresh run for *config*; nothing executes until it is iterated."""
        logger.info(
            "Starting debate: '%s' [%s, %d rounds]",
            config.topic,
            self.protocol.name,
            config.total_rounds,
        )
        return DebateRun(
            config,
            self.debaters,
            self.protocol,
            turn_timeout=self.turn_timeout,
            closing_timeout=self.closing_timeout,
            validator=self.validator,
            on_utterance=on_utterance,
        )

    async def run_to_completion(
        self,
        config: DebateConfig,
        on_utterance: UtteranceObserver | None = None,
    ) -> DebateResult:
        """Drive a run to termination and return its result."""
        run = self.run_debate(config, on_utterance=on_utterance)
        async for _ in run:
            pass
        return run.result()
