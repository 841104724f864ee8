"""Validators for debate responses and finished transcripts."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from agents.base import DebateConfig, DebateState, Utterance

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Outcome of a validation check."""

    valid: bool
    issues: list[str]

    def __bool__(self) -> bool:
        return self.valid


class DebateValidator:
    """Checks responses and transcripts against the debate rules."""

    def __init__(
        self,
        min_response_length: int = 20,
        max_response_length: int = 2000,
    ) -> None:
        self.min_response_length = min_response_length
        self.max_response_length = max_response_length

    def validate_response(self, text: str, state: DebateState) -> ValidationResult:
        """Check one normalised utterance before it joins the transcript."""
        issues: list[str] = []

        content_len = len(text.strip())
        if content_len < self.min_response_length:
            issues.append(
                f"Response too short ({content_len} chars, "
                f"minimum {self.min_response_length})"
            )
        if content_len > self.max_response_length:
            issues.append(
                f"Response too long ({content_len} chars, "
                f"maximum {self.max_response_length})"
            )

        # Restating the opponent verbatim
        normalized = " ".join(text.lower().split())
        for previous in state.opponent_arguments:
            if " ".join(previous.lower().split()) == normalized:
                issues.append(
                    f"Response repeats a {state.side.opponent.label} argument verbatim"
                )
                break

        if issues:
            logger.warning(
                "Validation failed for %s (round %d): %s",
                state.side.label,
                state.round,
                "; ".join(issues),
            )

        return ValidationResult(valid=len(issues) == 0, issues=issues)

    def validate_transcript(
        self,
        transcript: Sequence[Utterance],
        config: DebateConfig,
    ) -> ValidationResult:
        """Check the structural invariants of a finished transcript."""
        issues: list[str] = []

        limit = 2 * config.total_rounds
        if len(transcript) > limit:
            issues.append(f"{len(transcript)} utterances exceed the limit of {limit}")

        previous_round = 0
        for index, utterance in enumerate(transcript):
            if utterance.round < previous_round:
                issues.append(
                    f"Utterance {index + 1} goes back to round {utterance.round}"
                )
            if not 1 <= utterance.round <= config.total_rounds:
                issues.append(
                    f"Utterance {index + 1} has round {utterance.round} outside "
                    f"1..{config.total_rounds}"
                )
            if utterance.is_concession and index != len(transcript) - 1:
                issues.append(f"Concession at utterance {index + 1} is not the last turn")
            previous_round = utterance.round

        return ValidationResult(valid=len(issues) == 0, issues=issues)
