"""Debate process and quality metrics.

Process metrics come straight from the transcript and provider responses;
quality metrics are cheap lexical heuristics, not judgements.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from agents.base import AgentResponse, Side, Utterance
from agents.normalizer import OPPOSITION_KEYWORDS


# ---------------------------------------------------------------------------
# Data container
# ---------------------------------------------------------------------------

@dataclass
class DebateMetrics:
    """Collection of quality and process metrics for a debate."""

    # Quality
    relevance: float = 0.0
    argument_diversity: float = 0.0
    rebuttal_engagement: float = 0.0

    # Process
    rounds_completed: int = 0
    total_utterances: int = 0
    side_participation: dict[str, int] = field(default_factory=dict)
    avg_response_length: float = 0.0
    total_tokens: int = 0
    avg_latency_ms: float = 0.0

    # Outcome
    conceded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "quality": {
                "relevance": round(self.relevance, 3),
                "argument_diversity": round(self.argument_diversity, 3),
                "rebuttal_engagement": round(self.rebuttal_engagement, 3),
            },
            "process": {
                "rounds_completed": self.rounds_completed,
                "total_utterances": self.total_utterances,
                "side_participation": self.side_participation,
                "avg_response_length": round(self.avg_response_length, 1),
                "total_tokens": self.total_tokens,
                "avg_latency_ms": round(self.avg_latency_ms, 1),
            },
            "outcome": {
                "conceded": self.conceded,
            },
        }


# ---------------------------------------------------------------------------
# Individual metric functions
# ---------------------------------------------------------------------------

_STOP_WORDS = {"the", "a", "an", "is", "are", "be", "should", "of", "in", "to", "and", "or", "for"}


def relevance_score(transcript: Sequence[Utterance], topic: str = "") -> float:
    """Estimate how on-topic the debate stayed from topic keyword overlap."""
    argued = [u for u in transcript if not u.is_concession]
    if not argued or not topic:
        return 0.5  # neutral if nothing to compare

    topic_words = {w.strip("?.,!").lower() for w in topic.split()} - _STOP_WORDS
    topic_words.discard("")
    if not topic_words:
        return 0.5

    scores: list[float] = []
    for utterance in argued:
        words = {w.strip("?.,!;:").lower() for w in utterance.text.split()}
        overlap = len(topic_words & words)
        scores.append(min(1.0, overlap / len(topic_words)))

    return sum(scores) / len(scores)


def argument_diversity_score(transcript: Sequence[Utterance]) -> float:
    """Type-token ratio over all argued text, scaled so 0.5 maps to 1.0."""
    all_words: list[str] = []
    for utterance in transcript:
        if not utterance.is_concession:
            all_words.extend(utterance.text.lower().split())

    if not all_words:
        return 0.0

    ttr = len(set(all_words)) / len(all_words)
    return min(1.0, ttr * 2)


def rebuttal_engagement_score(transcript: Sequence[Utterance]) -> float:
    """Fraction of replies (every turn after the first) using opposition language."""
    replies = [u for u in transcript[1:] if not u.is_concession]
    if not replies:
        return 0.0
    engaged = sum(
        1 for u in replies if any(k in u.text.lower() for k in OPPOSITION_KEYWORDS)
    )
    return engaged / len(replies)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

def compute_all_metrics(
    transcript: Sequence[Utterance],
    responses: Sequence[AgentResponse] = (),
    topic: str = "",
) -> DebateMetrics:
    """Compute the full suite of debate metrics."""
    participation = {side.value: 0 for side in Side}
    for utterance in transcript:
        participation[utterance.side.value] += 1

    avg_len = sum(len(u.text) for u in transcript) / max(len(transcript), 1)
    avg_latency = sum(r.latency_ms for r in responses) / max(len(responses), 1)

    return DebateMetrics(
        relevance=relevance_score(transcript, topic),
        argument_diversity=argument_diversity_score(transcript),
        rebuttal_engagement=rebuttal_engagement_score(transcript),
        rounds_completed=max((u.round for u in transcript), default=0),
        total_utterances=len(transcript),
        side_participation=participation,
        avg_response_length=avg_len,
        total_tokens=sum(r.tokens_used for r in responses),
        avg_latency_ms=avg_latency,
        conceded=any(u.is_concession for u in transcript),
    )
