"""Tests for evaluation metrics."""

from __future__ import annotations

from agents.base import AgentResponse, AgentRole, Side, Utterance
from evaluation.metrics import (
    DebateMetrics,
    argument_diversity_score,
    compute_all_metrics,
    rebuttal_engagement_score,
    relevance_score,
)


def _response(tokens: int, latency: float) -> AgentResponse:
    return AgentResponse(
        agent_id="a", role=AgentRole.PRO, content="text", round=1,
        tokens_used=tokens, provider="p", model="m", latency_ms=latency,
    )


class TestRelevanceScore:
    def test_neutral_without_topic(self, sample_transcript):
        assert relevance_score(sample_transcript) == 0.5

    def test_on_topic_scores_higher(self):
        topic = "Should AI be regulated?"
        on_topic = [Utterance(Side.PRO, "AI must be regulated now.", 1)]
        off_topic = [Utterance(Side.PRO, "Cats are lovely pets.", 1)]
        assert relevance_score(on_topic, topic) > relevance_score(off_topic, topic)

    def test_concessions_ignored(self):
        transcript = [Utterance(Side.PRO, "I yield.", 1, is_concession=True)]
        assert relevance_score(transcript, "AI rules") == 0.5


class TestArgumentDiversity:
    def test_empty(self):
        assert argument_diversity_score([]) == 0.0

    def test_repetition_scores_lower(self):
        repeated = [Utterance(Side.PRO, "rules rules rules rules", 1)]
        varied = [Utterance(Side.PRO, "rules build public trust", 1)]
        assert argument_diversity_score(repeated) < argument_diversity_score(varied)


class TestRebuttalEngagement:
    def test_sample(self, sample_transcript):
        score = rebuttal_engagement_score(sample_transcript)
        assert 0.0 < score <= 1.0

    def test_single_utterance(self):
        assert rebuttal_engagement_score([Utterance(Side.PRO, "Opening.", 1)]) == 0.0


class TestComputeAll:
    def test_returns_metrics(self, sample_transcript):
        metrics = compute_all_metrics(sample_transcript, topic="Should AI be regulated?")
        assert isinstance(metrics, DebateMetrics)
        assert metrics.rounds_completed == 3
        assert metrics.total_utterances == 6
        assert metrics.side_participation == {"PRO": 3, "CON": 3}
        assert not metrics.conceded

    def test_response_totals(self, sample_transcript):
        metrics = compute_all_metrics(sample_transcript, [_response(10, 100), _response(30, 300)])
        assert metrics.total_tokens == 40
        assert metrics.avg_latency_ms == 200

    def test_empty_transcript(self):
        metrics = compute_all_metrics([])
        assert metrics.rounds_completed == 0
        assert metrics.avg_response_length == 0.0

    def test_to_dict_structure(self, sample_transcript):
        d = compute_all_metrics(sample_transcript).to_dict()
        assert set(d) == {"quality", "process", "outcome"}
        assert "relevance" in d["quality"]
        assert d["outcome"]["conceded"] is False
