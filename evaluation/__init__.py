"""Evaluation framework – metrics and validators."""

from evaluation.metrics import (
    DebateMetrics,
    compute_all_metrics,
    relevance_score,
    argument_diversity_score,
    rebuttal_engagement_score,
)
from evaluation.validators import DebateValidator, ValidationResult

__all__ = [
    "DebateMetrics",
    "DebateValidator",
    "ValidationResult",
    "argument_diversity_score",
    "compute_all_metrics",
    "rebuttal_engagement_score",
    "relevance_score",
]
