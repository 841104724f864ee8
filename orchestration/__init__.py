"""Orchestration layer – debate runs and turn-taking protocols."""

from orchestration.debate_manager import (
    DebateManager,
    DebateResult,
    DebateRun,
    RunState,
    RunStatus,
    TerminationReason,
)
from orchestration.protocols import (
    DebateProtocol,
    AlternatingProtocol,
    SwappingProtocol,
    create_protocol,
)

__all__ = [
    "DebateManager",
    "DebateResult",
    "DebateRun",
    "RunState",
    "RunStatus",
    "TerminationReason",
    "DebateProtocol",
    "AlternatingProtocol",
    "SwappingProtocol",
    "create_protocol",
]
