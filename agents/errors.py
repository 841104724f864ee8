"""Exception hierarchy shared by the debate engine.

``TurnFailure`` subclasses are raised by LLM providers; the orchestrator turns
them into a concession rather than letting them escape a run.
``MalformedVerdict`` never leaves the judge, which degrades to a draw instead.
"""

from __future__ import annotations


class DebateError(Exception):
    """Base class for all debate engine errors."""


class InvalidConfig(DebateError, ValueError):
    """Debate configuration rejected before any provider call."""


# ---------------------------------------------------------------------------
# Gateway failures
# ---------------------------------------------------------------------------

class TurnFailure(DebateError):
    """A provider call did not produce a usable completion."""


class GatewayTimeout(TurnFailure):
    """The provider did not answer before the deadline."""

    def __init__(self, timeout: float | None) -> None:
        self.timeout = timeout
        super().__init__(f"No completion within {timeout}s")


class TransportError(TurnFailure):
    """Network or client-level fault talking to the provider."""


class ProviderError(TurnFailure):
    """The provider answered with an error status."""

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(f"Provider error {status}: {message}")


class EmptyCompletion(TurnFailure):
    """The provider returned a blank completion."""


# ---------------------------------------------------------------------------
# Content failures
# ---------------------------------------------------------------------------

class EmptyResponse(DebateError):
    """Normalised debate text was blank."""


class MalformedVerdict(DebateError):
    """Judge output did not satisfy the verdict schema."""
