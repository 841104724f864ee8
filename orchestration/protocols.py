"""Debate protocols – turn-taking strategies for a two-sided debate.

A protocol decides which side opens each round and which phase a round
belongs to.  The orchestrator asks it for both on every turn and never
hard-codes either.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from agents.base import Phase, Side


class DebateProtocol(ABC):
    """Abstract turn-taking strategy."""

    name: str

    @abstractmethod
    def turn_order(self, round_number: int) -> tuple[Side, Side]:
        """Return the two sides in speaking order for *round_number*."""
        ...

    def phase(self, round_number: int, total_rounds: int) -> Phase:
        return Phase.for_round(round_number, total_rounds)

    def first_speaker(self, round_number: int) -> Side:
        return self.turn_order(round_number)[0]

    def max_turns(self, total_rounds: int) -> int:
        """Upper bound on turns for a run of *total_rounds* rounds."""
        return 2 * total_rounds

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class AlternatingProtocol(DebateProtocol):
    """The same side opens every round; speakers alternate within it.

    ``AlternatingProtocol(Side.PRO)`` gives PRO, CON, PRO, CON, ...
    """

    def __init__(self, opening_side: Side = Side.PRO) -> None:
        self.opening_side = opening_side
        self.name = f"{opening_side.value.lower()}_first"

    def turn_order(self, round_number: int) -> tuple[Side, Side]:
        return (self.opening_side, self.opening_side.opponent)


class SwappingProtocol(DebateProtocol):
    """The opening side swaps each round so neither side always speaks first.

    Rounds go PRO/CON, then CON/PRO, and so on.  The side that speaks last in
    a round therefore also speaks first in the next one.
    """

    name = "swapping"

    def __init__(self, opening_side: Side = Side.PRO) -> None:
        self.opening_side = opening_side

    def turn_order(self, round_number: int) -> tuple[Side, Side]:
        first = self.opening_side if round_number % 2 == 1 else self.opening_side.opponent
        return (first, first.opponent)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_PROTOCOLS = {
    "pro_first": lambda: AlternatingProtocol(Side.PRO),
    "con_first": lambda: AlternatingProtocol(Side.CON),
    "swapping": lambda: SwappingProtocol(Side.PRO),
}

PROTOCOL_NAMES = tuple(_PROTOCOLS)


def create_protocol(name: str) -> DebateProtocol:
    """Instantiate a protocol by name."""
    factory = _PROTOCOLS.get(name)
    if factory is None:
        raise ValueError(
            f"Unknown protocol {name!r}. Choose from {list(_PROTOCOLS)}"
        )
    return factory()
