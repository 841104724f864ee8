"""Phase-aware system instructions for the debaters.

``build_strategy`` is a pure function of the turn's ``DebateState``.  It only
ever quotes opponent *utterances*; the opposing persona's own instructions are
never visible to the other side.
"""

from __future__ import annotations

from agents.base import DebateState, Phase, Side

_STANCE = {
    Side.PRO: "supporting",
    Side.CON: "opposing",
}

_STAY_IN_CHARACTER = (
    "Never break character, never concede, and always maintain your "
    "{side} position."
)


def format_arguments(arguments: tuple[str, ...] | list[str]) -> str:
    """Render arguments as a numbered list, or a placeholder when empty."""
    if not arguments:
        return "(none yet)"
    return "\n".join(f"{i}. {text}" for i, text in enumerate(arguments, start=1))


def opening_strategy(state: DebateState) -> str:
    side = state.side.label
    return (
        f'You are the {side} side in a debate about "{state.topic}", '
        f"{_STANCE[state.side]} the motion. Present your OPENING ARGUMENT with:\n"
        f"1. A clear thesis statement {_STANCE[state.side]} the topic (1 sentence)\n"
        f"2. Two or three original supporting points (mark each with •)\n"
        f"3. One illustrative example\n"
        f"4. A confident concluding statement (1 sentence)\n\n"
        f"Keep the response to 4-5 sentences. "
        + _STAY_IN_CHARACTER.format(side=side)
    )


def rebuttal_strategy(state: DebateState) -> str:
    side = state.side.label
    opponent = state.side.opponent.label
    return (
        f'You are the {side} side in a debate about "{state.topic}", '
        f"{_STANCE[state.side]} the motion. This is round "
        f"{state.round} of {state.total_rounds}: REBUTTAL.\n\n"
        f"{opponent} arguments so far:\n{format_arguments(state.opponent_arguments)}\n\n"
        f"Your own arguments so far:\n{format_arguments(state.own_arguments)}\n\n"
        f'The {opponent} side just said: "{state.last_opponent_utterance}"\n\n'
        f"Your task is to:\n"
        f"1. Directly rebut at least one specific {opponent} point\n"
        f"2. Reinforce one of your own earlier points\n"
        f"3. Add one new supporting point not made before\n"
        f"4. Connect back to your core position\n\n"
        f"Never simply restate the {opponent} side's wording. Use explicit "
        f'opposition language such as "This fails because..." and '
        f'"However, my opponent overlooks...". 4 sentences maximum. '
        + _STAY_IN_CHARACTER.format(side=side)
    )


def closing_strategy(state: DebateState) -> str:
    side = state.side.label
    opponent = state.side.opponent.label
    return (
        f'You are the {side} side giving your CLOSING ARGUMENT in a debate about '
        f'"{state.topic}".\n\n'
        f"Your arguments so far:\n{format_arguments(state.own_arguments)}\n\n"
        f"{opponent} arguments so far:\n{format_arguments(state.opponent_arguments)}\n\n"
        f"Your task is to:\n"
        f"1. Summarize your strongest points\n"
        f"2. Name a flaw in at least one {opponent} point, for example: "
        f'"{state.last_opponent_utterance}"\n'
        f"3. End with a powerful closing sentence\n\n"
        f"Use persuasive language. 3 sentences maximum. "
        + _STAY_IN_CHARACTER.format(side=side)
    )


_STRATEGIES = {
    Phase.OPENING: opening_strategy,
    Phase.REBUTTAL: rebuttal_strategy,
    Phase.CLOSING: closing_strategy,
}


def build_strategy(state: DebateState) -> str:
    """Return the system instruction for the next turn described by *state*."""
    return _STRATEGIES[state.phase](state)


def build_turn_prompt(state: DebateState) -> str:
    """Short user message accompanying the strategy instruction."""
    return (
        f"Debate topic: {state.topic}\n"
        f"Deliver your {state.phase.value} statement as the {state.side.label} side."
    )
