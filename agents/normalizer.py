"""Clean raw completions into presentable debate utterances.

The cleanup is an ordered pipeline of pure steps::

    strip_role_label -> trim -> ensure_terminal_punctuation
        -> capitalize_first -> adjust_for_phase

Every step takes ``(text, phase)`` and returns new text, and the pipeline as a
whole is idempotent: ``normalize(normalize(t, p), p) == normalize(t, p)``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from agents.base import Phase
from agents.errors import EmptyResponse

logger = logging.getLogger(__name__)

# One or more leading "PRO:", "Con side:", "**PRO**:" style labels.
_ROLE_LABEL = re.compile(
    r"^(?:\s*(?:\*\*)?(?:PRO|CON)(?:\s+side)?(?:\*\*:|:\*\*|:)\s*)+",
    re.IGNORECASE,
)

_TERMINAL_PUNCTUATION = (".", "!", "?")

CONCLUSIVE_CONNECTORS = (
    "therefore",
    "thus",
    "hence",
    "ultimately",
    "in conclusion",
    "in the end",
    "to conclude",
)
_CONCLUSIVE_OPENING = re.compile(
    r"^(?:" + "|".join(re.escape(c) for c in CONCLUSIVE_CONNECTORS) + r")\b",
    re.IGNORECASE,
)

OPPOSITION_KEYWORDS = (
    "however",
    "fail",
    "flaw",
    "overlook",
    "counter",
    "contradict",
)

# Bullet or numbered list item starting a new line.
_LIST_ITEM_BREAK = re.compile(r"[ \t]*\n\s*(?=(?:•|-|\d+\.)\s)")

NormalizationStep = Callable[..., str]


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

def strip_role_label(text: str, phase: Phase | None = None) -> str:
    return _ROLE_LABEL.sub("", text, count=1)


def trim(text: str, phase: Phase | None = None) -> str:
    trimmed = text.strip()
    if not trimmed:
        raise EmptyResponse("Response was blank after cleanup")
    return trimmed


def ensure_terminal_punctuation(text: str, phase: Phase | None = None) -> str:
    if text.endswith(_TERMINAL_PUNCTUATION):
        return text
    return text + ("!" if phase is Phase.CLOSING else ".")


def capitalize_first(text: str, phase: Phase | None = None) -> str:
    return text[:1].upper() + text[1:]


def adjust_for_phase(text: str, phase: Phase | None = None) -> str:
    """Apply the advisory rhetorical touch-ups for *phase*."""
    if phase is Phase.CLOSING:
        if not _CONCLUSIVE_OPENING.match(text):
            return f"Therefore, {_lower_first_word(text)}"
        return text
    if phase is Phase.REBUTTAL:
        lowered = text.lower()
        if not any(keyword in lowered for keyword in OPPOSITION_KEYWORDS):
            return f"However, {_lower_first_word(text)}"
        return text
    if phase is Phase.OPENING:
        return _LIST_ITEM_BREAK.sub("\n\n", text)
    return text


def _lower_first_word(text: str) -> str:
    """Lower-case the first letter unless the first word is "I" or an acronym."""
    first = text.split(maxsplit=1)[0] if text.split() else ""
    word = first.rstrip(",.;:!?")
    if word == "I" or word.startswith("I'") or (len(word) > 1 and word.isupper()):
        return text
    return text[:1].lower() + text[1:]


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

NORMALIZATION_STEPS: tuple[NormalizationStep, ...] = (
    strip_role_label,
    trim,
    ensure_terminal_punctuation,
    capitalize_first,
    adjust_for_phase,
)


def normalize(text: str, phase: Phase) -> str:
    """Run the full normalisation pipeline; raises ``EmptyResponse`` on blank text."""
    for step in NORMALIZATION_STEPS:
        text = step(text, phase)
    return text
