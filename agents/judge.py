"""Judge agent – adjudicates a finished debate into a strictly typed verdict.

The judge serialises the transcript, asks the model for a bare JSON verdict
and validates it against ``Verdict``.  Two rules sit outside the model:

* a transcript containing a concession is decided without asking the model;
* any provider or parse failure degrades to ``fallback_verdict()``.
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from agents.base import AgentRole, BaseAgent, DebateConfig, Side, Utterance
from agents.errors import MalformedVerdict, TurnFailure
from agents.llm_provider import LLMProvider

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Verdict schema
# ---------------------------------------------------------------------------

class Winner(str, Enum):
    PRO = "PRO"
    CON = "CON"
    DRAW = "Draw"


class RoundsWon(BaseModel):
    model_config = ConfigDict(frozen=True)

    pro: StrictInt = Field(ge=0)
    con: StrictInt = Field(ge=0)


class Verdict(BaseModel):
    """Final structured determination of a debate."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    winner: Winner
    score: str = Field(pattern=r"^\d+-\d+$")
    commentary: str
    rounds_won: RoundsWon = Field(alias="roundsWon")

    @property
    def score_pair(self) -> tuple[int, int]:
        first, second = self.score.split("-")
        return int(first), int(second)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


FALLBACK_COMMENTARY = (
    "The judge was unable to determine a clear winner due to technical difficulties."
)


def fallback_verdict() -> Verdict:
    """Degraded-mode verdict returned when judging fails."""
    return Verdict(
        winner=Winner.DRAW,
        score="0-0",
        commentary=FALLBACK_COMMENTARY,
        rounds_won=RoundsWon(pro=0, con=0),
    )


def concession_verdict(
    transcript: Iterable[Utterance], total_rounds: int
) -> Verdict | None:
    """Award the debate to the opponent of the first conceding side, if any.

    The winner takes every round; the score is written PRO-CON like any
    other verdict, so a PRO concession in three rounds scores ``"0-3"``.
    """
    conceding = next((u for u in transcript if u.is_concession), None)
    if conceding is None:
        return None

    conceder = conceding.side
    winner = conceder.opponent
    rounds_won = RoundsWon(
        pro=total_rounds if winner is Side.PRO else 0,
        con=total_rounds if winner is Side.CON else 0,
    )
    return Verdict(
        winner=Winner(winner.value),
        score=f"{rounds_won.pro}-{rounds_won.con}",
        commentary=(
            f"The {conceder.label} side conceded the debate, automatically "
            f"awarding victory to their opponent."
        ),
        rounds_won=rounds_won,
    )


# ---------------------------------------------------------------------------
# Transcript codec
# ---------------------------------------------------------------------------

CONCESSION_MARK = " [CONCEDED]"

_ENTRY = re.compile(r"(PRO|CON) \(Round (\d+)/(\d+)\): (.*)", re.DOTALL)
_ENTRY_BOUNDARY = re.compile(r"\n\n(?=(?:PRO|CON) \(Round \d+/\d+\): )")
_ESCAPED = re.compile(r"\\(.)", re.DOTALL)


def _escape(text: str) -> str:
    # Backslash-escape anything the parser would read as structure: an entry
    # header after a blank line, or a trailing concession mark.
    text = text.replace("\\", "\\\\")
    text = _ENTRY_BOUNDARY.sub("\n\n\\\\", text)
    if text.endswith(CONCESSION_MARK):
        text = text[: -len(CONCESSION_MARK)] + " \\" + CONCESSION_MARK[1:]
    return text


def serialize_transcript(transcript: Iterable[Utterance], total_rounds: int) -> str:
    """Render the transcript as ``PRO (Round r/N): text[ [CONCEDED]]`` entries.

    Utterance text is escaped so ``parse_transcript`` recovers it exactly;
    ordinary debate text contains no backslashes and passes through unchanged.
    """
    return "\n\n".join(
        f"{u.side.label} (Round {u.round}/{total_rounds}): {_escape(u.text)}"
        f"{CONCESSION_MARK if u.is_concession else ''}"
        for u in transcript
    )


def parse_transcript(text: str) -> list[Utterance]:
    """Inverse of ``serialize_transcript``."""
    if not text:
        return []

    utterances: list[Utterance] = []
    for entry in _ENTRY_BOUNDARY.split(text):
        match = _ENTRY.fullmatch(entry)
        if match is None:
            raise ValueError(f"Unrecognised transcript entry: {entry[:60]!r}")
        side, round_number, _total, body = match.groups()
        conceded = body.endswith(CONCESSION_MARK)
        if conceded:
            body = body[: -len(CONCESSION_MARK)]
        utterances.append(
            Utterance(
                side=Side(side),
                text=_ESCAPED.sub(r"\1", body),
                round=int(round_number),
                is_concession=conceded,
            )
        )
    return utterances


# ---------------------------------------------------------------------------
# Model output handling
# ---------------------------------------------------------------------------

_JUDGE_TEMPLATE = """\
You are an expert debate judge analyzing this debate about: "{topic}".

Debate Transcript:
{transcript}

Provide your judgment in the following EXACT JSON format (NO markdown, NO code blocks, ONLY pure JSON):

{{
  "winner": "PRO" | "CON" | "Draw",
  "score": "X-Y" (X=PRO rounds won, Y=CON rounds won),
  "commentary": "Detailed analysis of the debate outcome",
  "roundsWon": {{
    "pro": number,
    "con": number
  }}
}}

Rules:
1. Must output ONLY the JSON object, nothing else
2. Do not wrap in markdown code blocks
3. Do not include any additional text
4. Ensure proper JSON formatting with double quotes"""

_VERDICT_REQUEST = "Deliver your verdict now as the JSON object only."

_CODE_FENCE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?(.*?)\s*```", re.DOTALL)


def build_judging_instruction(topic: str, serialized_transcript: str) -> str:
    return _JUDGE_TEMPLATE.format(topic=topic, transcript=serialized_transcript)


def strip_code_fence(text: str) -> str:
    """Remove a markdown code fence wrapping the whole reply."""
    stripped = text.strip()
    match = _CODE_FENCE.fullmatch(stripped)
    return match.group(1).strip() if match else stripped


def parse_verdict(text: str) -> Verdict:
    """Validate a raw judge reply; raises ``MalformedVerdict``."""
    cleaned = strip_code_fence(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedVerdict(f"Judge reply is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedVerdict("Judge reply is not a JSON object")

    try:
        verdict = Verdict.model_validate(data)
    except ValidationError as exc:
        raise MalformedVerdict(f"Judge reply violates the verdict schema: {exc}") from exc

    if verdict.score_pair != (verdict.rounds_won.pro, verdict.rounds_won.con):
        raise MalformedVerdict(
            f"Score {verdict.score!r} disagrees with roundsWon "
            f"({verdict.rounds_won.pro}, {verdict.rounds_won.con})"
        )
    return verdict


# ---------------------------------------------------------------------------
# Judge agent
# ---------------------------------------------------------------------------

class Judge(BaseAgent):
    """Agent that evaluates a finished transcript and delivers the verdict."""

    def __init__(
        self,
        provider: LLMProvider,
        *,
        agent_id: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 500,
        timeout: float = 60.0,
        json_mode: bool = False,
    ) -> None:
        super().__init__(
            role=AgentRole.JUDGE,
            provider=provider,
            agent_id=agent_id,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        self.timeout = timeout
        self.json_mode = json_mode

    async def evaluate(
        self, transcript: Iterable[Utterance], config: DebateConfig
    ) -> Verdict:
        """Return exactly one verdict for *transcript*; never raises on bad output."""
        transcript = tuple(transcript)

        override = concession_verdict(transcript, config.total_rounds)
        if override is not None:
            logger.info("Concession found; awarding debate to %s", override.winner.value)
            return override

        instruction = build_judging_instruction(
            config.topic, serialize_transcript(transcript, config.total_rounds)
        )
        extra: dict[str, Any] = {}
        if self.json_mode:
            if self.provider.supports_json_mode:
                extra["response_format"] = {"type": "json_object"}
            else:
                logger.debug(
                    "%s has no JSON mode; relying on the instruction alone", self.provider.name
                )

        try:
            response = await self.generate_response(
                instruction, _VERDICT_REQUEST, timeout=self.timeout, **extra
            )
            verdict = parse_verdict(response.content)
        except (TurnFailure, MalformedVerdict) as exc:
            logger.warning("Judge could not reach a verdict (%s); using fallback", exc)
            return fallback_verdict()

        logger.info("Verdict: %s (%s)", verdict.winner.value, verdict.score)
        return verdict
