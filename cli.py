#!/usr/bin/env python3
"""Command-line interface for the AI debate arena.

Usage examples:
    python cli.py debate --topic "Should AI be regulated?" --rounds 3
    python cli.py debate --topic "Is remote work better?" --protocol swapping --json-out run.json
    python cli.py judge --transcript run.json
    python cli.py sample-topic
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any

import click
import yaml

from agents import Debater, Judge, Side, create_provider
from agents.base import DebateConfig, Utterance
from agents.errors import InvalidConfig
from agents.judge import Verdict
from agents.llm_provider import LLMProvider
from evaluation.metrics import compute_all_metrics
from orchestration.debate_manager import DebateManager
from orchestration.protocols import PROTOCOL_NAMES


SAMPLE_TOPICS = [
    "Should universal basic income be implemented worldwide?",
    "Is artificial intelligence a net positive for humanity?",
    "Should college education be free for everyone?",
    "Does social media do more harm than good to society?",
    "Should humans prioritize space exploration over solving Earth's problems?",
]


# ---------------------------------------------------------------------------
# Live debate display
# ---------------------------------------------------------------------------

_SIDE_STYLES: dict[Side, tuple[str, str]] = {
    # side -> (label, ANSI colour code)
    Side.PRO: ("PRO Side", "\033[1;34m"),   # bold blue
    Side.CON: ("CON Side", "\033[1;31m"),   # bold red
}
_CONCEDED_COLOUR = "\033[1;33m"  # bold yellow
_RESET = "\033[0m"


def _print_utterance(utterance: Utterance, total_rounds: int) -> None:
    """Pretty-print a single utterance to the terminal."""
    label, colour = _SIDE_STYLES[utterance.side]
    if utterance.is_concession:
        label, colour = f"{label} (Conceded)", _CONCEDED_COLOUR

    click.echo(f"\n{colour}{'─' * 60}")
    click.echo(f"  [{label}]  Round {utterance.round} of {total_rounds}")
    click.echo(f"{'─' * 60}{_RESET}")
    for paragraph in utterance.text.split("\n"):
        click.echo(f"  {paragraph}")


def _print_verdict(verdict: Verdict) -> None:
    click.echo(f"\n{'=' * 60}")
    click.echo("  VERDICT")
    click.echo(f"{'=' * 60}")
    click.echo(f"  Winner     : {verdict.winner.value}")
    click.echo(f"  Score      : {verdict.score}")
    click.echo(
        f"  Rounds won : PRO {verdict.rounds_won.pro} - CON {verdict.rounds_won.con}"
    )
    click.echo("\n  Judge's Commentary:\n")
    for line in verdict.commentary.split("\n"):
        click.echo(f"    {line}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_config(config_path: str = "config/default.yaml") -> dict[str, Any]:
    """Load and return the YAML config."""
    p = Path(config_path)
    if not p.exists():
        click.echo(f"Config not found: {p}. Using defaults.", err=True)
        return {}
    with open(p) as f:
        return yaml.safe_load(f) or {}


def _setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_provider(section: dict[str, Any], cfg: dict[str, Any]) -> LLMProvider:
    """Create the provider described by a ``debaters``/``judge`` config section."""
    api_cfg = cfg.get("api", {})
    provider_name = section.get("provider", "openrouter")
    provider_api_cfg = api_cfg.get(provider_name, {})

    # Model resolution order:
    #   1. Section-level model (debaters.pro.model, judge.model)
    #   2. Provider-level model (api.openrouter.model)
    #   3. Provider class default
    model = section.get("model") or provider_api_cfg.get("model")

    provider_kwargs: dict[str, Any] = {"timeout": api_cfg.get("timeout", 30)}
    if provider_api_cfg.get("api_key_env"):
        provider_kwargs["api_key_env"] = provider_api_cfg["api_key_env"]
    if model:
        provider_kwargs["model"] = model

    try:
        return create_provider(provider_name, **provider_kwargs)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


def _build_debater(side: Side, cfg: dict[str, Any]) -> Debater:
    base = {k: v for k, v in cfg.get("debaters", {}).items() if k not in ("pro", "con")}
    section = {**base, **cfg.get("debaters", {}).get(side.value.lower(), {})}
    return Debater(
        side,
        _build_provider(section, cfg),
        temperature=section.get("temperature", 0.7),
        max_tokens=section.get("max_tokens", 250),
    )


def _build_judge(cfg: dict[str, Any]) -> Judge:
    section = cfg.get("judge", {})
    return Judge(
        _build_provider(section, cfg),
        temperature=section.get("temperature", 0.3),
        max_tokens=section.get("max_tokens", 500),
        timeout=section.get("timeout", 60),
        json_mode=section.get("json_mode", False),
    )


def _make_config(topic: str, rounds: int) -> DebateConfig:
    try:
        return DebateConfig(topic=topic, total_rounds=rounds)
    except InvalidConfig as exc:
        raise click.BadParameter(str(exc)) from exc


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", default="config/default.yaml", help="Path to YAML config")
@click.option("--log-level", default="WARNING", help="Logging level")
@click.pass_context
def cli(ctx: click.Context, config: str, log_level: str) -> None:
    """AI Debate Arena – pit two LLM personas against each other and judge the result."""
    _setup_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = _load_config(config)


# ---- debate ---------------------------------------------------------------

@cli.command()
@click.option("--topic", required=True, help="Debate topic")
@click.option("--rounds", type=click.IntRange(1, 5), default=None, help="Number of rounds (1-5)")
@click.option(
    "--protocol",
    type=click.Choice(PROTOCOL_NAMES),
    default=None,
    help="Turn-taking protocol",
)
@click.option("--no-judge", is_flag=True, help="Skip judging the finished debate")
@click.option(
    "--json-out",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write transcript and verdict as JSON",
)
@click.pass_context
def debate(
    ctx: click.Context,
    topic: str,
    rounds: int | None,
    protocol: str | None,
    no_judge: bool,
    json_out: Path | None,
) -> None:
    """Run a PRO-vs-CON debate on a given topic."""
    cfg = ctx.obj["config"]
    debate_cfg = cfg.get("debate", {})
    config = _make_config(topic, rounds or debate_cfg.get("rounds", 3))
    protocol = protocol or debate_cfg.get("protocol", "pro_first")

    click.echo(f"\n\033[1m{'=' * 60}")
    click.echo(f"  DEBATE: {config.topic}")
    click.echo(f"{'=' * 60}\033[0m")
    click.echo(f"  Rounds  : {config.total_rounds}")
    click.echo(f"  Protocol: {protocol}")

    manager = DebateManager(
        _build_debater(Side.PRO, cfg),
        _build_debater(Side.CON, cfg),
        protocol=protocol,
        turn_timeout=debate_cfg.get("turn_timeout", 20),
        closing_timeout=debate_cfg.get("closing_timeout", 25),
    )
    judge_agent = None if no_judge else _build_judge(cfg)

    async def _run() -> None:
        result = await manager.run_to_completion(
            config,
            on_utterance=lambda u, _transcript: _print_utterance(u, config.total_rounds),
        )

        click.echo(f"\n{'=' * 60}")
        click.echo("  DEBATE COMPLETE")
        click.echo(f"{'=' * 60}")
        click.echo(f"  Status    : {result.status.value}")
        if result.conceded_by:
            click.echo(f"  Conceded  : {result.conceded_by.label}")
        click.echo(f"  Utterances: {len(result.transcript)}")
        click.echo()
        click.echo("  Quality Metrics:")
        for k, v in result.metrics["quality"].items():
            click.echo(f"    {k:25s}: {v:.3f}")

        verdict = None
        if judge_agent is not None:
            verdict = await judge_agent.evaluate(result.transcript, config)
            _print_verdict(verdict)

        if json_out is not None:
            payload = {
                "topic": config.topic,
                "total_rounds": config.total_rounds,
                "result": result.to_dict(),
                "transcript": [u.to_dict() for u in result.transcript],
                "verdict": verdict.to_dict() if verdict else None,
            }
            json_out.write_text(json.dumps(payload, indent=2))
            click.echo(f"\n  Saved to: {json_out}")

    asyncio.run(_run())


# ---- judge ----------------------------------------------------------------

@cli.command()
@click.option(
    "--transcript",
    "transcript_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Transcript JSON written by 'debate --json-out'",
)
@click.pass_context
def judge(ctx: click.Context, transcript_path: Path) -> None:
    """Judge a previously saved debate transcript."""
    cfg = ctx.obj["config"]
    try:
        data = json.loads(transcript_path.read_text())
        transcript = [Utterance.from_dict(entry) for entry in data["transcript"]]
    except (json.JSONDecodeError, KeyError, ValueError, TypeError) as exc:
        raise click.ClickException(f"Unreadable transcript file: {exc}") from exc
    config = _make_config(data.get("topic", ""), data.get("total_rounds", 3))

    judge_agent = _build_judge(cfg)
    metrics = compute_all_metrics(transcript, topic=config.topic)
    click.echo(f"  Topic     : {config.topic}")
    click.echo(f"  Utterances: {metrics.total_utterances}")

    verdict = asyncio.run(judge_agent.evaluate(transcript, config))
    _print_verdict(verdict)


# ---- sample-topic ---------------------------------------------------------

@cli.command("sample-topic")
def sample_topic() -> None:
    """Print a random sample debate topic."""
    click.echo(random.choice(SAMPLE_TOPICS))


# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
