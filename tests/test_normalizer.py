"""Tests for the response normalisation pipeline."""

from __future__ import annotations

import pytest

from agents.base import Phase
from agents.errors import EmptyResponse
from agents.normalizer import (
    NORMALIZATION_STEPS,
    adjust_for_phase,
    capitalize_first,
    ensure_terminal_punctuation,
    normalize,
    strip_role_label,
    trim,
)


class TestStripRoleLabel:
    @pytest.mark.parametrize(
        "raw",
        ["PRO: We win", "pro:We win", "CON side: We win", "**CON**: We win", "PRO: CON: We win"],
    )
    def test_labels_removed(self, raw):
        assert strip_role_label(raw) == "We win"

    @pytest.mark.parametrize("raw", ["Progress matters", "Pro-regulation voices agree", "Contrary to this"])
    def test_words_starting_with_label_kept(self, raw):
        assert strip_role_label(raw) == raw


class TestTrim:
    def test_strips_whitespace(self):
        assert trim("  hello \n") == "hello"

    def test_blank_raises(self):
        with pytest.raises(EmptyResponse):
            trim(" \n\t ")


class TestPunctuation:
    def test_closing_prefers_exclamation(self):
        assert ensure_terminal_punctuation("We win", Phase.CLOSING) == "We win!"

    def test_other_phases_use_period(self):
        assert ensure_terminal_punctuation("We win", Phase.REBUTTAL) == "We win."
        assert ensure_terminal_punctuation("We win", Phase.OPENING) == "We win."

    def test_existing_punctuation_kept(self):
        assert ensure_terminal_punctuation("Really?", Phase.CLOSING) == "Really?"

    def test_capitalize_first(self):
        assert capitalize_first("we win.") == "We win."
        assert capitalize_first("• point one.") == "• point one."


class TestAdjustForPhase:
    def test_closing_adds_connector(self):
        assert adjust_for_phase("We must act!", Phase.CLOSING) == "Therefore, we must act!"

    @pytest.mark.parametrize(
        "text", ["Thus we act.", "In conclusion, we act.", "Ultimately this matters!"]
    )
    def test_closing_keeps_existing_connector(self, text):
        assert adjust_for_phase(text, Phase.CLOSING) == text

    def test_connector_keeps_pronoun_and_acronym_case(self):
        assert adjust_for_phase("I stand firm!", Phase.CLOSING) == "Therefore, I stand firm!"
        assert adjust_for_phase("AI needs rules!", Phase.CLOSING) == "Therefore, AI needs rules!"

    def test_rebuttal_adds_opposition_connector(self):
        assert (
            adjust_for_phase("Regulation protects people.", Phase.REBUTTAL)
            == "However, regulation protects people."
        )

    @pytest.mark.parametrize(
        "text",
        [
            "This argument fails because it ignores cost.",
            "The flaw here is obvious.",
            "My opponent overlooks history.",
            "To counter that, consider Europe.",
        ],
    )
    def test_rebuttal_with_keyword_unchanged(self, text):
        assert adjust_for_phase(text, Phase.REBUTTAL) == text

    def test_opening_spaces_out_list_items(self):
        text = "Thesis.\n• One\n\n\n• Two\n  1. Three"
        assert adjust_for_phase(text, Phase.OPENING) == "Thesis.\n\n• One\n\n• Two\n\n1. Three"


class TestNormalize:
    def test_pipeline_order(self):
        assert [step.__name__ for step in NORMALIZATION_STEPS] == [
            "strip_role_label",
            "trim",
            "ensure_terminal_punctuation",
            "capitalize_first",
            "adjust_for_phase",
        ]

    def test_full_rebuttal(self):
        assert normalize("pro: regulation works", Phase.REBUTTAL) == "However, regulation works."

    def test_full_closing(self):
        assert normalize("  CON: we should wait  ", Phase.CLOSING) == "Therefore, we should wait!"

    def test_label_only_is_empty(self):
        with pytest.raises(EmptyResponse):
            normalize("PRO:   ", Phase.OPENING)

    @pytest.mark.parametrize("phase", list(Phase))
    @pytest.mark.parametrize(
        "raw",
        [
            "PRO: regulation works",
            "con side: this fails because costs rise",
            "  we must act now  ",
            "I believe the evidence is clear",
            "Thesis: rules help.\n• safety\n• trust\n1. example",
            "**CON**: AI is moving too fast for law",
        ],
    )
    def test_idempotent(self, raw, phase):
        once = normalize(raw, phase)
        assert normalize(once, phase) == once
