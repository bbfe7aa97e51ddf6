"""Tests for guard nudge texts and keyword hint selection."""
from revops_agent.services.agent.nudges import (
    NO_EVIDENCE_HINTS,
    NO_EVIDENCE_NUDGE_PREFIX,
    TRUNCATION_HINTS,
    TRUNCATION_NUDGE_PREFIX,
    build_rules,
    no_evidence_nudge,
    truncation_nudge,
)


class TestTruncationNudge:
    def test_forecast_hint(self):
        nudge = truncation_nudge("What's our Q2 commit?")

        assert nudge.startswith(TRUNCATION_NUDGE_PREFIX)
        assert 'skill_id="weekly-forecast-rollup"' in nudge
        assert nudge.endswith("]")

    def test_conversation_hint(self):
        assert "search_transcripts" in truncation_nudge("Summarize the objections from last week's calls")

    def test_default_hint(self):
        nudge = truncation_nudge("Tell me about the org")

        assert nudge == TRUNCATION_NUDGE_PREFIX + TRUNCATION_HINTS.default + "]"


class TestNoEvidenceNudge:
    def test_first_matching_rule_wins(self):
        # "forecast" and "deal" both match; forecast is listed first.
        assert "weekly-forecast-rollup" in no_evidence_nudge("forecast for this deal")

    def test_deal_hint(self):
        nudge = no_evidence_nudge("Which deals are stuck in stage 2?")

        assert nudge.startswith(NO_EVIDENCE_NUDGE_PREFIX)
        assert "Call query_deals" in nudge

    def test_rep_hint(self):
        assert "rep-scorecard" in no_evidence_nudge("Who is behind on quota?")

    def test_default_hint(self):
        assert no_evidence_nudge("hello") == NO_EVIDENCE_NUDGE_PREFIX + NO_EVIDENCE_HINTS.default + "]"

    def test_custom_strategy(self):
        nudge = no_evidence_nudge("anything", hints=lambda question: " Call ping.")

        assert nudge == NO_EVIDENCE_NUDGE_PREFIX + " Call ping.]"


class TestBuildRules:
    def test_case_insensitive(self):
        rules = build_rules([(r"churn", " Call query_accounts.")], default=" Call a tool.")

        assert rules("Why did CHURN spike?") == " Call query_accounts."
        assert rules("other") == " Call a tool."
        assert rules("") == " Call a tool."
