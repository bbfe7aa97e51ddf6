"""Tests for the pre-flight question classifier."""
import pytest

from conftest import ScriptedModel, text
from revops_agent.services.agent.classifier import (
    DEFAULT_CLASSIFICATION,
    _extract_json,
    classify_question,
    parse_classification,
)


class TestExtractJson:
    def test_plain_object(self):
        assert _extract_json('{"a": 1}') == {"a": 1}

    def test_code_fence(self):
        assert _extract_json('```json\n{"a": 2}\n```') == {"a": 2}

    def test_object_inside_prose(self):
        assert _extract_json('Sure! {"a": 3} hope that helps') == {"a": 3}

    def test_no_json(self):
        assert _extract_json("I cannot classify this") is None
        assert _extract_json("[1, 2]") is None


class TestParseClassification:
    def test_valid(self):
        result = parse_classification({
            "question_type": "strategic",
            "tools_likely_needed": ["query_deals", "get_skill_evidence"],
            "estimated_complexity": "high",
        })

        assert result.question_type == "strategic"
        assert result.hinted_tools == ("query_deals", "get_skill_evidence")
        assert result.complexity == "high"
        assert result.token_budget == 8192

    def test_unknown_tools_are_dropped(self):
        result = parse_classification({
            "tools_likely_needed": ["query_deals", "drop_database", "query_deals", 7],
            "estimated_complexity": "low",
        })

        assert result.hinted_tools == ("query_deals",)
        assert result.token_budget == 2048

    def test_invalid_labels_fall_back(self):
        result = parse_classification({"question_type": "poetry", "estimated_complexity": "extreme"})

        assert result.question_type == "analytical"
        assert result.complexity == "medium"
        assert result.token_budget == 4096

    def test_custom_budgets(self):
        result = parse_classification({"estimated_complexity": "low"}, token_budgets={"low": 100, "medium": 200})

        assert result.token_budget == 100


class TestClassifyQuestion:
    @pytest.mark.asyncio
    async def test_model_json_is_parsed(self):
        model = ScriptedModel([text(
            '{"question_type":"discrete","tools_likely_needed":["query_deals"],"estimated_complexity":"low"}'
        )])

        result = await classify_question("What's the Q1 forecast?", model)

        assert result.question_type == "discrete"
        assert result.token_budget == 2048
        sent = model.calls[0]
        assert sent["tools"] is None
        assert sent["temperature"] == 0.0
        assert sent["max_tokens"] == 256
        assert "query_deals" in sent["system_prompt"]
        assert sent["transcript"][0].content == "What's the Q1 forecast?"

    @pytest.mark.asyncio
    async def test_non_json_reply_falls_back(self):
        model = ScriptedModel([text("Definitely analytical.")])

        assert await classify_question("?", model) == DEFAULT_CLASSIFICATION

    @pytest.mark.asyncio
    async def test_model_error_falls_back(self):
        model = ScriptedModel([ConnectionError("unreachable")])

        result = await classify_question("?", model, token_budgets={"low": 1, "medium": 2, "high": 3})

        assert result.complexity == "medium"
        assert result.token_budget == 2
        assert result.hinted_tools == ()
