"""Pytest fixtures for all test modules."""
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest

from revops_agent.config import load_settings
from revops_agent.services.agent.models import ModelResponse, ModelUsage, ToolCallRequest


class ScriptedModel:
    """
    Fake reasoning model that replays scripted responses.

    Every call is recorded with a snapshot of the transcript it was given, so
    tests can assert on exactly what would have been sent to the model.
    """

    def __init__(
        self,
        responses: Optional[Sequence[Any]] = None,
        default: Optional[Callable[[int], ModelResponse]] = None,
    ):
        self.responses = list(responses or [])
        self.default = default
        self.calls: List[Dict[str, Any]] = []

    async def call(self, *, system_prompt, transcript, tools, max_tokens, temperature) -> ModelResponse:
        index = len(self.calls)
        self.calls.append({
            "system_prompt": system_prompt,
            "transcript": list(transcript),
            "tools": list(tools) if tools else None,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if index < len(self.responses):
            response = self.responses[index]
        elif self.default is not None:
            response = self.default(index)
        else:
            raise AssertionError(f"ScriptedModel has no response for call {index}")
        if isinstance(response, BaseException):
            raise response
        return response


class FakeExecutor:
    """Tool executor returning canned results or raising canned exceptions."""

    def __init__(self, results: Optional[Dict[str, Any]] = None):
        self.results = dict(results or {})
        self.calls: List[tuple] = []

    async def execute(self, tool_name: str, params: Dict[str, Any]) -> Any:
        self.calls.append((tool_name, dict(params)))
        outcome = self.results.get(tool_name, {"ok": True})
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome(params)
        return outcome


def text(content: str = "", stop_reason: str = "end_turn", tokens: int = 10) -> ModelResponse:
    return ModelResponse(
        text=content,
        stop_reason=stop_reason,
        usage=ModelUsage(input_tokens=tokens, output_tokens=tokens),
    )


def tool_use(*calls: ToolCallRequest, content: str = "", tokens: int = 10) -> ModelResponse:
    return ModelResponse(
        text=content,
        tool_calls=tuple(calls),
        stop_reason="tool_use",
        usage=ModelUsage(input_tokens=tokens, output_tokens=tokens),
    )


def call(call_id: str, name: str, **params: Any) -> ToolCallRequest:
    return ToolCallRequest(id=call_id, name=name, input=params)


@pytest.fixture
def settings():
    """Settings with the char-based token estimate, so no tokenizer download is needed."""
    return replace(
        load_settings(),
        llm_tokenizer_id="",
        max_iterations=8,
        token_budgets={"low": 2048, "medium": 4096, "high": 8192},
        final_synthesis_max_tokens=8192,
        compress_max_chars=2000,
        compress_preview_chars=1500,
        skill_evidence_max_chars=8000,
        excerpt_max_chars=150,
        history_max_messages=10,
        history_token_limit=6000,
        auto_scope_tools=("query_deals", "compute_metric"),
        auto_scope_param="scope_id",
        tool_timeout_seconds=None,
        model_timeout_seconds=None,
    )


@pytest.fixture
def classifier_model():
    """Classifier that always labels the question as a low-complexity deal lookup."""
    return ScriptedModel(default=lambda i: text(
        '{"question_type":"discrete","tools_likely_needed":["query_deals"],"estimated_complexity":"low"}'
    ))


@pytest.fixture
def failing_classifier():
    return ScriptedModel(default=lambda i: RuntimeError("classifier down"))
