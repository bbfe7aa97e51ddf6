"""
Pre-flight question classifier.

One small model call labels the question so the loop can size its per-turn
token budget and prepend a routing hint. The result is advisory: any failure
returns ``DEFAULT_CLASSIFICATION`` instead of raising.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterable, Mapping, Optional

from .catalog import tool_names
from .llm import ReasoningModel
from .models import Classification, TurnMessage
from .prompts import build_classifier_prompt

logger = logging.getLogger(__name__)

QUESTION_TYPES = ("discrete", "analytical", "strategic")
COMPLEXITIES = ("low", "medium", "high")

DEFAULT_TOKEN_BUDGETS: Dict[str, int] = {"low": 2048, "medium": 4096, "high": 8192}

DEFAULT_CLASSIFICATION = Classification(
    question_type="analytical",
    hinted_tools=(),
    complexity="medium",
    token_budget=DEFAULT_TOKEN_BUDGETS["medium"],
)


def _extract_json(text: str) -> Optional[Dict[str, Any]]:
    """Extract the first JSON object from model output, tolerating code fences."""
    fence = re.search(r"```(?:json)?\s*\n?(.*?)```", text, re.DOTALL | re.IGNORECASE)
    if fence:
        try:
            parsed = json.loads(fence.group(1).strip())
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

    brace = re.search(r"\{.*\}", text, re.DOTALL)
    if brace:
        try:
            parsed = json.loads(brace.group(0))
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

    return None


def default_classification(token_budgets: Optional[Mapping[str, int]] = None) -> Classification:
    budgets = token_budgets or DEFAULT_TOKEN_BUDGETS
    return Classification(
        question_type="analytical",
        hinted_tools=(),
        complexity="medium",
        token_budget=budgets.get("medium", DEFAULT_TOKEN_BUDGETS["medium"]),
    )


def parse_classification(
    data: Mapping[str, Any],
    token_budgets: Optional[Mapping[str, int]] = None,
    known_tools: Optional[Iterable[str]] = None,
) -> Classification:
    budgets = token_budgets or DEFAULT_TOKEN_BUDGETS
    known = set(known_tools if known_tools is not None else tool_names())

    question_type = data.get("question_type")
    if question_type not in QUESTION_TYPES:
        question_type = "analytical"

    complexity = data.get("estimated_complexity")
    if complexity not in COMPLEXITIES:
        complexity = "medium"

    raw_tools = data.get("tools_likely_needed")
    hinted = []
    if isinstance(raw_tools, list):
        for name in raw_tools:
            if isinstance(name, str) and name in known and name not in hinted:
                hinted.append(name)

    return Classification(
        question_type=question_type,
        hinted_tools=tuple(hinted),
        complexity=complexity,
        token_budget=budgets.get(complexity, budgets.get("medium", DEFAULT_TOKEN_BUDGETS["medium"])),
    )


async def classify_question(
    question: str,
    model: ReasoningModel,
    *,
    token_budgets: Optional[Mapping[str, int]] = None,
    max_tokens: int = 256,
) -> Classification:
    fallback = default_classification(token_budgets)
    try:
        response = await model.call(
            system_prompt=build_classifier_prompt(tool_names()),
            transcript=[TurnMessage.user(question)],
            tools=None,
            max_tokens=max_tokens,
            temperature=0.0,
        )
        data = _extract_json((response.text or "").strip())
        if data is None:
            logger.info("Classifier returned no JSON, using default classification")
            return fallback
        return parse_classification(data, token_budgets)
    except Exception as e:
        logger.exception(f"classify_question failed, using default classification: {e}")
        return fallback
