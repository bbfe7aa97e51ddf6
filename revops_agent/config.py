from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class AppSettings:
    llm_base_url: str
    llm_api_key: str
    llm_model: str
    llm_temperature: float
    llm_max_retries: int
    llm_tokenizer_id: str
    classifier_model: str
    classifier_max_tokens: int
    max_iterations: int
    token_budgets: Dict[str, int]
    final_synthesis_max_tokens: int
    compress_max_chars: int
    compress_preview_chars: int
    skill_evidence_max_chars: int
    excerpt_max_chars: int
    history_max_messages: int
    history_token_limit: int
    auto_scope_tools: Tuple[str, ...]
    auto_scope_param: str
    tool_timeout_seconds: Optional[float]
    model_timeout_seconds: Optional[float]
    frontend_origin: str


def _int_env(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        return int(raw or default)
    except (TypeError, ValueError):
        return int(default)


def _float_env(name: str, default: str) -> float:
    raw = os.environ.get(name, default)
    try:
        return float(raw or default)
    except (TypeError, ValueError):
        return float(default)


def _str_env(name: str, default: str = "") -> str:
    return (os.environ.get(name, default) or default).strip()


def _optional_float_env(name: str) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or str(raw).strip() == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _csv_env(name: str, default: str) -> Tuple[str, ...]:
    raw = _str_env(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def load_settings() -> AppSettings:
    llm_model = _str_env("LLM_MODEL", "gpt-4o")

    return AppSettings(
        llm_base_url=_str_env("LLM_BASE_URL"),
        llm_api_key=_str_env("LLM_API_KEY"),
        llm_model=llm_model,
        llm_temperature=_float_env("LLM_TEMPERATURE", "0.2"),
        llm_max_retries=_int_env("LLM_MAX_RETRIES", "2"),
        llm_tokenizer_id=_str_env("LLM_TOKENIZER_ID", "cl100k_base"),
        classifier_model=_str_env("CLASSIFIER_MODEL") or llm_model,
        classifier_max_tokens=_int_env("CLASSIFIER_MAX_TOKENS", "256"),
        max_iterations=max(1, _int_env("AGENT_MAX_ITERATIONS", "8")),
        token_budgets={
            "low": _int_env("TOKEN_BUDGET_LOW", "2048"),
            "medium": _int_env("TOKEN_BUDGET_MEDIUM", "4096"),
            "high": _int_env("TOKEN_BUDGET_HIGH", "8192"),
        },
        final_synthesis_max_tokens=_int_env("FINAL_SYNTHESIS_MAX_TOKENS", "8192"),
        compress_max_chars=_int_env("COMPRESS_MAX_CHARS", "2000"),
        compress_preview_chars=_int_env("COMPRESS_PREVIEW_CHARS", "1500"),
        skill_evidence_max_chars=_int_env("SKILL_EVIDENCE_MAX_CHARS", "8000"),
        excerpt_max_chars=_int_env("EXCERPT_MAX_CHARS", "150"),
        history_max_messages=_int_env("HISTORY_MAX_MESSAGES", "10"),
        history_token_limit=_int_env("HISTORY_TOKEN_LIMIT", "6000"),
        auto_scope_tools=_csv_env("AUTO_SCOPE_TOOLS", "query_deals,compute_metric"),
        auto_scope_param=_str_env("AUTO_SCOPE_PARAM", "scope_id"),
        tool_timeout_seconds=_optional_float_env("TOOL_TIMEOUT_SECONDS"),
        model_timeout_seconds=_optional_float_env("MODEL_TIMEOUT_SECONDS"),
        frontend_origin=f"http://localhost:{os.environ.get('FRONTEND_PORT', '5173')}",
    )
