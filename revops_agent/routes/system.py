from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter

from ..dependencies import settings, tool_registry
from ..services.agent.catalog import tool_names
from ..tokenizer_registry import tokenizer_diagnostics

router = APIRouter()


def _settings_snapshot() -> Dict[str, Dict[str, Any]]:
    tokenizer_diag = tokenizer_diagnostics()
    return {
        "llm": {
            "model": settings.llm_model,
            "classifier_model": settings.classifier_model,
            "configured": bool(settings.llm_api_key),
            "temperature": settings.llm_temperature,
            "max_retries": settings.llm_max_retries,
            "tokenizer_id": settings.llm_tokenizer_id,
            "tokenizer": tokenizer_diag.get(settings.llm_tokenizer_id, {}),
        },
        "loop": {
            "max_iterations": settings.max_iterations,
            "token_budgets": dict(settings.token_budgets),
            "final_synthesis_max_tokens": settings.final_synthesis_max_tokens,
            "tool_timeout_seconds": settings.tool_timeout_seconds,
            "model_timeout_seconds": settings.model_timeout_seconds,
        },
        "tools": {
            "catalog": len(tool_names()),
            "registered": tool_registry.registered(),
            "missing": sorted(set(tool_names()) - set(tool_registry.registered())),
        },
    }


@router.get("/health")
async def health() -> Dict[str, Any]:
    return {"status": "ok", "settings": _settings_snapshot()}
