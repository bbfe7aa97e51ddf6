from __future__ import annotations

from typing import Optional

from fastapi import HTTPException

from .config import load_settings
from .services.agent import AnalystAgent, DataToolRegistry, create_openai_model

settings = load_settings()
# Embedding applications register their data tools here at startup.
tool_registry = DataToolRegistry()

_agent: Optional[AnalystAgent] = None


def get_agent() -> AnalystAgent:
    global _agent
    if _agent is None:
        if not settings.llm_api_key:
            raise HTTPException(status_code=500, detail="LLM not configured")
        _agent = AnalystAgent(
            create_openai_model(settings),
            tool_registry,
            settings,
            classifier_model=create_openai_model(settings, settings.classifier_model),
        )
    return _agent
