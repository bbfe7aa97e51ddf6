"""
API routes for the analyst agent.

Provides:
- /ask - Answer a question with tool-backed evidence
- /tools - List the tool catalog exposed to the model
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from openai import OpenAIError

from ..dependencies import get_agent
from ..schemas import AskRequest, AskResponse, ToolInfo
from ..services.agent import AnalystAgent, StoredMessage
from ..services.agent.catalog import TOOL_CATALOG

logger = logging.getLogger(__name__)
router = APIRouter(tags=["agent"])


@router.post("/ask", response_model=AskResponse)
async def ask(req: AskRequest, agent: AnalystAgent = Depends(get_agent)) -> AskResponse:
    """
    Answer a question over the revenue data.

    Prior turns are supplied by the caller; only the tool names they used
    are replayed to the model.
    """
    question = (req.question or "").strip()
    if not question:
        raise HTTPException(status_code=400, detail="Question must not be empty")

    prior_turns = [
        StoredMessage(role=turn.role, content=turn.content, tools_used=list(turn.tools_used))
        for turn in req.prior_turns
    ]

    try:
        result = await agent.answer(
            question,
            prior_turns,
            scope_hint=req.scope_id,
            scope_name=req.scope_name,
        )
    except OpenAIError as e:
        logger.exception(f"Reasoning model call failed: {e}")
        raise HTTPException(status_code=502, detail=f"Reasoning model call failed: {e}") from e

    return AskResponse(**result.to_dict())


@router.get("/tools", response_model=List[ToolInfo])
async def list_tools() -> List[ToolInfo]:
    return [ToolInfo(**tool.to_dict()) for tool in TOOL_CATALOG]
