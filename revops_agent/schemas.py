from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class StoredTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = ""
    tools_used: List[str] = Field(default_factory=list)


class AskRequest(BaseModel):
    question: Optional[str] = Field(default=None)
    prior_turns: List[StoredTurn] = Field(default_factory=list)
    scope_id: Optional[str] = Field(default=None)
    scope_name: Optional[str] = Field(default=None)


class ToolCallInfo(BaseModel):
    tool: str
    params: Dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    description: str = ""
    is_error: bool = False


class CitedRecordInfo(BaseModel):
    type: str
    id: str
    name: Optional[str] = None
    key_fields: Dict[str, Any] = Field(default_factory=dict)


class Evidence(BaseModel):
    tool_trace: List[ToolCallInfo] = Field(default_factory=list)
    cited_records: List[CitedRecordInfo] = Field(default_factory=list)


class AskResponse(BaseModel):
    answer: str
    evidence: Evidence
    tokens_used: int
    tool_call_count: int
    latency_ms: int
    iterations: int = 0
    finish_reason: Optional[str] = Field(default=None)
    classification: Optional[Dict[str, Any]] = Field(default=None)


class ToolInfo(BaseModel):
    name: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
