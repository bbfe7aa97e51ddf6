"""
Data model for the analyst agent loop.

The transcript is an append-only list of ``TurnMessage`` values and the tool
trace is an append-only list of ``ToolCallRecord`` values. Both live on a
``SessionState`` owned by exactly one question-answering session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

Role = Literal["user", "assistant", "tool"]
StopReason = Literal["end_turn", "max_tokens", "tool_use"]
QuestionType = Literal["discrete", "analytical", "strategic"]
Complexity = Literal["low", "medium", "high"]
RecordType = Literal["deal", "account", "conversation", "contact"]


@dataclass(frozen=True)
class ToolCallRequest:
    """A single tool invocation requested by the reasoning model."""
    id: str
    name: str
    input: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolCallRecord:
    """Audit entry for one executed tool call, appended once, never mutated."""
    tool: str
    params: Dict[str, Any]
    result: Any
    description: str
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tool": self.tool,
            "params": self.params,
            "result": self.result,
            "description": self.description,
            "is_error": self.is_error,
        }


@dataclass(frozen=True)
class TurnMessage:
    """
    One transcript entry.

    - user: free text in ``content``
    - assistant: optional text plus the tool-use requests it issued
    - tool: the serialized result in ``content`` keyed by ``tool_call_id``
    """
    role: Role
    content: str = ""
    tool_calls: Tuple[ToolCallRequest, ...] = ()
    tool_call_id: Optional[str] = None

    @classmethod
    def user(cls, text: str) -> "TurnMessage":
        return cls(role="user", content=text)

    @classmethod
    def assistant(cls, text: str, tool_calls: Tuple[ToolCallRequest, ...] = ()) -> "TurnMessage":
        return cls(role="assistant", content=text or "", tool_calls=tuple(tool_calls))

    @classmethod
    def tool(cls, tool_call_id: str, content: str) -> "TurnMessage":
        return cls(role="tool", content=content, tool_call_id=tool_call_id)


@dataclass(frozen=True)
class ModelUsage:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class ModelResponse:
    """Normalized reasoning-model reply."""
    text: str = ""
    tool_calls: Tuple[ToolCallRequest, ...] = ()
    stop_reason: StopReason = "end_turn"
    usage: ModelUsage = field(default_factory=ModelUsage)


@dataclass(frozen=True)
class Classification:
    question_type: QuestionType
    hinted_tools: Tuple[str, ...]
    complexity: Complexity
    token_budget: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_type": self.question_type,
            "hinted_tools": list(self.hinted_tools),
            "complexity": self.complexity,
            "token_budget": self.token_budget,
        }


@dataclass(frozen=True)
class CitedRecord:
    type: RecordType
    id: str
    name: Optional[str]
    key_fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "id": self.id,
            "name": self.name,
            "key_fields": dict(self.key_fields),
        }


@dataclass
class StoredMessage:
    """A prior turn as persisted by the caller; only tool names survive."""
    role: Literal["user", "assistant"]
    content: str
    tools_used: List[str] = field(default_factory=list)


@dataclass
class SessionState:
    """
    Mutable accumulator for one session.

    Only the ``append_*`` / ``record_*`` methods touch the transcript and
    trace, so both stay append-only.
    """
    question: str
    classification: Classification
    transcript: List[TurnMessage] = field(default_factory=list)
    tool_trace: List[ToolCallRecord] = field(default_factory=list)
    tokens_used: int = 0
    model_calls: int = 0

    def append_turn(self, message: TurnMessage) -> None:
        self.transcript.append(message)

    def record_tool_call(self, record: ToolCallRecord) -> None:
        self.tool_trace.append(record)

    def record_usage(self, usage: ModelUsage) -> None:
        self.model_calls += 1
        self.tokens_used += usage.total

    @property
    def has_evidence(self) -> bool:
        return bool(self.tool_trace)


@dataclass
class SessionResponse:
    answer: str
    tool_trace: List[ToolCallRecord]
    cited_records: List[CitedRecord]
    tokens_used: int
    tool_call_count: int
    latency_ms: int
    iterations: int = 0
    finish_reason: Literal["complete", "exhausted"] = "complete"
    classification: Optional[Classification] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "answer": self.answer,
            "evidence": {
                "tool_trace": [record.to_dict() for record in self.tool_trace],
                "cited_records": [record.to_dict() for record in self.cited_records],
            },
            "tokens_used": self.tokens_used,
            "tool_call_count": self.tool_call_count,
            "latency_ms": self.latency_ms,
            "iterations": self.iterations,
            "finish_reason": self.finish_reason,
            "classification": self.classification.to_dict() if self.classification else None,
        }
