from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Tuple, Union

from ..services.agent.models import StoredMessage, TurnMessage
from ..token_utils import estimate_transcript_tokens

StoredLike = Union[StoredMessage, Mapping[str, Any]]


def _coerce(entry: StoredLike) -> StoredMessage:
    if isinstance(entry, StoredMessage):
        return entry
    tools = entry.get("tools_used")
    if tools is None:
        # Persisted turns may still carry a full trace; only the tool names are kept.
        trace = entry.get("tool_trace") or []
        tools = [t.get("tool") for t in trace if isinstance(t, Mapping) and t.get("tool")]
    return StoredMessage(
        role=(entry.get("role") or "user").strip().lower(),
        content=entry.get("content") or "",
        tools_used=list(tools or []),
    )


def tools_note(tools_used: Iterable[str]) -> str:
    names = [name for name in tools_used if name]
    if not names:
        return ""
    return f"[Tools used for this answer: {', '.join(names)}]"


def build_conversation_history(
    messages: Iterable[StoredLike],
    *,
    max_messages: int = 10,
) -> List[TurnMessage]:
    """
    Turn stored prior turns into transcript turns for a new question.

    Prior tool results are never replayed: an assistant turn that used tools
    gets a short note naming them so the model knows what was already
    queried without anchoring on stale data.
    """
    stored = [_coerce(entry) for entry in messages or []]
    if not stored:
        return []

    recent = stored[-max_messages:] if max_messages > 0 else []
    history: List[TurnMessage] = []
    for msg in recent:
        if msg.role == "user":
            history.append(TurnMessage.user(msg.content))
        elif msg.role == "assistant":
            note = tools_note(msg.tools_used)
            if note:
                content = (msg.content + "\n\n" if msg.content else "") + note
                history.append(TurnMessage.assistant(content))
            else:
                history.append(TurnMessage.assistant(msg.content))
    return history


def trim_history_for_budget(
    history: List[TurnMessage],
    *,
    tokenizer_id: str,
    token_limit: int,
    system_prompt: str,
) -> Tuple[List[TurnMessage], bool, int]:
    """Drop the oldest turns until system prompt plus history fit ``token_limit``."""
    trimmed = list(history)
    history_truncated = False
    while trimmed:
        total = estimate_transcript_tokens(trimmed, tokenizer_id=tokenizer_id, system_prompt=system_prompt)
        if total <= token_limit:
            return trimmed, history_truncated, total
        trimmed.pop(0)
        history_truncated = True

    return [], history_truncated, estimate_transcript_tokens([], tokenizer_id=tokenizer_id, system_prompt=system_prompt)


def summarize_history(messages: List[TurnMessage], *, max_entries: int = 6, max_chars: int = 800) -> str:
    if not messages:
        return ""
    parts: List[str] = []
    for entry in messages[-max_entries:]:
        label = "User" if entry.role == "user" else "Assistant"
        content = (entry.content or "").strip().replace("\n", " ")
        if len(content) > 200:
            content = content[:197] + "..."
        parts.append(f"{label}: {content}")
    return " | ".join(parts)[:max_chars]
