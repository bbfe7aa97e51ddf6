from __future__ import annotations

import math
from typing import Any, Iterable, Optional

from .tokenizer_registry import count_chat_tokens, count_text_tokens, record_tokenizer_fallback

_FALLBACK_CHARS_PER_TOKEN = 4


def _fallback_token_estimate(text: str) -> int:
    return max(1, math.ceil(len(text) / _FALLBACK_CHARS_PER_TOKEN))


def estimate_tokens(text: str, *, tokenizer_id: Optional[str] = None) -> int:
    if not text:
        return 0
    identifier = (tokenizer_id or "").strip()
    if identifier:
        token_count = count_text_tokens(text, identifier)
        if token_count is not None:
            return token_count
        record_tokenizer_fallback(identifier, "text_count_fallback")
    return _fallback_token_estimate(text)


def estimate_messages_tokens(messages: Iterable[dict], *, tokenizer_id: Optional[str] = None) -> int:
    identifier = (tokenizer_id or "").strip()
    cached_messages = list(messages)
    if identifier:
        token_count = count_chat_tokens(cached_messages, identifier)
        if token_count is not None:
            return token_count
        record_tokenizer_fallback(identifier, "chat_count_fallback")
    total = 0
    for message in cached_messages:
        total += 4  # per-message structural overhead heuristic
        total += estimate_tokens(str(message.get("content") or ""))
    return total + 2


def estimate_transcript_tokens(
    turns: Iterable[Any],
    *,
    tokenizer_id: Optional[str] = None,
    system_prompt: Optional[str] = None,
) -> int:
    """Token estimate for transcript turns (anything with ``role`` and ``content``)."""
    messages = [{"role": "system", "content": system_prompt}] if system_prompt else []
    messages.extend({"role": turn.role, "content": turn.content} for turn in turns)
    return estimate_messages_tokens(messages, tokenizer_id=tokenizer_id)
