from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Sequence

import tiktoken

logger = logging.getLogger(__name__)

_TOKENIZER_STATS: Dict[str, Dict[str, Any]] = {}

# Per-message structural overhead used by OpenAI chat formats.
_TOKENS_PER_MESSAGE = 4
_TOKENS_PER_REPLY = 2


def _ensure_entry(identifier: str) -> Dict[str, Any]:
    entry = _TOKENIZER_STATS.setdefault(
        identifier,
        {
            "loaded": False,
            "error": None,
            "fallback_count": 0,
            "last_fallback_reason": None,
        },
    )
    return entry


def record_tokenizer_fallback(identifier: Optional[str], reason: str) -> None:
    ident = (identifier or "").strip()
    if not ident:
        return
    entry = _ensure_entry(ident)
    entry["fallback_count"] = int(entry.get("fallback_count") or 0) + 1
    entry["last_fallback_reason"] = reason


def tokenizer_diagnostics() -> Dict[str, Dict[str, Any]]:
    return {key: dict(value) for key, value in _TOKENIZER_STATS.items()}


@lru_cache(maxsize=8)
def _load_encoding(identifier: str) -> Optional[Any]:
    """Resolve an identifier as a tiktoken encoding name, then as a model name."""
    entry = _ensure_entry(identifier)
    try:
        encoding = tiktoken.get_encoding(identifier)
    except (KeyError, ValueError):
        try:
            encoding = tiktoken.encoding_for_model(identifier)
        except Exception as exc:  # pragma: no cover - logging only
            entry["loaded"] = False
            entry["error"] = str(exc)
            logger.warning("Failed to load tokenizer %s: %s", identifier, exc)
            return None
    except Exception as exc:  # pragma: no cover - network/cache failures
        entry["loaded"] = False
        entry["error"] = str(exc)
        logger.warning("Failed to load tokenizer %s: %s", identifier, exc)
        return None
    entry["loaded"] = True
    entry["error"] = None
    return encoding


def load_tokenizer(tokenizer_id: str) -> Optional[Any]:
    identifier = (tokenizer_id or "").strip()
    if not identifier:
        return None
    return _load_encoding(identifier)


def count_text_tokens(text: str, tokenizer_id: str) -> Optional[int]:
    encoding = load_tokenizer(tokenizer_id)
    if encoding is None:
        return None
    try:
        return len(encoding.encode(text, disallowed_special=()))
    except Exception as exc:  # pragma: no cover - logging only
        logger.warning("Tokenizer %s failed to encode text: %s", tokenizer_id, exc)
        _ensure_entry((tokenizer_id or "").strip())["error"] = str(exc)
        return None


def count_chat_tokens(messages: Sequence[Dict[str, Any]], tokenizer_id: str) -> Optional[int]:
    encoding = load_tokenizer(tokenizer_id)
    if encoding is None:
        return None
    total = 0
    try:
        for message in messages:
            total += _TOKENS_PER_MESSAGE
            total += len(encoding.encode(str(message.get("content") or ""), disallowed_special=()))
    except Exception as exc:  # pragma: no cover - logging only
        logger.warning("Tokenizer %s failed to encode chat messages: %s", tokenizer_id, exc)
        _ensure_entry((tokenizer_id or "").strip())["error"] = str(exc)
        return None
    return total + _TOKENS_PER_REPLY
