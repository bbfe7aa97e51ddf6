"""
Per-tool projection of raw tool results before they enter the transcript.

Registered projections keep only the fields needed to cite or reason about a
record. Every other tool falls through to a generic size cap, so the size of
one tool turn is bounded no matter how large the underlying result is.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompressionLimits:
    max_chars: int = 2000
    preview_chars: int = 1500
    skill_evidence_max_chars: int = 8000
    excerpt_max_chars: int = 150

    @classmethod
    def from_settings(cls, settings: Any) -> "CompressionLimits":
        return cls(
            max_chars=settings.compress_max_chars,
            preview_chars=settings.compress_preview_chars,
            skill_evidence_max_chars=settings.skill_evidence_max_chars,
            excerpt_max_chars=settings.excerpt_max_chars,
        )


Projection = Callable[[Dict[str, Any], CompressionLimits], Any]


def serialize_result(result: Any) -> str:
    return json.dumps(result, default=str, ensure_ascii=False)


def _pick(record: Any, fields: List[str]) -> Dict[str, Any]:
    if not isinstance(record, dict):
        return {}
    return {name: record.get(name) for name in fields}


def _project_list(result: Dict[str, Any], key: str, fields: List[str]) -> Optional[List[Dict[str, Any]]]:
    items = result.get(key)
    if not isinstance(items, list):
        return None
    return [_pick(item, fields) for item in items]


def _compress_search_transcripts(result: Dict[str, Any], limits: CompressionLimits) -> Dict[str, Any]:
    compressed: Dict[str, Any] = {
        "total_matches": result.get("total_matches"),
        "total_results_available": result.get("total_results_available"),
        "query_description": result.get("query_description"),
    }
    excerpts = result.get("excerpts")
    if isinstance(excerpts, list):
        compressed["excerpts"] = []
        for entry in excerpts:
            item = _pick(entry, ["conversation_title", "conversation_date", "speaker", "excerpt"])
            if isinstance(item.get("excerpt"), str):
                item["excerpt"] = item["excerpt"][: limits.excerpt_max_chars]
            compressed["excerpts"].append(item)
    return compressed


def _compress_conversations(result: Dict[str, Any], limits: CompressionLimits) -> Dict[str, Any]:
    compressed: Dict[str, Any] = {
        "total_count": result.get("total_count"),
        "query_description": result.get("query_description"),
    }
    conversations = _project_list(result, "conversations", ["id", "title", "date", "call_date", "participants"])
    if conversations is not None:
        for item in conversations:
            call_date = item.pop("call_date", None)
            if item and not item.get("date"):
                item["date"] = call_date
        compressed["conversations"] = conversations
    return compressed


def _compress_deals(result: Dict[str, Any], limits: CompressionLimits) -> Dict[str, Any]:
    compressed: Dict[str, Any] = {
        "total_count": result.get("total_count"),
        "total_amount": result.get("total_amount"),
        "query_description": result.get("query_description"),
    }
    deals = _project_list(result, "deals", [
        "id", "name", "amount", "stage", "close_date", "owner_name", "account_name", "forecast_category",
    ])
    if deals is not None:
        compressed["deals"] = deals
    return compressed


def _compress_accounts(result: Dict[str, Any], limits: CompressionLimits) -> Dict[str, Any]:
    compressed: Dict[str, Any] = {
        "total_count": result.get("total_count"),
        "query_description": result.get("query_description"),
    }
    accounts = _project_list(result, "accounts", [
        "id", "name", "total_pipeline", "open_deal_count", "industry",
    ])
    if accounts is not None:
        compressed["accounts"] = accounts
    return compressed


def _compress_skill_evidence(result: Dict[str, Any], limits: CompressionLimits) -> Any:
    # Skill output is already a curated summary; only the size cap applies.
    return cap_result(result, limits.skill_evidence_max_chars, limits.preview_chars)


PROJECTIONS: Dict[str, Projection] = {
    "search_transcripts": _compress_search_transcripts,
    "query_conversations": _compress_conversations,
    "query_deals": _compress_deals,
    "query_accounts": _compress_accounts,
    "get_skill_evidence": _compress_skill_evidence,
}


def cap_result(result: Any, max_chars: int, preview_chars: int) -> Any:
    serialized = serialize_result(result)
    if len(serialized) > max_chars:
        return {
            "truncated": True,
            "original_size": len(serialized),
            "preview": serialized[:preview_chars],
        }
    return result


def compress_tool_result(
    tool_name: str,
    result: Any,
    limits: Optional[CompressionLimits] = None,
) -> Any:
    """
    Shrink a raw tool result to a compact, JSON-serializable value.

    Non-dict results are returned unchanged when small, capped otherwise.
    Never raises: a projection that fails falls back to the generic cap.
    """
    limits = limits or CompressionLimits()
    try:
        if not isinstance(result, dict):
            return cap_result(result, limits.max_chars, limits.preview_chars)
        projection = PROJECTIONS.get(tool_name)
        if projection is not None:
            return projection(result, limits)
        return cap_result(result, limits.max_chars, limits.preview_chars)
    except Exception as exc:
        logger.warning(f"compress_tool_result({tool_name}) failed, using generic cap: {exc}")
        return _text_preview(result, limits)


def render_tool_result(
    tool_name: str,
    result: Any,
    limits: Optional[CompressionLimits] = None,
) -> str:
    """
    Compress and serialize a tool result for its transcript turn.

    Never raises: a compressed value the JSON encoder rejects (circular or
    exotic values) is replaced by a text preview of the raw result.
    """
    limits = limits or CompressionLimits()
    compressed = compress_tool_result(tool_name, result, limits)
    try:
        return serialize_result(compressed)
    except (TypeError, ValueError) as exc:
        logger.warning(f"render_tool_result({tool_name}) could not serialize, using text preview: {exc}")
        return serialize_result(_text_preview(result, limits))


def _text_preview(result: Any, limits: CompressionLimits) -> Dict[str, Any]:
    serialized = str(result)
    return {
        "truncated": len(serialized) > limits.max_chars,
        "original_size": len(serialized),
        "preview": serialized[: limits.preview_chars],
    }
