"""
Cited-record extraction from the tool trace.

Walks every successful trace entry and turns recognized record arrays into
``CitedRecord`` values, deduplicated by ``(type, id)`` with first-seen wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Set, Tuple

from .models import CitedRecord, ToolCallRecord


@dataclass(frozen=True)
class RecordField:
    """How one result array maps onto cited records."""
    result_key: str
    record_type: str
    name_key: str
    key_fields: Tuple[str, ...]


RECORD_FIELDS: Tuple[RecordField, ...] = (
    RecordField("deals", "deal", "name", ("amount", "stage", "close_date", "owner_name", "account_name")),
    RecordField("accounts", "account", "name", ("domain", "open_deal_count", "total_pipeline")),
    RecordField("conversations", "conversation", "title", ("date", "account_name", "rep_name", "duration_minutes")),
    RecordField("contacts", "contact", "name", ("email", "title", "account_name")),
    # Metric tools list the deals behind their math.
    RecordField("underlying_records", "deal", "name", ("amount", "included_because")),
)


def _iter_records(result: Dict[str, Any], mapping: RecordField) -> Iterable[CitedRecord]:
    items = result.get(mapping.result_key)
    if not isinstance(items, list):
        return
    for item in items:
        if not isinstance(item, dict):
            continue
        record_id = item.get("id")
        if record_id is None or record_id == "":
            continue
        yield CitedRecord(
            type=mapping.record_type,  # type: ignore[arg-type]
            id=str(record_id),
            name=item.get(mapping.name_key),
            key_fields={name: item.get(name) for name in mapping.key_fields},
        )


def extract_cited_records(tool_trace: Iterable[ToolCallRecord]) -> List[CitedRecord]:
    records: List[CitedRecord] = []
    seen: Set[Tuple[str, str]] = set()

    for call in tool_trace:
        if call.is_error or not isinstance(call.result, dict):
            continue
        for mapping in RECORD_FIELDS:
            for record in _iter_records(call.result, mapping):
                key = (record.type, record.id)
                if key in seen:
                    continue
                seen.add(key)
                records.append(record)

    return records
