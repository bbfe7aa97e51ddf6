"""Tests for per-tool result projection and the generic size cap."""
import json

from revops_agent.services.agent.compressor import (
    CompressionLimits,
    PROJECTIONS,
    cap_result,
    compress_tool_result,
    render_tool_result,
    serialize_result,
)


class TestProjections:
    def test_query_deals_keeps_citation_fields(self):
        result = {
            "total_count": 1,
            "total_amount": 5000,
            "query_description": "one deal",
            "filters_applied": {"stage": "Won"},
            "deals": [{
                "id": "d1", "name": "Acme", "amount": 5000, "stage": "Won", "close_date": "2026-01-01",
                "owner_name": "Sam", "account_name": "Acme Inc", "forecast_category": "closed",
                "description": "long text",
            }],
        }

        compressed = compress_tool_result("query_deals", result)

        assert "filters_applied" not in compressed
        assert compressed["total_amount"] == 5000
        assert compressed["deals"][0] == {
            "id": "d1", "name": "Acme", "amount": 5000, "stage": "Won", "close_date": "2026-01-01",
            "owner_name": "Sam", "account_name": "Acme Inc", "forecast_category": "closed",
        }

    def test_search_transcripts_truncates_excerpts(self):
        result = {
            "total_matches": 1,
            "total_results_available": 4,
            "excerpts": [{
                "conversation_title": "Acme sync",
                "conversation_date": "2026-02-01",
                "speaker": "Buyer",
                "excerpt": "a" * 400,
                "embedding": [0.1, 0.2],
            }],
        }

        compressed = compress_tool_result("search_transcripts", result)

        excerpt = compressed["excerpts"][0]
        assert len(excerpt["excerpt"]) == 150
        assert "embedding" not in excerpt
        assert compressed["total_results_available"] == 4

    def test_conversations_fall_back_to_call_date(self):
        result = {"total_count": 1, "conversations": [
            {"id": "c1", "title": "Kickoff", "call_date": "2026-03-01", "participants": ["a"], "summary": "..."},
        ]}

        compressed = compress_tool_result("query_conversations", result)

        assert compressed["conversations"][0] == {
            "id": "c1", "title": "Kickoff", "date": "2026-03-01", "participants": ["a"],
        }

    def test_accounts_projection(self):
        result = {"total_count": 1, "accounts": [
            {"id": "a1", "name": "Acme", "total_pipeline": 10, "open_deal_count": 2, "industry": "SaaS", "notes": "x"},
        ]}

        compressed = compress_tool_result("query_accounts", result)

        assert "notes" not in compressed["accounts"][0]

    def test_skill_evidence_passes_through_under_cap(self):
        result = {"skill_id": "rep-scorecard", "summary": "s" * 3000}

        assert compress_tool_result("get_skill_evidence", result) == result

    def test_skill_evidence_capped(self):
        result = {"skill_id": "rep-scorecard", "summary": "s" * 9000}

        compressed = compress_tool_result("get_skill_evidence", result)

        assert compressed["truncated"] is True
        assert len(compressed["preview"]) == 1500

    def test_non_dict_records_project_to_empty(self):
        for tool, key in (("query_deals", "deals"), ("query_accounts", "accounts"),
                          ("query_conversations", "conversations")):
            compressed = compress_tool_result(tool, {key: ["not-a-dict", {"id": "x1"}]})

            assert compressed[key][0] == {}
            assert compressed[key][1]["id"] == "x1"

    def test_conversation_date_preferred_over_call_date(self):
        result = {"conversations": [{"id": "c1", "date": "2026-04-01", "call_date": "2026-03-01"}]}

        compressed = compress_tool_result("query_conversations", result)

        assert compressed["conversations"][0]["date"] == "2026-04-01"
        assert "call_date" not in compressed["conversations"][0]

    def test_registry_names(self):
        assert set(PROJECTIONS) == {
            "search_transcripts", "query_conversations", "query_deals", "query_accounts", "get_skill_evidence",
        }


class TestGenericCap:
    def test_small_result_unchanged(self):
        result = {"value": 42}

        assert compress_tool_result("compute_metric", result) == result

    def test_large_result_replaced_by_preview(self):
        result = {"rows": ["x" * 100 for _ in range(50)]}
        serialized = serialize_result(result)

        compressed = compress_tool_result("compute_metric", result)

        assert compressed == {
            "truncated": True,
            "original_size": len(serialized),
            "preview": serialized[:1500],
        }

    def test_non_dict_result(self):
        assert compress_tool_result("query_deals", [1, 2, 3]) == [1, 2, 3]
        capped = compress_tool_result("query_deals", "z" * 5000)
        assert capped["truncated"] is True

    def test_custom_limits(self):
        limits = CompressionLimits(max_chars=10, preview_chars=5)

        compressed = compress_tool_result("compute_metric", {"k": "value-long"}, limits)

        assert len(compressed["preview"]) == 5

    def test_cap_boundary(self):
        result = "a" * 8
        serialized_len = len(serialize_result(result))

        assert cap_result(result, serialized_len, 5) == result
        assert cap_result(result, serialized_len - 1, 5)["truncated"] is True

    def test_projection_failure_never_raises(self):
        class Broken(dict):
            def get(self, *args, **kwargs):
                raise ValueError("boom")

        compressed = compress_tool_result("query_deals", Broken(a=1))
        assert compressed["truncated"] is False
        assert "preview" in compressed

    def test_serialize_handles_non_json_values(self):
        from datetime import date

        assert json.loads(serialize_result({"d": date(2026, 1, 2)})) == {"d": "2026-01-02"}


class TestRenderToolResult:
    def test_renders_projection_as_json(self):
        rendered = render_tool_result("query_deals", {"total_count": 0, "deals": [], "debug": "drop me"})

        assert json.loads(rendered) == {
            "total_count": 0, "total_amount": None, "query_description": None, "deals": [],
        }

    def test_unserializable_projection_falls_back_to_preview(self):
        amount = {}
        amount["self"] = amount
        result = {"total_count": 1, "deals": [{"id": "d1", "name": "Loop", "amount": amount}]}

        rendered = json.loads(render_tool_result("query_deals", result))

        assert rendered["truncated"] is False
        assert "Loop" in rendered["preview"]

    def test_unserializable_generic_result(self):
        rows = []
        rows.append(rows)

        rendered = json.loads(render_tool_result("compute_metric", {"rows": rows}))

        assert "preview" in rendered
