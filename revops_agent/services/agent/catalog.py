"""
Tool catalog exposed to the reasoning model.

Every entry is a ``ToolDescriptor`` with a JSON-schema parameter block. The
catalog is built once at import time and shared read-only by all sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

SKILL_IDS = [
    "pipeline-hygiene",
    "single-thread-alert",
    "data-quality-audit",
    "pipeline-coverage-by-rep",
    "weekly-forecast-rollup",
    "pipeline-waterfall",
    "rep-scorecard",
    "stage-velocity-benchmarks",
    "conversation-intelligence",
    "forecast-model",
    "pipeline-gen-forecast",
    "competitive-intelligence",
    "contact-role-resolution",
]


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


def _schema(properties: Dict[str, Any], required: Optional[List[str]] = None) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": list(required or [])}


def _str(description: str, enum: Optional[List[str]] = None) -> Dict[str, Any]:
    prop: Dict[str, Any] = {"type": "string", "description": description}
    if enum:
        prop["enum"] = list(enum)
    return prop


def _num(description: str) -> Dict[str, Any]:
    return {"type": "number", "description": description}


def _bool(description: str) -> Dict[str, Any]:
    return {"type": "boolean", "description": description}


TOOL_CATALOG: Tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name="query_deals",
        description=(
            "Query deal/opportunity records with flexible filters. Returns individual deal records with name, "
            "amount, stage, close_date, owner, account, days_in_stage, probability, forecast_category. Always "
            "returns total_count and total_amount across all matches. Use this when you need to see specific "
            "deals, break down pipeline numbers, or analyze deal-level data."
        ),
        parameters=_schema({
            "scope_id": _str('Filter by analysis scope (e.g., "new-business", "renewals"); only deals in that segment are returned'),
            "is_open": _bool("true for open pipeline, false for closed deals"),
            "stage": _str("Filter by stage name (partial match supported)"),
            "owner_email": _str("Filter by deal owner email"),
            "owner_name": _str("Filter by deal owner name (partial match)"),
            "account_id": _str("Filter by account ID"),
            "account_name": _str("Filter by account name (partial match)"),
            "close_date_from": _str("ISO date: deals closing on or after this date"),
            "close_date_to": _str("ISO date: deals closing on or before this date"),
            "amount_min": _num("Minimum deal amount"),
            "amount_max": _num("Maximum deal amount"),
            "created_after": _str("ISO date: deals created after"),
            "created_before": _str("ISO date: deals created before"),
            "forecast_category": _str("Filter: commit, best_case, pipeline, omitted"),
            "pipeline_name": _str('Filter by named pipeline (e.g., "Sales Pipeline")'),
            "has_findings": _bool("Only deals with active AI skill findings"),
            "limit": _num("Max records to return (default 50, max 200)"),
            "order_by": _str("Sort by: amount, close_date, created_date, days_in_stage"),
            "order_dir": _str("Sort direction", enum=["asc", "desc"]),
        }),
    ),
    ToolDescriptor(
        name="query_accounts",
        description=(
            "Query account/company records. Returns name, domain, industry, employee_count, owner, open deal "
            "count, total pipeline value, last activity date. Use to look up companies, find accounts by name or "
            "domain, or get account-level views."
        ),
        parameters=_schema({
            "name": _str("Partial match on account name"),
            "domain": _str("Domain filter (exact or partial)"),
            "industry": _str("Industry filter"),
            "owner_email": _str("Account owner email"),
            "has_open_deals": _bool("Only accounts with open pipeline"),
            "min_pipeline_value": _num("Minimum total open pipeline"),
            "limit": _num("Max records (default 50)"),
            "order_by": _str("Sort by: name, pipeline_value, deal_count, last_activity"),
        }),
    ),
    ToolDescriptor(
        name="query_conversations",
        description=(
            "Query call/meeting records. Returns title, date, duration, participants, account/deal linkage, "
            "summaries, and optionally transcript excerpts. Use for anything about what happened on calls: "
            "objections, competitive mentions, coaching, patterns."
        ),
        parameters=_schema({
            "account_id": _str("Conversations linked to this account"),
            "account_name": _str("Partial match on linked account name"),
            "deal_id": _str("Conversations linked to this deal"),
            "rep_email": _str("Conversations involving this rep"),
            "since": _str("ISO date: conversations after this date"),
            "until": _str("ISO date: conversations before this date"),
            "title_contains": _str("Search in conversation title"),
            "transcript_search": _str("Full-text search in transcript content"),
            "summary_search": _str("Search in AI-generated summaries"),
            "is_internal": _bool("Filter internal vs external calls (default false = external only)"),
            "min_duration_minutes": _num("Minimum call length in minutes"),
            "source": _str("Filter by source system", enum=["gong", "fireflies"]),
            "include_transcript_excerpts": _bool("Include relevant transcript segments (uses more tokens)"),
            "excerpt_keyword": _str("Keyword to center transcript excerpts around"),
            "limit": _num("Max records (default 30)"),
            "order_by": _str("Sort by: date, duration, account_name"),
        }),
    ),
    ToolDescriptor(
        name="get_skill_evidence",
        description=(
            "Retrieve the most recent output from a scheduled analysis skill. Skills produce findings (claims "
            "with severity) plus evaluated records. ALWAYS check skill evidence before querying raw data for "
            "pipeline health, risk, forecasting, or rep performance. Available skills: " + ", ".join(SKILL_IDS) + "."
        ),
        parameters=_schema({
            "skill_id": _str("The skill to pull evidence from", enum=SKILL_IDS),
            "max_age_hours": _num("Only return if run within this many hours (default 24)"),
            "filter_severity": _str("Only return findings of this severity", enum=["critical", "warning", "info"]),
            "filter_entity_id": _str("Only return findings about this specific deal/account/rep"),
        }, required=["skill_id"]),
    ),
    ToolDescriptor(
        name="compute_metric",
        description=(
            "Calculate a specific business metric with a full show-your-work breakdown. Returns the value, the "
            "exact formula, every input, every record included, and every record excluded with reasons. ALWAYS "
            "use this instead of manual calculation."
        ),
        parameters=_schema({
            "metric": _str("The metric to calculate", enum=[
                "total_pipeline", "weighted_pipeline", "win_rate", "avg_deal_size",
                "avg_sales_cycle", "coverage_ratio", "pipeline_created", "pipeline_closed",
            ]),
            "scope_id": _str("Filter by analysis scope; only calculates from deals in that segment"),
            "owner_email": _str("Scope to one rep"),
            "date_from": _str("Start of period (ISO date)"),
            "date_to": _str("End of period (ISO date)"),
            "stage": _str("Scope to one stage"),
            "pipeline_name": _str("Scope to one named pipeline"),
            "quota_amount": _num("Explicit quota for coverage_ratio"),
            "lookback_days": _num("For win_rate: number of days to look back (default 90)"),
        }, required=["metric"]),
    ),
    ToolDescriptor(
        name="query_contacts",
        description=(
            "Query contact records associated with accounts and deals. Returns name, email, title, account, role "
            "(champion/economic_buyer/etc), last activity, conversation count. Use for stakeholder mapping, "
            "multi-threading analysis, or finding decision-makers."
        ),
        parameters=_schema({
            "account_id": _str("Contacts at this account"),
            "deal_id": _str("Contacts associated with this deal"),
            "name": _str("Partial match on contact name"),
            "email": _str("Exact or partial email match"),
            "title_contains": _str("Job title search"),
            "role": _str("Filter by role: champion, economic_buyer, technical_evaluator, coach, blocker"),
            "has_conversation": _bool("Only contacts who appeared on calls"),
            "limit": _num("Max records (default 50)"),
        }),
    ),
    ToolDescriptor(
        name="query_activity_timeline",
        description=(
            "Get a chronological timeline of activity for a deal or account: stage changes, calls, emails, "
            "tasks, notes, meetings with dates and actors. Use to understand what happened and when."
        ),
        parameters=_schema({
            "deal_id": _str("Timeline for this deal"),
            "account_id": _str("Timeline across all deals at this account"),
            "since": _str("ISO date: events after this date"),
            "until": _str("ISO date: events before this date"),
            "activity_types": {
                "type": "array",
                "items": {"type": "string", "enum": ["stage_change", "call", "email", "task", "note", "meeting"]},
                "description": "Filter by activity type",
            },
            "limit": _num("Max events (default 50)"),
        }),
    ),
    ToolDescriptor(
        name="query_stage_history",
        description=(
            "Get stage transition history for a deal or across the workspace, with from/to stages, timestamps, "
            "days spent in the previous stage, and direction (advance/regress/lateral/initial)."
        ),
        parameters=_schema({
            "deal_id": _str("Stage history for a specific deal"),
            "account_id": _str("Stage history across all deals at this account"),
            "since": _str("ISO date: transitions after this date"),
            "until": _str("ISO date: transitions before this date"),
            "direction": _str('Filter by transition direction; "regress" finds deals that moved backward',
                              enum=["advance", "regress", "all"]),
            "limit": _num("Max transitions to return (default 50)"),
        }),
    ),
    ToolDescriptor(
        name="compute_stage_benchmarks",
        description=(
            "Calculate historical time-in-stage benchmarks: median, p75, p90 days per stage, plus conversion "
            "and drop rates. Can segment by pipeline, deal size band, or individual rep."
        ),
        parameters=_schema({
            "stage": _str("Specific stage to benchmark, or omit for all stages"),
            "pipeline": _str("Filter by pipeline name"),
            "deal_size_band": _str("Segment by deal size", enum=["small", "mid", "large", "enterprise"]),
            "owner_email": _str("Benchmarks for a specific rep (compare to team)"),
            "lookback_months": _num("How many months of history (default 12)"),
            "only_closed_won": _bool("Only include deals that eventually closed-won (default false)"),
        }),
    ),
    ToolDescriptor(
        name="query_field_history",
        description=(
            "Get the change history for a deal's key fields: stage transitions, close date pushes, amount "
            "changes, with old/new values and timestamps plus a stage regression count."
        ),
        parameters=_schema({
            "deal_id": _str("The deal to get history for (required)"),
            "field_name": _str("Which field to track (default: all)",
                               enum=["close_date", "amount", "stage", "forecast_category", "all"]),
            "since": _str("ISO date: only changes after this date"),
        }, required=["deal_id"]),
    ),
    ToolDescriptor(
        name="compute_metric_segmented",
        description=(
            "Calculate a metric broken down by segment (e.g. win rate by rep, avg deal size by pipeline). "
            "Returns each segment's value, sample size, and comparison to team average."
        ),
        parameters=_schema({
            "metric": _str("The metric to calculate", enum=[
                "win_rate", "avg_deal_size", "avg_sales_cycle", "total_pipeline", "pipeline_created",
            ]),
            "segment_by": _str("How to segment the results", enum=[
                "owner", "stage", "pipeline", "deal_size_band", "source", "forecast_category",
            ]),
            "date_from": _str("Start of period (ISO date)"),
            "date_to": _str("End of period (ISO date)"),
            "lookback_days": _num("Alternative to date_from/to: look back N days"),
        }, required=["metric", "segment_by"]),
    ),
    ToolDescriptor(
        name="search_transcripts",
        description=(
            "Full-text search across call and meeting transcripts. Returns matching excerpts with surrounding "
            "context, speaker attribution, and conversation metadata."
        ),
        parameters=_schema({
            "query": _str("Search terms: a word, phrase, or topic"),
            "deal_id": _str("Only search conversations linked to this deal"),
            "account_id": _str("Only search conversations linked to this account"),
            "rep_email": _str("Only search conversations involving this rep"),
            "since": _str("ISO date: conversations after this date"),
            "until": _str("ISO date: conversations before this date"),
            "max_results": _num("Max excerpts to return (default 10)"),
        }, required=["query"]),
    ),
    ToolDescriptor(
        name="compute_forecast_accuracy",
        description=(
            "Calculate historical forecast accuracy per rep: what percentage of committed pipeline actually "
            "closed. Identifies sandbagging and over-committing and returns a haircut factor."
        ),
        parameters=_schema({
            "owner_email": _str("Specific rep, or omit for all reps"),
            "lookback_quarters": _num("How many quarters to analyze (default 4)"),
        }),
    ),
    ToolDescriptor(
        name="compute_close_probability",
        description=(
            "Score each open deal on close probability (0-95) using engagement, velocity, qualification and "
            "execution signals. Returns scored_deals sorted by probability and probability_weighted_pipeline."
        ),
        parameters=_schema({
            "owner_name": _str("Score only deals owned by this rep (partial name match)"),
            "deal_ids": {"type": "array", "items": {"type": "string"}, "description": "Score specific deals by ID"},
            "limit": _num("Max deals to score (default 50, max 100)"),
        }),
    ),
    ToolDescriptor(
        name="compute_pipeline_creation",
        description=(
            "Calculate historical pipeline creation rate per month/quarter/week, with trends and optional "
            "segmentation by source, owner, pipeline, or deal size."
        ),
        parameters=_schema({
            "group_by": _str("Time grouping (default: month)", enum=["month", "quarter", "week"]),
            "lookback_months": _num("How many months of history (default 12)"),
            "segment_by": _str("Optional segmentation", enum=["source", "owner", "pipeline", "deal_size_band"]),
            "include_current_period": _bool("Include the current incomplete period (default true)"),
            "pipeline_filter": _str("Filter to a specific pipeline by name"),
        }),
    ),
    ToolDescriptor(
        name="compute_inqtr_close_rate",
        description=(
            "Calculate the rate at which pipeline created within a quarter closes in that same quarter, with a "
            "projection for the current quarter."
        ),
        parameters=_schema({
            "lookback_quarters": _num("How many quarters to analyze (default 4)"),
            "segment_by": _str("Optional segmentation", enum=["source", "owner", "pipeline", "deal_size_band"]),
        }),
    ),
    ToolDescriptor(
        name="compute_competitive_rates",
        description=(
            "Calculate win/loss rates when specific competitors are present vs absent, where they appear in "
            "the funnel, and recent deal outcomes."
        ),
        parameters=_schema({
            "competitor": _str("Specific competitor name, or omit for all detected competitors"),
            "lookback_months": _num("How many months to analyze (default 12)"),
        }),
    ),
    ToolDescriptor(
        name="compute_activity_trend",
        description=(
            "30-day engagement trajectory for a deal: weekly activity counts, regression slope, and trend "
            "classification (increasing/flat/declining)."
        ),
        parameters=_schema({
            "deal_id": _str("ID of the deal to analyze"),
            "lookback_days": _num("Days to look back (default 30)"),
        }, required=["deal_id"]),
    ),
    ToolDescriptor(
        name="compute_shrink_rate",
        description=(
            "Calculate how much deal amounts shrink from initial value to closed-won amount: avg_shrink_pct, "
            "median, confidence level, optional segmentation by rep or deal size."
        ),
        parameters=_schema({
            "lookback_quarters": _num("Quarters of history to analyze (default 4)"),
            "segment_by": _str("Optional segmentation axis", enum=["deal_size", "rep"]),
        }),
    ),
    ToolDescriptor(
        name="infer_contact_role",
        description=(
            "Infer a contact's buying role (economic_buyer, champion, technical_evaluator, coach, blocker, "
            "unknown) from job title and call participation, with a confidence score and signals."
        ),
        parameters=_schema({
            "contact_id": _str("ID of the contact to classify"),
        }, required=["contact_id"]),
    ),
)

_BY_NAME: Dict[str, ToolDescriptor] = {tool.name: tool for tool in TOOL_CATALOG}


def tool_names() -> List[str]:
    return [tool.name for tool in TOOL_CATALOG]


def get_tool(name: str) -> Optional[ToolDescriptor]:
    return _BY_NAME.get(name)
