"""
Synthetic user turns appended by the loop guards.

Hint selection is a strategy: any callable ``question -> hint`` can replace
the keyword tables below.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Pattern, Sequence, Tuple

HintStrategy = Callable[[str], str]

_FORECAST = re.compile(r"\bQ[1-4]\b|quarter|forecast|commit|best.?case", re.IGNORECASE)
_DEALS = re.compile(r"\b(?:deal|pipeline|stage|close|won|lost)", re.IGNORECASE)
_CONVERSATIONS = re.compile(r"\b(?:call|meeting|conversation|objection|competi)", re.IGNORECASE)
_REPS = re.compile(r"\b(?:rep|account.exec|AE\b|quota|attainment)", re.IGNORECASE)

FORECAST_HINT = (
    ' For forecast questions: call get_skill_evidence with skill_id="weekly-forecast-rollup", '
    "then call query_deals with close_date_from and close_date_to for the relevant quarter."
)


@dataclass(frozen=True)
class KeywordHintRules:
    """First matching pattern wins; ``default`` applies when none match."""
    rules: Tuple[Tuple[Pattern[str], str], ...]
    default: str

    def __call__(self, question: str) -> str:
        for pattern, hint in self.rules:
            if pattern.search(question or ""):
                return hint
        return self.default


TRUNCATION_HINTS = KeywordHintRules(
    rules=(
        (_FORECAST, FORECAST_HINT),
        (_CONVERSATIONS, " Call search_transcripts or query_conversations to get live call data."),
    ),
    default=" Call the appropriate tools from the available set, gather data, then synthesize a focused answer.",
)

NO_EVIDENCE_HINTS = KeywordHintRules(
    rules=(
        (_FORECAST, FORECAST_HINT),
        (_DEALS, " Call query_deals to retrieve live pipeline data."),
        (_CONVERSATIONS, " Call query_conversations to get live call data."),
        (_REPS, ' Call get_skill_evidence with skill_id="rep-scorecard" or query_deals filtered by owner.'),
    ),
    default=" Call the appropriate tool from the available tools.",
)

TRUNCATION_NUDGE_PREFIX = (
    "[Your previous response was truncated because it exceeded the token limit. "
    "Do NOT try to write a long answer from memory. Instead, call the appropriate tools to gather data, "
    "then give a concise answer based on the results."
)

NO_EVIDENCE_NUDGE_PREFIX = "[You answered without calling any tools. You must query live data before responding."


def truncation_nudge(question: str, hints: HintStrategy = TRUNCATION_HINTS) -> str:
    return TRUNCATION_NUDGE_PREFIX + hints(question) + "]"


def no_evidence_nudge(question: str, hints: HintStrategy = NO_EVIDENCE_HINTS) -> str:
    return NO_EVIDENCE_NUDGE_PREFIX + hints(question) + "]"


def build_rules(pairs: Sequence[Tuple[str, str]], default: str) -> KeywordHintRules:
    """Compile ``(regex, hint)`` pairs into a case-insensitive rule table."""
    return KeywordHintRules(
        rules=tuple((re.compile(pattern, re.IGNORECASE), hint) for pattern, hint in pairs),
        default=default,
    )
