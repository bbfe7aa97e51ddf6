"""
Analyst agent.

The model drives a bounded tool-calling loop over the revenue data tools
and answers with an auditable evidence trail.

Components:
- catalog: Tool descriptors exposed to the model
- classifier: Pre-flight complexity/tool-hint classification
- compressor: Per-tool projection of tool results for the transcript
- evidence: Cited-record extraction from the tool trace
- nudges: Guard nudge texts and keyword hint strategies
- llm: Reasoning-model boundary (OpenAI-compatible adapter)
- executor: Tool executor boundary and in-process registry
- orchestrator: The loop itself
"""

from .executor import DataToolRegistry, ToolExecutor, ToolNotFoundError
from .llm import OpenAIReasoningModel, ReasoningModel, create_openai_model
from .models import CitedRecord, Classification, SessionResponse, StoredMessage, ToolCallRecord
from .orchestrator import AnalystAgent, answer_question

__all__ = [
    "AnalystAgent",
    "answer_question",
    "CitedRecord",
    "Classification",
    "DataToolRegistry",
    "OpenAIReasoningModel",
    "ReasoningModel",
    "SessionResponse",
    "StoredMessage",
    "ToolCallRecord",
    "ToolExecutor",
    "ToolNotFoundError",
    "create_openai_model",
]
