"""
Analyst agent orchestrator.

Main entry point for answering a question over the data tools. Implements:
- Pre-flight classification (token budget + routing hint)
- The bounded call-model / execute-tools / append-results loop
- Truncation and no-evidence guards
- Forced tool-free synthesis once the iteration ceiling is reached
- Evidence extraction from the tool trace
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ...config import AppSettings, load_settings
from ...token_utils import estimate_transcript_tokens
from ...utils import conversation
from .catalog import TOOL_CATALOG, ToolDescriptor
from .classifier import classify_question
from .compressor import CompressionLimits, render_tool_result, serialize_result
from .evidence import extract_cited_records
from .executor import ToolExecutor, execute_with_timeout
from .llm import ReasoningModel
from .models import (
    ModelResponse,
    SessionResponse,
    SessionState,
    ToolCallRecord,
    ToolCallRequest,
    TurnMessage,
)
from .nudges import NO_EVIDENCE_HINTS, TRUNCATION_HINTS, HintStrategy, no_evidence_nudge, truncation_nudge
from .prompts import FINAL_SYNTHESIS_PROMPT, SCOPE_PREFIX_TEMPLATE, build_routing_hint, build_system_prompt

logger = logging.getLogger(__name__)

# The no-evidence guard only applies to the first iterations of a session.
NO_EVIDENCE_WINDOW = 2
DEFAULT_SCOPE = "default"


def describe_result(tool_name: str, result: Any) -> str:
    if isinstance(result, dict):
        description = result.get("query_description") or result.get("formatted")
        if description:
            return str(description)
    return f"{tool_name} call"


class AnalystAgent:
    """
    Drives one question through the reasoning loop.

    The agent itself holds only read-only collaborators; every ``answer``
    call builds its own ``SessionState``, so one agent can serve concurrent
    sessions.
    """

    def __init__(
        self,
        model: ReasoningModel,
        executor: ToolExecutor,
        settings: Optional[AppSettings] = None,
        *,
        classifier_model: Optional[ReasoningModel] = None,
        tools: Sequence[ToolDescriptor] = TOOL_CATALOG,
        truncation_hints: HintStrategy = TRUNCATION_HINTS,
        no_evidence_hints: HintStrategy = NO_EVIDENCE_HINTS,
    ):
        self.model = model
        self.classifier_model = classifier_model or model
        self.executor = executor
        self.settings = settings or load_settings()
        self.tools = tuple(tools)
        self.truncation_hints = truncation_hints
        self.no_evidence_hints = no_evidence_hints
        self.limits = CompressionLimits.from_settings(self.settings)

    async def answer(
        self,
        question: str,
        prior_turns: Iterable[conversation.StoredLike] = (),
        scope_hint: Optional[str] = None,
        scope_name: Optional[str] = None,
    ) -> SessionResponse:
        """
        Answer ``question`` with evidence.

        Args:
            question: The user's question
            prior_turns: Stored earlier turns of the same thread
            scope_hint: Default analysis scope injected into allow-listed tools
            scope_name: Display name of the scope, used to label the answer

        Returns:
            SessionResponse with the answer, tool trace and cited records

        Raises:
            Whatever the reasoning model raises; tool and classifier
            failures are recovered.
        """
        start = time.perf_counter()
        settings = self.settings
        system_prompt = build_system_prompt(len(self.tools))

        classification = await classify_question(
            question,
            self.classifier_model,
            token_budgets=settings.token_budgets,
            max_tokens=settings.classifier_max_tokens,
        )
        logger.info(f"classification: {classification.to_dict()}")

        state = SessionState(question=question, classification=classification)
        for turn in self._build_history(prior_turns, system_prompt):
            state.append_turn(turn)
        state.append_turn(TurnMessage.user(question + build_routing_hint(classification.hinted_tools)))

        scope = scope_hint if scope_hint and scope_hint != DEFAULT_SCOPE else None

        for iteration in range(settings.max_iterations):
            response = await self._call_model(
                state,
                system_prompt,
                tools=self.tools,
                max_tokens=classification.token_budget,
                label=f"iter={iteration}",
            )

            if response.stop_reason == "max_tokens" and not response.tool_calls:
                # Truncated text is dropped, never appended.
                logger.info(f"truncation guard at iter={iteration}: discarding output, injecting nudge")
                state.append_turn(TurnMessage.user(truncation_nudge(question, self.truncation_hints)))
                continue

            if not response.tool_calls:
                if not state.has_evidence and iteration < NO_EVIDENCE_WINDOW:
                    logger.info(f"no-evidence guard at iter={iteration}: no tools called, injecting nudge")
                    state.append_turn(TurnMessage.assistant(response.text))
                    state.append_turn(TurnMessage.user(no_evidence_nudge(question, self.no_evidence_hints)))
                    continue
                return self._finish(state, response.text, start, "complete", scope, scope_name)

            state.append_turn(TurnMessage.assistant(response.text, response.tool_calls))
            for call in response.tool_calls:
                await self._run_tool(state, call, scope)

        logger.info(f"iteration ceiling {settings.max_iterations} reached, forcing final synthesis")
        state.append_turn(TurnMessage.user(FINAL_SYNTHESIS_PROMPT))
        response = await self._call_model(
            state,
            system_prompt,
            tools=None,
            max_tokens=settings.final_synthesis_max_tokens,
            label="final-synthesis",
        )
        return self._finish(state, response.text, start, "exhausted", scope, scope_name)

    def _build_history(self, prior_turns: Iterable[conversation.StoredLike], system_prompt: str) -> List[TurnMessage]:
        history = conversation.build_conversation_history(prior_turns, max_messages=self.settings.history_max_messages)
        if not history:
            return []
        history, truncated, tokens = conversation.trim_history_for_budget(
            history,
            tokenizer_id=self.settings.llm_tokenizer_id,
            token_limit=self.settings.history_token_limit,
            system_prompt=system_prompt,
        )
        if truncated:
            logger.info(f"prior history trimmed to {len(history)} turns ({tokens} tokens)")
        logger.debug(f"history: {conversation.summarize_history(history)}")
        return history

    async def _call_model(
        self,
        state: SessionState,
        system_prompt: str,
        *,
        tools: Optional[Sequence[ToolDescriptor]],
        max_tokens: int,
        label: str,
    ) -> ModelResponse:
        transcript = list(state.transcript)
        transcript_tokens = estimate_transcript_tokens(transcript, tokenizer_id=self.settings.llm_tokenizer_id)
        logger.info(
            f"{label} calling model with {len(tools or ())} tools, "
            f"history={len(transcript)} msgs (~{transcript_tokens} tokens), maxTokens={max_tokens}"
        )

        call = self.model.call(
            system_prompt=system_prompt,
            transcript=transcript,
            tools=tools,
            max_tokens=max_tokens,
            temperature=self.settings.llm_temperature,
        )
        timeout = self.settings.model_timeout_seconds
        response = await (asyncio.wait_for(call, timeout) if timeout else call)

        state.record_usage(response.usage)
        logger.info(
            f"{label} stopReason={response.stop_reason} toolCalls={len(response.tool_calls)}"
            + (f" tools={','.join(c.name for c in response.tool_calls)}" if response.tool_calls else "")
        )
        return response

    def _scoped_params(self, call: ToolCallRequest, scope: Optional[str]) -> Dict[str, Any]:
        params = dict(call.input or {})
        param = self.settings.auto_scope_param
        if scope and call.name in self.settings.auto_scope_tools and params.get(param) in (None, ""):
            params[param] = scope
        return params

    async def _run_tool(self, state: SessionState, call: ToolCallRequest, scope: Optional[str]) -> None:
        params = self._scoped_params(call, scope)
        try:
            result = await execute_with_timeout(
                self.executor, call.name, params, self.settings.tool_timeout_seconds,
            )
        except Exception as e:
            self._record_failure(state, call, params, str(e) or type(e).__name__)
            return

        state.record_tool_call(ToolCallRecord(
            tool=call.name,
            params=params,
            result=result,
            description=describe_result(call.name, result),
        ))
        state.append_turn(TurnMessage.tool(call.id, render_tool_result(call.name, result, self.limits)))

    def _record_failure(
        self,
        state: SessionState,
        call: ToolCallRequest,
        params: Dict[str, Any],
        message: str,
    ) -> None:
        logger.warning(f"tool {call.name} failed: {message}")
        error = {"error": message}
        state.record_tool_call(ToolCallRecord(
            tool=call.name,
            params=params,
            result=error,
            description=f"{call.name} failed: {message}",
            is_error=True,
        ))
        state.append_turn(TurnMessage.tool(call.id, serialize_result(error)))

    def _finish(
        self,
        state: SessionState,
        text: str,
        start: float,
        finish_reason: str,
        scope: Optional[str],
        scope_name: Optional[str],
    ) -> SessionResponse:
        answer = text or ""
        if scope and scope_name:
            answer = SCOPE_PREFIX_TEMPLATE.format(scope_name=scope_name) + answer

        return SessionResponse(
            answer=answer,
            tool_trace=list(state.tool_trace),
            cited_records=extract_cited_records(state.tool_trace),
            tokens_used=state.tokens_used,
            tool_call_count=len(state.tool_trace),
            latency_ms=int((time.perf_counter() - start) * 1000),
            iterations=state.model_calls,
            finish_reason=finish_reason,  # type: ignore[arg-type]
            classification=state.classification,
        )


async def answer_question(
    question: str,
    prior_turns: Iterable[conversation.StoredLike] = (),
    scope_hint: Optional[str] = None,
    *,
    model: ReasoningModel,
    executor: ToolExecutor,
    settings: Optional[AppSettings] = None,
    classifier_model: Optional[ReasoningModel] = None,
    scope_name: Optional[str] = None,
) -> SessionResponse:
    agent = AnalystAgent(model, executor, settings, classifier_model=classifier_model)
    return await agent.answer(question, prior_turns, scope_hint=scope_hint, scope_name=scope_name)
