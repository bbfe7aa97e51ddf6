"""
Reasoning-model boundary.

``ReasoningModel`` is the only capability the loop and the classifier call.
``OpenAIReasoningModel`` implements it against any OpenAI-compatible chat
completions endpoint. Transport errors are not caught here; retry policy is
the client's ``max_retries``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .catalog import ToolDescriptor
from .models import ModelResponse, ModelUsage, StopReason, ToolCallRequest, TurnMessage

logger = logging.getLogger(__name__)

_FINISH_REASONS: Dict[str, StopReason] = {
    "tool_calls": "tool_use",
    "function_call": "tool_use",
    "length": "max_tokens",
}


class ReasoningModel(Protocol):
    async def call(
        self,
        *,
        system_prompt: str,
        transcript: Sequence[TurnMessage],
        tools: Optional[Sequence[ToolDescriptor]],
        max_tokens: int,
        temperature: float,
    ) -> ModelResponse:
        ...


def tool_to_openai(tool: ToolDescriptor) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.parameters,
        },
    }


def turn_to_openai(message: TurnMessage) -> Dict[str, Any]:
    if message.role == "tool":
        return {"role": "tool", "tool_call_id": message.tool_call_id, "content": message.content}
    if message.role == "assistant" and message.tool_calls:
        return {
            "role": "assistant",
            "content": message.content or None,
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": json.dumps(call.input, default=str)},
                }
                for call in message.tool_calls
            ],
        }
    return {"role": message.role, "content": message.content}


def build_openai_messages(system_prompt: str, transcript: Sequence[TurnMessage]) -> List[Dict[str, Any]]:
    return [{"role": "system", "content": system_prompt}, *(turn_to_openai(m) for m in transcript)]


def _parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Tool call arguments are not valid JSON: {raw[:200]}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def parse_openai_response(response: Any) -> ModelResponse:
    usage = getattr(response, "usage", None)
    model_usage = ModelUsage(
        input_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
        output_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
    )

    if not getattr(response, "choices", None):
        return ModelResponse(text="", stop_reason="end_turn", usage=model_usage)

    choice = response.choices[0]
    message = choice.message
    tool_calls = tuple(
        ToolCallRequest(
            id=call.id,
            name=call.function.name,
            input=_parse_arguments(call.function.arguments),
        )
        for call in (getattr(message, "tool_calls", None) or [])
    )
    stop_reason = _FINISH_REASONS.get(choice.finish_reason or "", "end_turn")
    if tool_calls and stop_reason == "end_turn":
        stop_reason = "tool_use"

    return ModelResponse(
        text=message.content or "",
        tool_calls=tool_calls,
        stop_reason=stop_reason,
        usage=model_usage,
    )


class OpenAIReasoningModel:
    """ReasoningModel over an ``openai.AsyncOpenAI`` chat completions client."""

    def __init__(self, client: Any, model: str):
        self.client = client
        self.model = model

    async def call(
        self,
        *,
        system_prompt: str,
        transcript: Sequence[TurnMessage],
        tools: Optional[Sequence[ToolDescriptor]],
        max_tokens: int,
        temperature: float,
    ) -> ModelResponse:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": build_openai_messages(system_prompt, transcript),
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if tools:
            kwargs["tools"] = [tool_to_openai(tool) for tool in tools]

        response = await self.client.chat.completions.create(**kwargs)
        return parse_openai_response(response)


def create_openai_model(settings: Any, model: Optional[str] = None) -> OpenAIReasoningModel:
    from openai import AsyncOpenAI

    client = AsyncOpenAI(
        base_url=settings.llm_base_url or None,
        api_key=settings.llm_api_key,
        max_retries=settings.llm_max_retries,
    )
    return OpenAIReasoningModel(client, model or settings.llm_model)
