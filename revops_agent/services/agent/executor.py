"""
Tool executor boundary.

The loop only needs ``execute(tool_name, params) -> result`` that either
returns a JSON-serializable result or raises. ``DataToolRegistry`` is the
in-process implementation: data-access callables are registered by name and
may be sync or async.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union

logger = logging.getLogger(__name__)

DataTool = Callable[..., Union[Any, Awaitable[Any]]]


class ToolNotFoundError(LookupError):
    """Raised when no data tool is registered under the requested name."""


class ToolTimeoutError(Exception):
    """Raised when a tool call outlives the configured deadline."""


class ToolExecutor(Protocol):
    async def execute(self, tool_name: str, params: Dict[str, Any]) -> Any:
        ...


async def execute_with_timeout(
    executor: ToolExecutor,
    tool_name: str,
    params: Dict[str, Any],
    timeout: Optional[float] = None,
) -> Any:
    """
    Run one tool call, optionally bounded by ``timeout`` seconds.

    Only an expired deadline raises ``ToolTimeoutError``; a ``TimeoutError``
    raised by the tool itself propagates unchanged.
    """
    pending = executor.execute(tool_name, params)
    if not timeout:
        return await pending
    task = asyncio.ensure_future(pending)
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if not done:
        task.cancel()
        raise ToolTimeoutError(f"timed out after {timeout}s")
    return task.result()


class DataToolRegistry:
    """Name-keyed registry of data tools, called with the params as keyword arguments."""

    def __init__(self) -> None:
        self.tools: Dict[str, DataTool] = {}

    def register(self, name: str, fn: DataTool) -> None:
        self.tools[name] = fn
        logger.info(f"Registered data tool: {name}")

    def tool(self, name: str) -> Callable[[DataTool], DataTool]:
        """Decorator form of ``register``."""
        def decorator(fn: DataTool) -> DataTool:
            self.register(name, fn)
            return fn
        return decorator

    def registered(self) -> List[str]:
        return sorted(self.tools)

    async def execute(self, tool_name: str, params: Dict[str, Any]) -> Any:
        fn = self.tools.get(tool_name)
        if fn is None:
            raise ToolNotFoundError(f"Tool '{tool_name}' is not registered")
        result = fn(**params)
        if inspect.isawaitable(result):
            result = await result
        return result
