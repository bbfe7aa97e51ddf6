"""Tests for the in-process data tool registry."""
import asyncio

import pytest

from revops_agent.services.agent import DataToolRegistry, ToolNotFoundError
from revops_agent.services.agent.executor import ToolTimeoutError, execute_with_timeout


class TestDataToolRegistry:
    @pytest.mark.asyncio
    async def test_sync_and_async_tools(self):
        registry = DataToolRegistry()
        registry.register("query_accounts", lambda limit=10: {"limit": limit})

        @registry.tool("query_deals")
        async def query_deals(stage=None):
            return {"stage": stage}

        assert registry.registered() == ["query_accounts", "query_deals"]
        assert await registry.execute("query_accounts", {"limit": 3}) == {"limit": 3}
        assert await registry.execute("query_deals", {"stage": "Won"}) == {"stage": "Won"}

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        with pytest.raises(ToolNotFoundError, match="query_deals"):
            await DataToolRegistry().execute("query_deals", {})

    @pytest.mark.asyncio
    async def test_tool_errors_propagate(self):
        registry = DataToolRegistry()
        registry.register("query_deals", lambda: {})

        with pytest.raises(TypeError):
            await registry.execute("query_deals", {"unexpected": 1})


class TestExecuteWithTimeout:
    @pytest.mark.asyncio
    async def test_no_deadline(self):
        registry = DataToolRegistry()
        registry.register("query_deals", lambda: {"ok": True})

        assert await execute_with_timeout(registry, "query_deals", {}) == {"ok": True}

    @pytest.mark.asyncio
    async def test_deadline_expires(self):
        registry = DataToolRegistry()

        @registry.tool("query_deals")
        async def slow():
            await asyncio.sleep(5)

        with pytest.raises(ToolTimeoutError, match="timed out after 0.01s"):
            await execute_with_timeout(registry, "query_deals", {}, timeout=0.01)

    @pytest.mark.asyncio
    async def test_tool_timeout_error_passes_through(self):
        registry = DataToolRegistry()

        def flaky():
            raise TimeoutError("socket read timed out")

        registry.register("query_deals", flaky)

        with pytest.raises(TimeoutError, match="socket read timed out"):
            await execute_with_timeout(registry, "query_deals", {})
        with pytest.raises(TimeoutError, match="socket read timed out"):
            await execute_with_timeout(registry, "query_deals", {}, timeout=5)
