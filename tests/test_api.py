"""HTTP tests for the FastAPI app, with the agent dependency overridden."""
from dataclasses import replace

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from openai import OpenAIError

from conftest import FakeExecutor, ScriptedModel, call, text, tool_use
from revops_agent import dependencies
from revops_agent.app import app
from revops_agent.dependencies import get_agent
from revops_agent.services.agent import AnalystAgent


@pytest.fixture
def client_for(settings, classifier_model):
    def build(model, executor=None):
        agent = AnalystAgent(model, executor or FakeExecutor(), settings, classifier_model=classifier_model)
        app.dependency_overrides[get_agent] = lambda: agent
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()


class TestAsk:
    def test_answer_with_evidence(self, client_for):
        model = ScriptedModel([tool_use(call("c1", "query_deals")), text("One deal: Acme.")])
        executor = FakeExecutor({"query_deals": {
            "query_description": "1 deal",
            "deals": [{"id": "d1", "name": "Acme", "amount": 10}],
        }})
        client = client_for(model, executor)

        resp = client.post("/ask", json={
            "question": "Which deals are open?",
            "prior_turns": [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}],
            "scope_id": "ent",
            "scope_name": "Enterprise",
        })

        assert resp.status_code == 200
        body = resp.json()
        assert body["answer"] == "Analyzing Enterprise pipeline:\n\nOne deal: Acme."
        assert body["tool_call_count"] == 1
        assert body["finish_reason"] == "complete"
        assert body["evidence"]["tool_trace"][0]["params"] == {"scope_id": "ent"}
        assert body["evidence"]["cited_records"][0]["id"] == "d1"
        assert executor.calls == [("query_deals", {"scope_id": "ent"})]

    def test_empty_question(self, client_for):
        client = client_for(ScriptedModel())

        assert client.post("/ask", json={"question": "   "}).status_code == 400
        assert client.post("/ask", json={}).status_code == 400

    def test_model_failure_is_bad_gateway(self, client_for):
        client = client_for(ScriptedModel([OpenAIError("upstream exploded")]))

        resp = client.post("/ask", json={"question": "anything"})

        assert resp.status_code == 502
        assert "upstream exploded" in resp.json()["detail"]


class TestCatalogAndHealth:
    def test_tools(self, client_for):
        client = client_for(ScriptedModel())

        tools = client.get("/tools").json()

        assert len(tools) == 20
        assert tools[0]["name"] == "query_deals"

    def test_health(self, client_for):
        client = client_for(ScriptedModel())

        body = client.get("/health").json()

        assert body["status"] == "ok"
        assert body["settings"]["tools"]["catalog"] == 20
        assert "max_iterations" in body["settings"]["loop"]


def test_get_agent_requires_api_key(monkeypatch):
    monkeypatch.setattr(dependencies, "settings", replace(dependencies.settings, llm_api_key=""))
    monkeypatch.setattr(dependencies, "_agent", None)

    with pytest.raises(HTTPException) as exc:
        get_agent()

    assert exc.value.status_code == 500
