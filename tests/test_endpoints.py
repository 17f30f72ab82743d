"""Tests for API endpoints."""

import json

import pytest
from fakes import FakeProvider, text, tool_calls
from fastapi.testclient import TestClient

from colleague.main import app
from colleague.services.chat import ChatService, get_chat_service
from colleague.services.conversations import get_conversation_repository
from colleague.services.tool_loop import ToolUseLoop
from colleague.utils.tokens import TokenCounter

client = TestClient(app)


def parse_sse(body: str) -> list[dict]:
    return [json.loads(line[len("data: ") :]) for line in body.splitlines() if line.startswith("data: ")]


@pytest.fixture
def wire(registry, approval_store, repository):
    """Point the app at in-memory collaborators and a scripted provider."""

    def factory(responses):
        provider = FakeProvider(responses)
        loop = ToolUseLoop(provider=provider, registry=registry, approval_store=approval_store, repository=repository)
        service = ChatService(loop=loop, repository=repository, token_counter=TokenCounter(use_tiktoken=False))
        app.dependency_overrides[get_chat_service] = lambda: service
        return provider

    app.dependency_overrides[get_conversation_repository] = lambda: repository
    yield factory
    app.dependency_overrides.clear()


def start_conversation() -> str:
    response = client.post("/conversations", json={"userId": "user-1"})
    assert response.status_code == 201
    return response.json()["id"]


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self):
        """Test that health check returns 200 status."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_check_response_structure(self):
        """Test that health check returns expected JSON structure."""
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert "timestamp" in data


class TestConversationEndpoints:
    """Tests for conversation lifecycle endpoints."""

    def test_create_conversation(self, wire):
        response = client.post("/conversations", json={"userId": "user-1"})

        assert response.status_code == 201
        data = response.json()
        assert data["userId"] == "user-1"
        assert data["endedAt"] is None
        assert data["id"]

    def test_create_conversation_without_body(self, wire):
        response = client.post("/conversations")

        assert response.status_code == 201
        assert response.json()["userId"] is None

    def test_end_conversation(self, wire):
        conversation_id = start_conversation()

        response = client.post(f"/conversations/{conversation_id}/end")

        assert response.status_code == 200
        assert response.json()["endedAt"] is not None

    def test_end_unknown_conversation(self, wire):
        response = client.post("/conversations/missing/end")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {"code": "CONVERSATION_NOT_FOUND", "message": "Conversation not found"},
        }


class TestChatStreamEndpoint:
    """Tests for the SSE chat endpoint."""

    def test_streams_reply(self, wire):
        wire([text("Hey", " there")])
        conversation_id = start_conversation()

        response = client.post("/chat/stream", json={"conversationId": conversation_id, "content": "hi"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"

        events = parse_sse(response.text)
        assert [e["type"] for e in events] == ["message_saved", "content", "content", "done"]
        assert "".join(e["data"] for e in events if e["type"] == "content") == "Hey there"
        assert events[-1]["messageId"]

    def test_unknown_conversation_is_an_error_event(self, wire):
        wire([text("never")])

        response = client.post("/chat/stream", json={"conversationId": "missing", "content": "hi"})

        assert response.status_code == 200
        assert parse_sse(response.text) == [{"type": "error", "data": "Conversation not found"}]

    def test_ended_conversation_is_an_error_event(self, wire):
        provider = wire([text("never")])
        conversation_id = start_conversation()
        client.post(f"/conversations/{conversation_id}/end")

        response = client.post("/chat/stream", json={"conversationId": conversation_id, "content": "hi"})

        assert parse_sse(response.text) == [{"type": "error", "data": "Cannot send message to ended conversation"}]
        assert provider.calls == []

    @pytest.mark.parametrize("content", ["", "x" * 10_001])
    def test_rejects_invalid_content(self, wire, content):
        wire([text("never")])

        response = client.post("/chat/stream", json={"conversationId": "c1", "content": content})

        assert response.status_code == 422


class TestApprovalEndpoint:
    """Tests for the SSE approval endpoint."""

    def test_approval_round_trip(self, wire, tool_counter):
        wire([tool_calls(("t1", "deploy", {"value": "prod"})), text("Deployed.")])
        conversation_id = start_conversation()

        first = parse_sse(
            client.post("/chat/stream", json={"conversationId": conversation_id, "content": "deploy"}).text
        )
        assert [e["type"] for e in first] == ["message_saved", "tool_approval"]
        approval = first[-1]["toolApproval"]
        assert approval["toolName"] == "deploy"
        assert approval["toolInput"] == {"value": "prod"}
        assert approval["riskLevel"] == 3
        assert first[-1]["data"] == approval["reason"]

        second = parse_sse(
            client.post(
                "/chat/stream/approval",
                json={"approvalId": approval["id"], "approved": True, "conversationId": conversation_id},
            ).text
        )

        assert [e["type"] for e in second] == ["tool_result", "content", "done"]
        assert second[0]["toolResult"] == {"toolName": "deploy", "success": True, "output": {"echo": "prod"}}
        assert tool_counter.calls["deploy"] == [{"value": "prod"}]

    def test_second_decision_is_rejected(self, wire):
        wire([tool_calls(("t1", "edit", {})), text("ok")])
        conversation_id = start_conversation()
        first = parse_sse(client.post("/chat/stream", json={"conversationId": conversation_id, "content": "x"}).text)
        approval_id = first[-1]["toolApproval"]["id"]

        client.post("/chat/stream/approval", json={"approvalId": approval_id, "approved": False})
        again = client.post("/chat/stream/approval", json={"approvalId": approval_id, "approved": False})

        assert parse_sse(again.text) == [{"type": "error", "data": "Approval request not found or already resolved"}]

    def test_requires_decision(self, wire):
        wire([text("never")])

        response = client.post("/chat/stream/approval", json={"approvalId": "a1"})

        assert response.status_code == 422
