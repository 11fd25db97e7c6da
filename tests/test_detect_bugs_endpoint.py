"""
Detect Bugs Endpoint Tests
==========================
Tests for POST /api/detect-bugs and POST /api/detect-bugs/batch.
The gateway is mocked — no real LLM calls.
"""
import json

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from app.agents.bug_detector import BugDetector
from app.api.detect_bugs import get_detector
from app.llm.client import ChatReply, LLMClient, LLMGatewayError
from main import app


VALID = {
    "description": "Division by zero when the list is empty",
    "confidence": 75,
    "severity": "critical",
    "suggestedFix": "return total / len(items) if items else 0",
    "lineStart": 4,
    "lineEnd": 4,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _client_for(chat_with_fallback: AsyncMock) -> TestClient:
    mock_llm = MagicMock(spec=LLMClient)
    mock_llm.chat_with_fallback = chat_with_fallback
    detector = BugDetector(client=mock_llm)
    app.dependency_overrides[get_detector] = lambda: detector
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clear_overrides():
    yield
    app.dependency_overrides.clear()


# ===================================================================
# Single file
# ===================================================================
def test_detect_bugs_returns_findings_with_wire_names():
    reply = ChatReply(content=json.dumps({"analysis": "a", "bugReports": [VALID]}), provider_name="groq")
    client = _client_for(AsyncMock(return_value=reply))

    resp = client.post("/api/detect-bugs", json={
        "file_path": "stats/mean.py",
        "file_content": "def mean(items):\n    ...\n",
        "patch": "+    return total / len(items)",
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["file_path"] == "stats/mean.py"
    assert body["total"] == 1
    assert body["anomalies"] == []
    assert body["bug_reports"] == [{**VALID, "filePath": "stats/mean.py"}]


def test_unusable_reply_is_empty_with_anomaly():
    reply = ChatReply(content="Sorry, I can't help with that.", provider_name="groq")
    client = _client_for(AsyncMock(return_value=reply))

    resp = client.post("/api/detect-bugs", json={"file_path": "a.py"})

    assert resp.status_code == 200
    assert resp.json()["bug_reports"] == []
    assert resp.json()["anomalies"] == ["MALFORMED_PAYLOAD"]


def test_gateway_failure_is_empty_not_error():
    client = _client_for(AsyncMock(side_effect=LLMGatewayError("All providers failed")))

    resp = client.post("/api/detect-bugs", json={"file_path": "a.py", "patch": "+x"})

    assert resp.status_code == 200
    assert resp.json()["total"] == 0
    assert resp.json()["anomalies"] == ["GATEWAY_FAILURE"]


def test_blank_file_path_rejected():
    client = _client_for(AsyncMock())
    resp = client.post("/api/detect-bugs", json={"file_path": "  "})
    assert resp.status_code == 422


# ===================================================================
# Batch
# ===================================================================
def test_batch_results_in_input_order():
    async def reply_for(prompt, options, router):
        if "File: one.py\n" in prompt:
            return ChatReply(content=json.dumps([VALID, VALID]), provider_name="groq")
        return ChatReply(content="[]", provider_name="groq")

    client = _client_for(AsyncMock(side_effect=reply_for))

    resp = client.post("/api/detect-bugs/batch", json={
        "files": [
            {"file_path": "one.py", "patch": "+a"},
            {"file_path": "two.py", "patch": "+b"},
        ],
    })

    assert resp.status_code == 200
    body = resp.json()
    assert [r["file_path"] for r in body["results"]] == ["one.py", "two.py"]
    assert [r["total"] for r in body["results"]] == [2, 0]
    assert body["total"] == 2
    assert all(b["filePath"] == "one.py" for b in body["results"][0]["bug_reports"])


def test_batch_requires_files():
    client = _client_for(AsyncMock())
    resp = client.post("/api/detect-bugs/batch", json={"files": []})
    assert resp.status_code == 422


# ===================================================================
# Health
# ===================================================================
def test_health_reports_providers():
    resp = TestClient(app).get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert set(resp.json()["providers"]) == {"groq", "gemini", "ollama"}
