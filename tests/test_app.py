"""Tests for the FastAPI application routes."""
from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from conftest import make_flashcard, make_mcq, make_true_false
from quizgen import app as app_module
from quizgen.app import app
from quizgen.cache import ResponseCache
from quizgen.config import Settings
from quizgen.models import fallback_question_set


class FakeLLM:
    """Fake LLM returning a fixed reply, or raising when *reply* is an exception."""

    def __init__(self, reply):
        self.reply = reply
        self.call_count = 0

    async def generate(self, prompt: str, temperature: float = 0.7, max_tokens: int = 8192) -> str:
        self.call_count += 1
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply

    def name(self) -> str:
        return "fake-llm"


GOOD_REPLY = json.dumps({
    "flashcards": [make_flashcard(f"Card {i}") for i in range(8)],
    "mcqs": [make_mcq("Which one?")],
    "trueFalseQuestions": [make_true_false("Is it?", id=4)],
})


@pytest.fixture
def test_app():
    """Set up the app with a fake LLM and fresh settings/cache."""
    llm = FakeLLM(GOOD_REPLY)
    settings = Settings(retry_initial_delay=0.0, retry_max_delay=0.0)

    # Set globals BEFORE creating TestClient so startup() keeps them
    app_module._settings = settings
    app_module._cache = ResponseCache()
    with patch("quizgen.app.save_settings") as save, \
         patch("quizgen.app._get_llm", side_effect=lambda: llm):
        client = TestClient(app, raise_server_exceptions=False)
        yield client, llm, settings, save
        client.close()
    app_module._settings = None
    app_module._cache = None


def _body(**overrides):
    body = {
        "fileContent": "Notes on cell biology and the structure of the cell membrane.",
        "fileName": "biology.txt",
        "fileType": "text/plain",
        "quantities": {"flashcards": 3, "mcqs": 2},
    }
    body.update(overrides)
    return body


class TestGenerateQuestions:
    def test_success(self, test_app):
        client, llm, _, _ = test_app
        resp = client.post("/api/generate-questions", json=_body())
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["flashcards"]) == 3
        assert len(data["mcqs"]) == 1
        assert data["trueFalseQuestions"][0]["id"] == 1
        assert set(data) == {
            "flashcards", "mcqs", "matchingQuestions", "trueFalseQuestions", "fillInBlanksQuestions",
        }
        assert resp.headers["cache-control"] == "max-age=3600, must-revalidate"
        assert llm.call_count == 1

    def test_repeat_request_uses_cache(self, test_app):
        client, llm, _, _ = test_app
        client.post("/api/generate-questions", json=_body())
        client.post("/api/generate-questions", json=_body())
        assert llm.call_count == 1

    def test_default_quantities(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/generate-questions", json=_body(quantities=None))
        assert len(resp.json()["flashcards"]) == 5

    def test_missing_content(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/generate-questions", json=_body(fileContent=""))
        assert resp.status_code == 400

    def test_whitespace_content_is_extraction_error(self, test_app):
        client, llm, _, _ = test_app
        resp = client.post("/api/generate-questions", json=_body(fileContent="   \n  "))
        assert resp.status_code == 400
        assert "Failed to extract" in resp.json()["detail"]
        assert llm.call_count == 0

    def test_non_text_content(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/generate-questions", json=_body(fileContent={"pages": []}))
        assert resp.status_code == 400

    def test_missing_file_name(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/generate-questions", json=_body(fileName=""))
        assert resp.status_code == 400

    def test_invalid_json_body(self, test_app):
        client, _, _, _ = test_app
        resp = client.post(
            "/api/generate-questions",
            content=b"not json",
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 400

    def test_total_failure_returns_fallback(self, test_app):
        client, llm, _, _ = test_app
        llm.reply = ConnectionError("upstream down")
        resp = client.post("/api/generate-questions", json=_body())
        assert resp.status_code == 200
        assert resp.json() == fallback_question_set().to_dict()
        assert llm.call_count == 3


class TestGenerateMoreQuestions:
    def test_success(self, test_app):
        client, llm, _, _ = test_app
        llm.reply = json.dumps([make_flashcard("Extra 1"), make_flashcard("Extra 2")])
        resp = client.post("/api/generate-more-questions", json={
            "transcript": "Today we talk about volcanoes.",
            "videoTitle": "Volcanoes 101",
            "type": "flashcards",
            "quantity": 2,
        })
        assert resp.status_code == 200
        assert [q["question"] for q in resp.json()["questions"]] == ["Extra 1", "Extra 2"]

    def test_missing_transcript(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/generate-more-questions", json={"type": "mcqs"})
        assert resp.status_code == 400

    def test_missing_type(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/generate-more-questions", json={"transcript": "t"})
        assert resp.status_code == 400

    def test_invalid_type(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/generate-more-questions", json={"transcript": "t", "type": "essays"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid question type"

    def test_bad_quantity(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/generate-more-questions", json={"transcript": "t", "type": "mcqs", "quantity": "many"})
        assert resp.status_code == 400

    def test_upstream_failure(self, test_app):
        client, llm, _, _ = test_app
        llm.reply = TimeoutError("timed out")
        resp = client.post("/api/generate-more-questions", json={"transcript": "t", "type": "mcqs", "quantity": 1})
        assert resp.status_code == 502

    def test_unparseable_reply(self, test_app):
        client, llm, _, _ = test_app
        llm.reply = "no questions today"
        resp = client.post("/api/generate-more-questions", json={"transcript": "t", "type": "mcqs", "quantity": 1})
        assert resp.status_code == 502


class TestGenerateQuiz:
    def test_success(self, test_app):
        client, llm, _, _ = test_app
        resp = client.post("/api/generate-quiz", json={
            "transcript": "Volcanoes erupt. Lava cools into rock.",
            "title": "Volcanoes 101",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["flashcards"]) == 8
        assert data["trueFalseQuestions"][0]["id"] == 1
        assert llm.call_count == 1

    def test_missing_transcript(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/generate-quiz", json={"title": "t"})
        assert resp.status_code == 400

    def test_upstream_failure(self, test_app):
        client, llm, _, _ = test_app
        llm.reply = ConnectionError("down")
        resp = client.post("/api/generate-quiz", json={"transcript": "Some words."})
        assert resp.status_code == 502


class TestSummarize:
    def test_success(self, test_app):
        client, llm, _, _ = test_app
        llm.reply = "# Summary\n\n- point"
        resp = client.post("/api/summarize", json={"text": "Long notes.", "type": "youtube", "title": "T"})
        assert resp.status_code == 200
        assert resp.json() == {"summary": "# Summary\n\n- point"}

    def test_missing_text(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/summarize", json={"type": "youtube"})
        assert resp.status_code == 400

    def test_upstream_failure_returns_placeholder(self, test_app):
        client, llm, _, _ = test_app
        llm.reply = TimeoutError("timed out")
        resp = client.post("/api/summarize", json={"text": "Long notes."})
        assert resp.status_code == 200
        data = resp.json()
        assert data["summary"] == app_module.SUMMARY_UNAVAILABLE
        assert "timed out" in data["error"]


class TestAsk:
    def test_success(self, test_app):
        client, llm, _, _ = test_app
        llm.reply = "Because it loses heat."
        resp = client.post("/api/ask", json={
            "question": "Why does lava cool?", "context": "Lava loses heat.", "title": "Volcanoes",
        })
        assert resp.status_code == 200
        assert resp.json() == {"answer": "Because it loses heat."}

    def test_missing_question(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/ask", json={"context": "c"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Question is required"

    def test_missing_context(self, test_app):
        client, _, _, _ = test_app
        resp = client.post("/api/ask", json={"question": "q"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Context is required"

    def test_upstream_failure(self, test_app):
        client, llm, _, _ = test_app
        llm.reply = ConnectionError("down")
        resp = client.post("/api/ask", json={"question": "q", "context": "c"})
        assert resp.status_code == 502


class TestSettingsRoutes:
    def test_get_settings(self, test_app):
        client, _, _, _ = test_app
        resp = client.get("/api/settings")
        assert resp.status_code == 200
        assert resp.json()["llm_provider"] == "gemini"

    def test_update_settings(self, test_app):
        client, _, settings, save = test_app
        resp = client.put("/api/settings", json={"chunk_size": 2500, "bogus": 1})
        assert resp.status_code == 200
        assert resp.json()["chunk_size"] == 2500
        assert "bogus" not in resp.json()
        assert settings.chunk_size == 2500
        save.assert_called_once()


class TestCacheRoutes:
    def test_stats_and_clear(self, test_app):
        client, _, _, _ = test_app
        client.post("/api/generate-questions", json=_body())
        stats = client.get("/api/cache").json()
        assert stats["entries"] == 1
        assert stats["misses"] == 1

        resp = client.delete("/api/cache")
        assert resp.json() == {"cleared": 1}
        assert client.get("/api/cache").json()["entries"] == 0


class TestHealth:
    def test_health(self, test_app):
        client, _, _, _ = test_app
        resp = client.get("/api/health")
        assert resp.json() == {"status": "ok", "provider": "gemini"}
