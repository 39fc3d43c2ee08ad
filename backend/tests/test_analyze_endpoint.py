import pytest

from app.api.dependencies import provide_analysis_pipeline
from app.application.analysis import AnalysisPipeline
from app.application.fallback import FallbackExtractor
from app.core.config import get_settings
from app.main import app
from tests.http_client import SyncASGIClient
from tests.stubs import THREE_MARKERS, StubExtractor, StubLLM


@pytest.fixture
def client():
    yield SyncASGIClient(app)
    app.dependency_overrides.clear()
    get_settings.cache_clear()


def _override(llm, *, api_key="test-key", extractor=None):
    pipeline = AnalysisPipeline(
        api_key_provider=lambda: api_key,
        llm_factory=lambda key: llm,
        fallback=FallbackExtractor(extractor=extractor or StubExtractor()),
        timeout_seconds=2,
    )

    async def _provide():
        return pipeline

    app.dependency_overrides[provide_analysis_pipeline] = _provide


def test_analyze_returns_structured_report(client):
    llm = StubLLM()
    _override(llm)

    resp = client.upload("/api/analyze", filename="labs.pdf", content=b"%PDF-1.4", content_type="application/pdf")

    assert resp.status_code == 200
    body = resp.json()
    assert body["score"] == THREE_MARKERS["score"]
    assert body["critical_items"] == THREE_MARKERS["critical_items"]
    assert body["results"] == THREE_MARKERS["results"]
    assert "rawResponse" not in body
    assert resp.headers["X-Request-ID"].startswith("req_")


def test_undeclared_media_type_defaults_to_pdf(client):
    llm = StubLLM()
    _override(llm)

    resp = client.upload("/api/analyze", filename="report", content=b"%PDF-1.4", content_type=None)

    assert resp.status_code == 200
    assert llm.media_calls[0]["media_mime_type"] == "application/pdf"


def test_missing_file_is_400(client):
    llm = StubLLM()
    _override(llm)

    resp = client.post("/api/analyze", data={"note": "no file here"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "No file uploaded"}
    assert llm.call_count == 0


def test_missing_api_key_is_500(client):
    llm = StubLLM()
    _override(llm, api_key=None)

    resp = client.upload("/api/analyze", filename="labs.pdf", content=b"%PDF-1.4", content_type="application/pdf")

    assert resp.status_code == 500
    assert "API key not configured" in resp.json()["error"]
    assert llm.call_count == 0


def test_model_failure_is_500_with_details(client):
    _override(StubLLM(media=RuntimeError("Gemini API error (503): overloaded")))

    resp = client.upload("/api/analyze", filename="labs.png", content=b"\x89PNG", content_type="image/png")

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Failed to process the file",
        "details": "Gemini API error (503): overloaded",
    }
    assert "X-Request-ID" in resp.headers


def test_unparseable_output_is_200_with_raw_response(client):
    _override(StubLLM(media="not json"))

    resp = client.upload("/api/analyze", filename="labs.png", content=b"\x89PNG", content_type="image/png")

    assert resp.status_code == 200
    body = resp.json()
    assert body["results"] == []
    assert body["score"] == 0
    assert body["critical_items"] == 0
    assert body["summary"].startswith("Unable to parse the blood report")
    assert body["rawResponse"] == "not json"


def test_default_wiring_with_mock_backends(client, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "dev-key")
    get_settings.cache_clear()

    resp = client.upload("/api/analyze", filename="labs.pdf", content=b"%PDF-1.4", content_type="application/pdf")

    assert resp.status_code == 200
    assert len(resp.json()["results"]) == 3


def test_default_wiring_without_key_fails_fast(client, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    get_settings.cache_clear()

    resp = client.upload("/api/analyze", filename="labs.pdf", content=b"%PDF-1.4", content_type="application/pdf")

    assert resp.status_code == 500
    assert "GEMINI_API_KEY" in resp.json()["error"]


def test_text_value_in_file_field_is_400(client):
    llm = StubLLM()
    _override(llm)

    resp = client.post("/api/analyze", data={"file": "not-a-file"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "No file uploaded"}
    assert "X-Request-ID" in resp.headers
    assert llm.call_count == 0
