import pytest

from app.api.dependencies import build_llm, get_extractor
from app.core.config import get_settings
from app.infra.extractor.pymupdf import PyMuPDFTextExtractor
from app.infra.llm.gemini import GeminiLLM


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_build_llm_prefers_explicit_model(monkeypatch):
    monkeypatch.setenv("BLOODWORK_LLM_BACKEND", "gemini")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.0-flash")

    assert build_llm("key").model_name == "gemini-2.0-flash"

    llm = build_llm("key", model_name="gemini-1.5-pro")
    assert isinstance(llm, GeminiLLM)
    assert llm.model_name == "gemini-1.5-pro"


def test_extractor_page_limit_comes_from_settings(monkeypatch):
    monkeypatch.setenv("BLOODWORK_EXTRACTOR_BACKEND", "pymupdf")
    monkeypatch.setenv("BLOODWORK_MAX_PDF_PAGES", "2")

    extractor = get_extractor()

    assert isinstance(extractor, PyMuPDFTextExtractor)
    assert extractor.max_pages == 2


def test_extractor_reads_all_pages_by_default(monkeypatch):
    monkeypatch.setenv("BLOODWORK_EXTRACTOR_BACKEND", "pymupdf")
    monkeypatch.delenv("BLOODWORK_MAX_PDF_PAGES", raising=False)

    assert get_extractor().max_pages is None
