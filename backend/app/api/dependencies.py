from __future__ import annotations

from functools import partial

from app.application.analysis import AnalysisPipeline
from app.application.fallback import FallbackExtractor
from app.core.config import get_gemini_api_key, get_settings
from app.infra.extractor.mock import MockTextExtractor
from app.infra.extractor.pymupdf import PyMuPDFTextExtractor
from app.infra.llm.gemini import GeminiLLM
from app.infra.llm.mock import MockLLM
from app.infra.ports.extractor import TextExtractorPort
from app.infra.ports.llm import LLMPort


def build_llm(api_key: str, *, model_name: str | None = None) -> LLMPort:
    settings = get_settings()
    if settings.llm_backend == "mock":
        return MockLLM()
    if settings.llm_backend != "gemini":
        raise RuntimeError(f"Unsupported BLOODWORK_LLM_BACKEND={settings.llm_backend!r}")
    return GeminiLLM(
        api_key=api_key,
        model_name=model_name or settings.gemini_model,
        timeout_seconds=settings.llm_timeout_seconds,
    )


def get_extractor() -> TextExtractorPort:
    settings = get_settings()
    if settings.extractor_backend == "mock":
        return MockTextExtractor()
    # 0 reads every page.
    return PyMuPDFTextExtractor(max_pages=settings.max_pdf_pages or None)


def get_analysis_pipeline(*, model_name: str | None = None) -> AnalysisPipeline:
    settings = get_settings()
    return AnalysisPipeline(
        api_key_provider=get_gemini_api_key,
        llm_factory=partial(build_llm, model_name=model_name),
        fallback=FallbackExtractor(extractor=get_extractor(), max_chars=settings.max_extracted_chars),
        # Socket timeout inside the adapter fires first; this is the outer bound.
        timeout_seconds=settings.llm_timeout_seconds + 5,
    )


async def provide_analysis_pipeline() -> AnalysisPipeline:
    return get_analysis_pipeline()
