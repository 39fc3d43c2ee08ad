from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


@lru_cache(maxsize=1)
def _load_dotenv() -> None:
    if os.getenv("BLOODWORK_SKIP_DOTENV") == "1":
        return

    env_path = Path(__file__).resolve().parents[2] / ".env"
    if not env_path.exists():
        return

    try:
        from dotenv import load_dotenv
    except Exception:
        return

    load_dotenv(env_path, override=False)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_non_negative_int(value: str | None, default: int = 0) -> int:
    if value is None:
        return default
    raw = value.strip()
    if not raw:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    env: str
    app_name: str
    cors_origins: list[str]
    llm_backend: str
    gemini_model: str
    llm_timeout_seconds: int
    extractor_backend: str
    max_extracted_chars: int
    max_pdf_pages: int
    log_level: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_dotenv()

    env = os.getenv("BLOODWORK_ENV", "development")
    cors = os.getenv("BLOODWORK_CORS_ORIGINS", "http://localhost:3000")
    llm_backend = os.getenv("BLOODWORK_LLM_BACKEND", "gemini").strip().lower() or "gemini"
    llm_timeout_seconds = _parse_non_negative_int(os.getenv("BLOODWORK_LLM_TIMEOUT_SECONDS"), default=60) or 60
    extractor_backend = os.getenv("BLOODWORK_EXTRACTOR_BACKEND", "pymupdf").strip().lower() or "pymupdf"
    max_extracted_chars = (
        _parse_non_negative_int(os.getenv("BLOODWORK_MAX_EXTRACTED_CHARS"), default=30000) or 30000
    )
    max_pdf_pages = _parse_non_negative_int(os.getenv("BLOODWORK_MAX_PDF_PAGES"), default=0)
    log_level = os.getenv("BLOODWORK_LOG_LEVEL", "INFO").strip().upper() or "INFO"

    return Settings(
        env=env,
        app_name="Bloodwork Report Analyzer",
        cors_origins=_split_csv(cors),
        llm_backend=llm_backend,
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash").strip() or "gemini-2.0-flash",
        llm_timeout_seconds=llm_timeout_seconds,
        extractor_backend=extractor_backend,
        max_extracted_chars=max_extracted_chars,
        max_pdf_pages=max_pdf_pages,
        log_level=log_level,
    )


def get_gemini_api_key() -> str | None:
    """Read the model credential from the environment on every call.

    Unlike ``get_settings`` this is not cached: a key added to (or removed
    from) the environment takes effect on the next request.
    """
    _load_dotenv()
    value = (os.getenv("GEMINI_API_KEY") or "").strip()
    return value or None
