"""FallbackExtractor: PDF text layer for the text-mode retry after a failed direct call."""

from __future__ import annotations

import logging

from app.application.encoding import is_text_extractable
from app.core.errors import ExtractionError
from app.infra.ports.extractor import TextExtractorPort

logger = logging.getLogger(__name__)


class FallbackExtractor:
    def __init__(self, *, extractor: TextExtractorPort, max_chars: int = 30000):
        self.extractor = extractor
        self.max_chars = max(1, int(max_chars))

    @staticmethod
    def is_eligible(media_type: str) -> bool:
        return is_text_extractable(media_type)

    def extract_text(self, payload: bytes, *, request_id: str | None = None) -> str:
        try:
            text = self.extractor.extract_text(payload)
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(str(exc) or type(exc).__name__) from exc

        text = (text or "").strip()
        if not text:
            raise ExtractionError("No text could be extracted from the document")

        if len(text) > self.max_chars:
            logger.warning(
                "[%s] Extracted text truncated from %d to %d chars",
                request_id or "-",
                len(text),
                self.max_chars,
            )
            text = text[: self.max_chars]
        return text
