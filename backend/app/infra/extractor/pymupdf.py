from __future__ import annotations

import re

from app.core.errors import ExtractionError
from app.infra.ports.extractor import TextExtractorPort

_BLANK_RUN = re.compile(r"\n{3,}")


def _normalize_text(text: str) -> str:
    text = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.rstrip() for line in text.split("\n")]
    return _BLANK_RUN.sub("\n\n", "\n".join(lines)).strip()


class PyMuPDFTextExtractor(TextExtractorPort):
    """Read the embedded text layer of a PDF with PyMuPDF (no OCR)."""

    provider_name = "pymupdf"

    def __init__(self, *, max_pages: int | None = None):
        self.max_pages = max_pages

    def extract_text(self, payload: bytes) -> str:
        try:
            import fitz  # type: ignore
        except Exception as exc:  # pragma: no cover
            raise ExtractionError("PyMuPDF package is not installed") from exc

        if not payload:
            raise ExtractionError("PDF payload is empty")

        try:
            doc = fitz.open(stream=payload, filetype="pdf")
        except Exception as exc:
            raise ExtractionError(f"PDF could not be opened: {exc}") from exc

        try:
            if doc.needs_pass:
                raise ExtractionError("PDF is encrypted")

            page_texts: list[str] = []
            for index, page in enumerate(doc):
                if self.max_pages is not None and index >= self.max_pages:
                    break
                text = _normalize_text(page.get_text("text"))
                if text:
                    page_texts.append(text)
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"PDF text extraction failed: {exc}") from exc
        finally:
            doc.close()

        text = "\n\n".join(page_texts)
        if not text:
            raise ExtractionError("PDF has no text layer (scanned or image-only document)")
        return text
