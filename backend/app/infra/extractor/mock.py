from __future__ import annotations

from app.infra.ports.extractor import TextExtractorPort


class MockTextExtractor(TextExtractorPort):
    def extract_text(self, payload: bytes) -> str:
        return f"[mock] extracted text ({len(payload)} bytes)\nHemoglobin 14.2 g/dL 13.2-16.6"
