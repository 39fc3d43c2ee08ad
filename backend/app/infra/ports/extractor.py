from __future__ import annotations

from abc import ABC, abstractmethod


class TextExtractorPort(ABC):
    @abstractmethod
    def extract_text(self, payload: bytes) -> str:
        """Return the plain text layer of a PDF. Raise ExtractionError when there is none."""
