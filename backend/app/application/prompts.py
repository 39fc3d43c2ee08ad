"""PromptBuilder: instruction text for both extraction modes.

Both variants end with the same field list and JSON example so the
response parser can treat their output uniformly.
"""

from __future__ import annotations

from app.domain.models import PromptMode

SYSTEM_PROMPT = (
    "You are a medical AI assistant analyzing blood test reports. "
    "Return strict JSON only."
)

_PREAMBLE = "You are a medical AI assistant analyzing blood test reports."

_DIRECT_SOURCE = "Analyze this blood test report and extract ALL biomarkers with their values."

_TEXT_SOURCE = """Here is the text extracted from a blood test report:
\"\"\"
{extracted_text}
\"\"\"

Analyze this text and extract ALL biomarkers with their values."""

_SCHEMA_INSTRUCTIONS = """For each biomarker found, provide:
1. Biomarker name (e.g., "Hemoglobin", "Vitamin D", "Total Cholesterol")
2. Measured value (just the number)
3. Unit of measurement (e.g., "g/dL", "ng/mL", "mg/dL")
4. Status: "normal", "low", or "high" based on the reference range
5. Reference range from the report
6. A brief health insight (one sentence explaining what this result means)
7. Category (e.g., "Hormones", "Liver", "Lipids", "Blood Count", "Vitamins", "Other")

Also provide:
- A comprehensive executive summary (2-3 sentences) highlighting key findings
- A health score from 0-100 (100 being perfect health)
- Count of critical items that need attention

Return your response in this EXACT JSON format (no markdown, just pure JSON):
{
  "summary": "text here",
  "score": 85,
  "critical_items": 2,
  "results": [
    {
      "name": "Hemoglobin",
      "value": "14.2",
      "unit": "g/dL",
      "status": "normal",
      "range": "13.2-16.6",
      "insight": "Optimal oxygen transport capacity.",
      "category": "Blood Count"
    }
  ]
}

IMPORTANT: Return ONLY the JSON, no additional text or markdown formatting."""


def build_prompt(mode: PromptMode, extracted_text: str | None = None) -> str:
    if mode == "direct":
        source = _DIRECT_SOURCE
    elif mode == "text-fallback":
        if not extracted_text or not extracted_text.strip():
            raise ValueError("text-fallback prompt requires extracted text")
        # str.format would trip over braces inside the report text.
        source = _TEXT_SOURCE.replace("{extracted_text}", extracted_text.strip())
    else:
        raise ValueError(f"Unknown prompt mode: {mode!r}")

    return f"{_PREAMBLE}\n\n{source}\n\n{_SCHEMA_INSTRUCTIONS}"
