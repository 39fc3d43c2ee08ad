from __future__ import annotations

import argparse
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from app.api.dependencies import get_analysis_pipeline  # noqa: E402
from app.api.router import outcome_to_response  # noqa: E402
from app.core.config import get_settings  # noqa: E402
from app.core.logging import configure_logging  # noqa: E402
from app.domain.models import AnalysisFailure, UploadedDocument  # noqa: E402


def _guess_content_type(path: Path) -> str | None:
    guessed, _ = mimetypes.guess_type(str(path))
    return guessed


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run the blood report analysis pipeline on a local PDF or image and print the JSON response."
    )
    parser.add_argument("input", type=Path, help="Input PDF or image path")
    parser.add_argument("--mime", default=None, help="Override the detected media type")
    parser.add_argument("--model", default=None, help="Gemini model name (defaults to GEMINI_MODEL)")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional path to save the JSON response",
    )
    parser.add_argument("--verbose", action="store_true", help="Log pipeline progress to stderr")
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else get_settings().log_level)

    input_path = args.input.expanduser().resolve()
    if not input_path.exists() or not input_path.is_file():
        print(f"Input file not found: {input_path}", file=sys.stderr)
        return 2

    document = UploadedDocument(
        content=input_path.read_bytes(),
        media_type=args.mime or _guess_content_type(input_path),
        filename=input_path.name,
    )

    outcome = get_analysis_pipeline(model_name=args.model).analyze(document)
    status_code, body = outcome_to_response(outcome)
    report: dict[str, Any] = {
        "requestId": outcome.request_id,
        "status": status_code,
        "outcome": type(outcome).__name__,
        "states": list(outcome.states),
        "response": body,
    }

    rendered = json.dumps(report, ensure_ascii=False, indent=2)
    print(rendered)

    if args.output is not None:
        output_path = args.output.expanduser().resolve()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered + "\n", encoding="utf-8")

    return 1 if isinstance(outcome, AnalysisFailure) else 0


if __name__ == "__main__":
    raise SystemExit(main())
