import importlib.util
import json
from pathlib import Path

import pytest

from app.core.config import get_settings

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "analyze_report.py"


def _load_cli():
    spec = importlib.util.spec_from_file_location("analyze_report", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def cli():
    get_settings.cache_clear()
    yield _load_cli()
    get_settings.cache_clear()


def test_cli_prints_report_for_local_file(cli, tmp_path: Path, monkeypatch, capsys):
    monkeypatch.setenv("GEMINI_API_KEY", "dev-key")
    source = tmp_path / "labs.pdf"
    source.write_bytes(b"%PDF-1.4 mock")
    output = tmp_path / "out" / "report.json"

    code = cli.main([str(source), "--output", str(output)])

    assert code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["status"] == 200
    assert printed["outcome"] == "AnalysisSuccess"
    assert printed["states"][-1] == "done"
    assert len(printed["response"]["results"]) == 3
    assert json.loads(output.read_text(encoding="utf-8")) == printed


def test_cli_exits_nonzero_without_key(cli, tmp_path: Path, monkeypatch, capsys):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    source = tmp_path / "labs.png"
    source.write_bytes(b"\x89PNG")

    assert cli.main([str(source)]) == 1
    printed = json.loads(capsys.readouterr().out)
    assert printed["status"] == 500


def test_cli_missing_input_returns_2(cli, tmp_path: Path):
    assert cli.main([str(tmp_path / "missing.pdf")]) == 2


def test_cli_model_option_reaches_pipeline(cli, tmp_path: Path, monkeypatch, capsys):
    monkeypatch.setenv("GEMINI_API_KEY", "dev-key")
    source = tmp_path / "labs.pdf"
    source.write_bytes(b"%PDF-1.4 mock")
    requested = []
    build = cli.get_analysis_pipeline

    def recording_pipeline(*, model_name=None):
        requested.append(model_name)
        return build(model_name=model_name)

    monkeypatch.setattr(cli, "get_analysis_pipeline", recording_pipeline)

    assert cli.main([str(source), "--model", "gemini-1.5-pro"]) == 0
    assert requested == ["gemini-1.5-pro"]
    assert json.loads(capsys.readouterr().out)["outcome"] == "AnalysisSuccess"
