import json

import pytest

from angebot.cli.main import main
from angebot.contracts import build_render_payload
from angebot.domain.fingerprint import draft_key


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr("angebot.cli.main.setup_logging", lambda level: None)


@pytest.fixture
def draft_file(tmp_path, draft):
    path = tmp_path / "draft.json"
    path.write_text(json.dumps(build_render_payload(draft), ensure_ascii=False), encoding="utf-8")
    return path


def test_doctor(capsys):
    assert main(["doctor"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert "render_url" in report


def test_totals(draft_file, capsys):
    assert main(["totals", str(draft_file)]) == 0
    out = capsys.readouterr().out
    assert "120,00 €" in out
    assert "142,80 €" in out


def test_key_matches_library(draft_file, draft, capsys):
    assert main(["key", str(draft_file)]) == 0
    assert capsys.readouterr().out.strip() == draft_key(draft)


def test_missing_file(tmp_path, capsys):
    assert main(["key", str(tmp_path / "fehlt.json")]) == 2
    assert "Fehler" in capsys.readouterr().err


def test_templates_from_file(tmp_path, monkeypatch, capsys):
    path = tmp_path / "templates.json"
    path.write_text(json.dumps({"templates": [{"id": "a", "name": "Dach", "title": "Dachrinne erneuern"}]}))
    monkeypatch.setenv("ANGEBOT_TEMPLATES_FILE", str(path))
    assert main(["templates", "rinne"]) == 0
    assert capsys.readouterr().out.startswith("a\tDach")


def test_totals_fall_back_to_configured_tax_rate(tmp_path, draft, monkeypatch, capsys):
    payload = build_render_payload(draft)
    del payload["meta"]["taxRate"]
    path = tmp_path / "ohne_steuer.json"
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    monkeypatch.setenv("ANGEBOT_DEFAULT_TAX_RATE", "7")
    assert main(["totals", str(path)]) == 0
    out = capsys.readouterr().out
    assert "8,40 €" in out
    assert "128,40 €" in out
