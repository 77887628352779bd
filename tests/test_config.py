import logging
from pathlib import Path

from angebot.config import doctor_report, load_config
from angebot.logging_utils import PIISafeFormatter


def test_defaults(monkeypatch):
    for key in ("ANGEBOT_RENDER_URL", "ANGEBOT_RENDER_TIMEOUT", "ANGEBOT_DEBOUNCE_MS", "ANGEBOT_TEMPLATES_FILE", "PORT"):
        monkeypatch.delenv(key, raising=False)
    config = load_config()
    assert config.render_url == "http://localhost:5052/api/angebot/generate-offer"
    assert config.render_timeout is None
    assert config.debounce_seconds == 0.25
    assert config.templates_file is None
    assert config.default_tax_rate == 19.0


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("ANGEBOT_RENDER_TIMEOUT", "7,5")
    monkeypatch.setenv("ANGEBOT_DEBOUNCE_MS", "0")
    monkeypatch.setenv("ANGEBOT_PREVIEW_DIR", str(tmp_path))
    monkeypatch.setenv("ANGEBOT_TEMPLATES_FILE", str(tmp_path / "t.json"))
    monkeypatch.setenv("PORT", "6000")
    config = load_config()
    assert config.render_timeout == 7.5
    assert config.debounce_seconds == 0.0
    assert config.preview_dir == Path(tmp_path)
    assert config.templates_file == tmp_path / "t.json"
    assert config.templates_url.startswith("http://localhost:6000/")

    report = doctor_report()
    assert report["port"] == 6000
    assert report["paths"]["preview_dir_exists"] is True
    assert report["paths"]["templates_file_exists"] is False


def test_pii_formatter_redacts():
    formatter = PIISafeFormatter("%(message)s")
    record = logging.LogRecord(
        "angebot.preview", logging.ERROR, __file__, 1,
        "Fehler fuer erika@mueller-bau.de, Tel. 030/1234567", None, None,
    )
    out = formatter.format(record)
    assert "erika@" not in out
    assert "1234567" not in out
    assert out.count("[REDACTED_PII]") == 2
