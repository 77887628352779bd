from __future__ import annotations

import json
from dataclasses import replace

import pytest

from angebot.config import load_config
from angebot.contracts import build_render_payload, parse_content_disposition
from angebot.web import create_app


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("ANGEBOT_PREVIEW_DIR", str(tmp_path / "previews"))
    templates = tmp_path / "templates.json"
    templates.write_text(
        json.dumps([
            {"id": 1, "name": "Küchenmontage", "title": "Montage Küche", "positions": []},
            {"id": 2, "name": "Bad", "title": "Badsanierung komplett", "tax_rate": 7},
            {"name": "ohne id"},
            "kaputt",
        ]),
        encoding="utf-8",
    )
    config = replace(load_config(), templates_file=templates, company_name="Test Handwerk")
    app = create_app(config)
    app.config.update({"TESTING": True})
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def test_ping(client):
    res = client.get("/api/ping")
    assert res.status_code == 200
    assert res.get_json() == {"ok": True}


def test_generate_offer_returns_pdf(client, draft):
    draft.update_discount(enabled=True, value=10)
    res = client.post("/api/angebot/generate-offer", json=build_render_payload(draft))
    assert res.status_code == 200
    assert res.mimetype == "application/pdf"
    assert res.data.startswith(b"%PDF")
    assert res.headers["X-Offer-Number"] == "A-2024-001"
    assert res.headers["X-Offer-Id"] == ""
    filename = parse_content_disposition(res.headers["Content-Disposition"])
    assert filename == "Erika_Müller_A-2024-001_K-1001.pdf"


def test_generate_offer_handles_all_row_types(client, draft):
    for kind in ("description", "separator", "subtotal"):
        draft.positions.append(kind)
    res = client.post("/api/angebot/generate-offer", json=build_render_payload(draft))
    assert res.status_code == 200
    assert res.data.startswith(b"%PDF")


def test_commit_is_rejected(client, draft):
    res = client.post("/api/angebot/generate-offer", json=build_render_payload(draft, commit=True))
    assert res.status_code == 501
    assert res.get_json()["error"]["code"] == "commit_not_supported"


def test_malformed_body(client):
    res = client.post("/api/angebot/generate-offer", data="{kaputt", content_type="application/json")
    assert res.status_code == 400
    body = res.get_json()
    assert body["error"]["code"] == "validation_error"
    assert "request_id" in body["error"]


def test_templates_listing_and_search(client):
    res = client.get("/api/angebot/templates")
    assert res.status_code == 200
    assert [t["id"] for t in res.get_json()] == ["1", "2", ""]

    res = client.get("/api/angebot/templates", query_string={"q": "kuche"})
    assert [t["name"] for t in res.get_json()] == ["Küchenmontage"]
