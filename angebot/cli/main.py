from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from angebot.config import doctor_report, load_config
from angebot.contracts import build_render_payload
from angebot.domain.draft import Draft
from angebot.domain.fingerprint import draft_key
from angebot.domain.formatting import fallback_filename, format_eur
from angebot.domain.importer import parse_render_request
from angebot.domain.pricing import compute_totals
from angebot.errors import AngebotError, RenderError
from angebot.logging_utils import setup_logging


def _load_draft(path: str, default_tax_rate: float = 19.0) -> Draft:
    """Akzeptiert einen Render-Request ({customer, positions, meta}) oder gespeicherte Angebotsdaten."""
    data: Any = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict) and "meta" in data:
        draft, _ = parse_render_request(data, default_tax_rate=default_tax_rate)
        return draft
    if not isinstance(data, dict):
        raise AngebotError(f"{path}: JSON-Objekt erwartet", "invalid_draft")
    return Draft.from_initial_data(data, default_tax_rate=default_tax_rate)


async def _render(draft: Draft, out: Path) -> str:
    from angebot.services.render_client import RenderClient

    config = load_config()
    async with RenderClient(config.render_url, timeout=config.render_timeout) as client:
        doc = await client.render(build_render_payload(draft, commit=False))
    out.write_bytes(doc.content)
    return doc.filename or fallback_filename(draft.customer, draft.offer_number)


async def _templates(query: str | None) -> list:
    from angebot.services.catalog import TemplateCatalog, load_templates_file, search_templates

    config = load_config()
    if config.templates_file:
        items = load_templates_file(config.templates_file)
    else:
        items = await TemplateCatalog(config.templates_url).fetch()
    return search_templates(items, query)


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="angebot")
    sub = parser.add_subparsers(dest="cmd", required=True)
    sub.add_parser("doctor")
    sub.add_parser("serve")
    p_totals = sub.add_parser("totals")
    p_totals.add_argument("draft")
    p_key = sub.add_parser("key")
    p_key.add_argument("draft")
    p_render = sub.add_parser("render")
    p_render.add_argument("draft")
    p_render.add_argument("--out", required=True)
    p_tpl = sub.add_parser("templates")
    p_tpl.add_argument("query", nargs="?", default=None)
    args = parser.parse_args(argv)

    config = load_config()
    setup_logging(config.log_level)

    if args.cmd == "doctor":
        print(json.dumps(doctor_report(), indent=2, ensure_ascii=False))
        return 0
    if args.cmd == "serve":
        from angebot.web import create_app

        create_app(config).run(host="127.0.0.1", port=config.port)
        return 0

    try:
        if args.cmd == "templates":
            for tpl in asyncio.run(_templates(args.query)):
                print(f"{tpl.id}\t{tpl.name}\t{tpl.title or ''}")
            return 0

        draft = _load_draft(args.draft, config.default_tax_rate)
        if args.cmd == "key":
            print(draft_key(draft))
        elif args.cmd == "totals":
            totals = compute_totals(draft.positions, draft.tax_rate, draft.discount)
            print(f"Netto:  {format_eur(totals.net)}")
            if totals.discount_amount:
                print(f"Rabatt: -{format_eur(totals.discount_amount)}")
            print(f"USt:    {format_eur(totals.tax)}")
            print(f"Brutto: {format_eur(totals.gross)}")
        elif args.cmd == "render":
            name = asyncio.run(_render(draft, Path(args.out)))
            print(f"{args.out} ({name})")
    except RenderError as e:
        print(f"Render fehlgeschlagen: {e.message} {e.body}".rstrip(), file=sys.stderr)
        return 1
    except (AngebotError, OSError, json.JSONDecodeError) as e:
        print(f"Fehler: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
