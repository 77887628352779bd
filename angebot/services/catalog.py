"""
angebot/services/catalog.py
Vorlagen-Katalog (nur lesend): per HTTP oder aus einer JSON-Datei.
"""
from __future__ import annotations

import json
import logging
import unicodedata
from pathlib import Path
from typing import Any, Iterable

import httpx
import pydantic

from angebot.contracts import OfferTemplate

logger = logging.getLogger("angebot.catalog")


def parse_templates(data: Any) -> list[OfferTemplate]:
    """Validiert eine Vorlagenliste; fehlerhafte Eintraege werden uebersprungen."""
    if isinstance(data, dict):
        data = data.get("templates", data.get("items"))
    if not isinstance(data, list):
        return []
    out: list[OfferTemplate] = []
    for idx, entry in enumerate(data):
        try:
            out.append(OfferTemplate.model_validate(entry))
        except pydantic.ValidationError as e:
            logger.warning(f"Vorlage #{idx} uebersprungen: {e.error_count()} Validierungsfehler")
    return out


def load_templates_file(path: Path | str) -> list[OfferTemplate]:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning(f"Vorlagen-Datei fehlt: {path}")
        return []
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Vorlagen-Datei unlesbar ({path}): {e}")
        return []
    return parse_templates(data)


def _fold(text: str) -> str:
    # "Küche" -> "kuche"
    decomposed = unicodedata.normalize("NFD", text or "")
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


def search_templates(templates: Iterable[OfferTemplate], query: str | None) -> list[OfferTemplate]:
    """Alle Suchbegriffe muessen in Titel oder Name vorkommen (ohne Akzente, ohne Gross/Klein)."""
    templates = list(templates)
    tokens = _fold(query or "").split()
    if not tokens:
        return templates
    hits = []
    for tpl in templates:
        haystack = _fold(f"{tpl.title or ''} {tpl.name}")
        if all(tok in haystack for tok in tokens):
            hits.append(tpl)
    return hits


class TemplateCatalog:
    def __init__(
        self,
        url: str,
        *,
        timeout: float | None = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def fetch(self) -> list[OfferTemplate]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(self.url)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Vorlagen konnten nicht geladen werden: {e}")
            return []
        templates = parse_templates(data)
        logger.info(f"{len(templates)} Vorlagen geladen")
        return templates

    async def search(self, query: str | None) -> list[OfferTemplate]:
        return search_templates(await self.fetch(), query)
