from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional
from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict, Field, field_validator

from angebot.domain.numbers import optional_number, parse_number

if TYPE_CHECKING:
    from angebot.domain.draft import Draft

_FILENAME_EXT = re.compile(r"filename\*\s*=\s*(?:([\w!#$%&+^`{}~.-]+)'[^']*')?(\"(?:[^\"\\]|\\.)*\"|[^;]+)", re.IGNORECASE)
_FILENAME = re.compile(r"filename\s*=\s*(\"(?:[^\"\\]|\\.)*\"|[^;]+)", re.IGNORECASE)


class OfferTemplate(BaseModel):
    """Gespeicherte Angebotsvorlage aus dem Vorlagen-Katalog (nur lesend)."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str = ""
    title: Optional[str] = None
    intro: Optional[str] = None
    tax_rate: float = 19.0
    positions: List[Any] = Field(default_factory=list)
    updated_at: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> str:
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            return ""
        return str(v)

    @field_validator("name", mode="before")
    @classmethod
    def _name_as_text(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("title", "intro", "updated_at", mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("tax_rate", mode="before")
    @classmethod
    def _tax_rate(cls, v: Any) -> float:
        value = optional_number(v)
        return 19.0 if value is None else value

    @field_validator("positions", mode="before")
    @classmethod
    def _positions(cls, v: Any) -> list:
        return list(v) if isinstance(v, list) else []


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes
    filename: Optional[str] = None
    media_type: str = "application/pdf"
    offer_id: str = ""
    offer_number: str = ""


def _unquote_value(raw: str) -> str:
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        raw = re.sub(r"\\(.)", r"\1", raw[1:-1])
    return raw


def parse_content_disposition(header: str | None) -> Optional[str]:
    """
    Dateiname aus Content-Disposition; filename* (RFC 5987, mit Zeichensatz)
    hat Vorrang, prozent-kodierte Namen werden dekodiert.
    """
    if not header:
        return None
    match = _FILENAME_EXT.search(header)
    if match:
        charset = match.group(1) or "utf-8"
        name = _unquote_value(match.group(2))
    else:
        match = _FILENAME.search(header)
        if not match:
            return None
        charset = "utf-8"
        name = _unquote_value(match.group(1))
    if "%" in name:
        try:
            name = unquote(name, encoding=charset, errors="strict")
        except (UnicodeDecodeError, LookupError):
            pass  # kaputt kodiert oder unbekannter Zeichensatz: Rohwert behalten
    return name or None


def build_render_payload(draft: "Draft", *, commit: bool = False) -> dict[str, Any]:
    """Request-Body fuer den Render-Dienst; commit=False waehlt die Vorschau ohne Speichern."""
    d = draft.discount
    meta: dict[str, Any] = {
        "title": draft.title or "",
        "intro": draft.intro or "",
        "commit": bool(commit),
        "date": draft.date or "",
        "validUntil": draft.valid_until or "",
        "taxRate": parse_number(draft.tax_rate),
        "billingSettings": {"template": draft.template or ""},
        "offerNumber": draft.offer_number,
        "discount": {
            "enabled": bool(d.enabled),
            "label": d.label if d.label is not None else "Rabatt",
            "type": d.type.value,
            "base": d.base.value,
            "value": parse_number(d.value),
        },
    }
    if draft.offer_id:
        meta["offerId"] = draft.offer_id
    return {
        "customer": draft.customer.to_dict() if draft.customer else None,
        "positions": draft.positions.to_list(),
        "meta": meta,
    }
