"""
angebot/domain/importer.py
Uebernahme von Vorlagen und KI-Entwuerfen in den Angebotsentwurf.

Eingaben sind lose typisiert (JSON aus Katalog, Session oder Request-Body).
Fehlerhafte Felder werden einzeln durch Vorgaben ersetzt; der Import bricht
nie komplett ab und veraendert die Quelle nicht.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any, Mapping

import pydantic

from angebot.contracts import OfferTemplate
from angebot.domain.models import BillingSettings, Customer, Discount, Position, PositionType
from angebot.domain.numbers import optional_number
from angebot.domain.placeholders import replace_placeholders
from angebot.errors import ValidationError

if TYPE_CHECKING:
    from angebot.domain.draft import Draft

logger = logging.getLogger("angebot.importer")


@dataclass
class ImportedDraft:
    title: str | None = None
    intro: str | None = None
    tax_rate: float = 19.0
    discount: Discount | None = None
    positions: list[Position] = field(default_factory=list)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _quantity(raw: Any) -> float | None:
    value = optional_number(raw)
    return None if value is None else max(0.0, value)


def normalize_positions(
    raw: Any,
    customer: Customer | None = None,
    *,
    today: date | None = None,
) -> list[Position]:
    """Lose Positionsliste -> kanonische Positionen (neue Liste, neue Objekte)."""
    if not isinstance(raw, list):
        return []
    out: list[Position] = []
    for entry in raw:
        p = entry if isinstance(entry, Mapping) else {}
        description = _as_text(p.get("description"))
        if customer is not None:
            description = replace_placeholders(description, customer, today)
        unit = p.get("unit")
        price = p.get("unitPrice")
        if price is None:
            price = p.get("unit_price")
        out.append(
            Position(
                type=PositionType.coerce(p.get("type")),
                description=description,
                quantity=_quantity(p.get("quantity")),
                unit=unit if isinstance(unit, str) else None,
                unit_price=optional_number(price),
            )
        )
    return out


def normalize_discount(raw: Any) -> Discount | None:
    if not isinstance(raw, Mapping):
        return None
    return Discount.from_dict(raw)


def normalize_ai_draft(
    raw: Any,
    customer: Customer | None = None,
    *,
    today: date | None = None,
) -> ImportedDraft:
    raw = raw if isinstance(raw, Mapping) else {}
    title = raw.get("title")
    intro = raw.get("intro")
    if customer is not None:
        title = replace_placeholders(title, customer, today) if isinstance(title, str) else None
        intro = replace_placeholders(intro, customer, today) if isinstance(intro, str) else None
    tax = optional_number(raw.get("tax_rate"))
    return ImportedDraft(
        title=title if isinstance(title, str) else None,
        intro=intro if isinstance(intro, str) else None,
        tax_rate=19.0 if tax is None else tax,
        discount=normalize_discount(raw.get("discount")),
        positions=normalize_positions(raw.get("positions"), customer, today=today),
    )


def apply_template(
    draft: "Draft",
    template: OfferTemplate | Mapping[str, Any],
    *,
    today: date | None = None,
) -> bool:
    """Vorlage in den Entwurf uebernehmen; ohne ausgewaehlten Kunden passiert nichts."""
    customer = draft.customer
    if customer is None:
        logger.info("Vorlage nicht uebernommen: kein Kunde ausgewaehlt")
        return False
    if not isinstance(template, OfferTemplate):
        try:
            template = OfferTemplate.model_validate(template)
        except pydantic.ValidationError as e:
            logger.warning(f"Vorlage verworfen, Format ungueltig: {e.error_count()} Fehler")
            return False

    draft.title = replace_placeholders(template.title or "", customer, today)
    draft.intro = replace_placeholders(template.intro or "", customer, today)
    draft.set_tax_rate(template.tax_rate)
    draft.positions.replace_all(normalize_positions(template.positions, customer, today=today))
    logger.info(f"Vorlage {template.id} uebernommen ({len(draft.positions)} Positionen)")
    return True


def apply_ai_draft(draft: "Draft", raw: Any, *, today: date | None = None) -> bool:
    """KI-Entwurf (dict oder JSON-Text) in den Entwurf uebernehmen."""
    customer = draft.customer
    if customer is None:
        logger.info("KI-Entwurf nicht uebernommen: kein Kunde ausgewaehlt")
        return False
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            logger.warning(f"KI-Entwurf ist kein gueltiges JSON: {e}")
            return False

    parsed = normalize_ai_draft(raw, customer, today=today)
    draft.title = parsed.title or ""
    draft.intro = parsed.intro or ""
    draft.set_tax_rate(parsed.tax_rate)
    draft.positions.replace_all(parsed.positions)
    if parsed.discount is not None:
        draft.discount = parsed.discount
    return True


def parse_render_request(data: Any, *, default_tax_rate: float = 19.0) -> tuple["Draft", bool]:
    """Request-Body des Render-Dienstes -> (Entwurf, commit). Fehlt taxRate, gilt default_tax_rate."""
    from angebot.domain.draft import Draft, clamp_tax_rate
    from angebot.domain.positions import PositionList

    if not isinstance(data, Mapping):
        raise ValidationError("Request-Body muss ein JSON-Objekt sein.")
    meta = data.get("meta")
    meta = meta if isinstance(meta, Mapping) else {}
    customer = data.get("customer")
    billing = meta.get("billingSettings")
    offer_id = meta.get("offerId")

    draft = Draft(
        customer=Customer.from_dict(customer) if isinstance(customer, Mapping) else None,
        offer_id=str(offer_id) if offer_id else None,
        offer_number=_as_text(meta.get("offerNumber")).strip(),
        date=_as_text(meta.get("date")),
        valid_until=_as_text(meta.get("validUntil")),
        title=_as_text(meta.get("title")),
        intro=_as_text(meta.get("intro")),
        tax_rate=clamp_tax_rate(meta.get("taxRate"), default_tax_rate),
        positions=PositionList(normalize_positions(data.get("positions"))),
        discount=normalize_discount(meta.get("discount")) or Discount(),
        billing_settings=BillingSettings.from_dict(billing),
        is_edit=bool(offer_id),
    )
    return draft, bool(meta.get("commit"))
