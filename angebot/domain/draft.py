"""
angebot/domain/draft.py
Der Angebotsentwurf: alles, was der Editor bearbeitet und die Vorschau liest.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Mapping

from angebot.domain.models import BillingSettings, Customer, Discount
from angebot.domain.numbers import parse_number
from angebot.domain.positions import PositionList

DEFAULT_TITLE = "Angebot – "
DEFAULT_INTRO = "Wir haben folgende Leistungen zusammengestellt:"
VALIDITY_DAYS = 14


def clamp_tax_rate(raw: Any, default: float = 19.0) -> float:
    return min(100.0, max(0.0, parse_number(raw, default)))


@dataclass
class Draft:
    customer: Customer | None = None
    offer_id: str | None = None
    offer_number: str = ""
    date: str = ""
    valid_until: str = ""
    title: str = DEFAULT_TITLE
    intro: str = DEFAULT_INTRO
    tax_rate: float = 19.0
    positions: PositionList = field(default_factory=PositionList.with_default_item)
    discount: Discount = field(default_factory=Discount)
    billing_settings: BillingSettings = field(default_factory=BillingSettings)
    is_edit: bool = False

    @classmethod
    def create(
        cls,
        *,
        offer_number: str = "",
        billing_settings: BillingSettings | None = None,
        tax_rate: float = 19.0,
    ) -> "Draft":
        return cls(
            offer_number=offer_number,
            billing_settings=billing_settings or BillingSettings(),
            tax_rate=clamp_tax_rate(tax_rate),
        )

    @classmethod
    def from_initial_data(
        cls,
        data: Mapping[str, Any],
        *,
        billing_settings: BillingSettings | None = None,
        default_tax_rate: float = 19.0,
    ) -> "Draft":
        """Edit-Flow: Entwurf aus einem gespeicherten Angebot."""
        from angebot.domain.importer import normalize_positions

        customer = data.get("selectedCustomer") or data.get("customer")
        raw_discount = data.get("discount")
        return cls(
            customer=Customer.from_dict(customer) if customer else None,
            offer_id=str(data["offerId"]) if data.get("offerId") else None,
            offer_number=str(data.get("offerNumber") or ""),
            date=str(data.get("date") or ""),
            valid_until=str(data.get("validUntil") or ""),
            title=str(data.get("title") or ""),
            intro=str(data.get("intro") or ""),
            tax_rate=clamp_tax_rate(data.get("taxRate"), default_tax_rate),
            positions=PositionList(normalize_positions(data.get("positions"))),
            discount=Discount.from_dict(raw_discount) if raw_discount else Discount(),
            billing_settings=billing_settings or BillingSettings(),
            is_edit=True,
        )

    @property
    def template(self) -> str:
        return self.billing_settings.template

    def select_customer(self, customer: Customer | None, *, today: date | None = None) -> None:
        self.customer = customer
        if self.is_edit:
            return
        # Create-Flow: nur Felder fuellen, die noch leer bzw. unveraendert sind
        display_name = customer.display_name if customer else ""
        if not self.title or self.title == DEFAULT_TITLE:
            self.title = f"{DEFAULT_TITLE}{display_name}"
        today = today or date.today()
        if not self.date:
            self.date = today.isoformat()
        if not self.valid_until:
            self.valid_until = (today + timedelta(days=VALIDITY_DAYS)).isoformat()

    def set_tax_rate(self, raw: Any) -> float:
        self.tax_rate = clamp_tax_rate(raw, self.tax_rate)
        return self.tax_rate

    def set_template(self, template: str) -> None:
        self.billing_settings.template = str(template or "")

    def update_discount(self, **changes: Any) -> Discount:
        merged = self.discount.to_dict()
        merged.update(changes)
        self.discount = Discount(
            enabled=merged["enabled"],
            label=merged["label"],
            type=merged["type"],
            base=merged["base"],
            value=merged["value"],
        )
        return self.discount
