"""
angebot/domain/pricing.py
Summen, Rabatt und Umsatzsteuer eines Angebots.

Rabatt ist eine reine Dokument-Anpassung im Summenblock: Zeilenbetraege und
Zwischensummen werden nie rabattiert.

Rabatt auf Brutto: der Rabatt wird vom Brutto vor Rabatt abgezogen, das
Netto ergibt sich anschliessend als Brutto / (1 + USt). Das gilt fuer
Prozent- und Betragsrabatte gleichermassen.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from angebot.domain.models import Discount, DiscountBase, DiscountType, Position, PositionType
from angebot.domain.numbers import parse_number


@dataclass(frozen=True)
class Totals:
    net: float
    discount_amount: float
    taxable_base: float
    tax: float
    gross: float
    gross_before_discount: float

    def to_dict(self) -> dict[str, float]:
        return {
            "net": self.net,
            "discountAmount": self.discount_amount,
            "taxableBase": self.taxable_base,
            "tax": self.tax,
            "gross": self.gross,
            "grossBeforeDiscount": self.gross_before_discount,
        }


def line_total(position: Position) -> float:
    if position.type is not PositionType.ITEM:
        return 0.0
    return (position.quantity or 0.0) * (position.unit_price or 0.0)


def net_total(positions: Iterable[Position]) -> float:
    return sum((line_total(p) for p in positions), 0.0)


def subtotal_at(positions: Sequence[Position], index: int) -> float:
    """Summe aller Detailpositionen vor `index`, ab Dokumentanfang."""
    return net_total(list(positions)[:index])


def row_values(positions: Sequence[Position]) -> list[float | None]:
    """Anzeigewert je Zeile: Zeilenbetrag, Zwischensumme oder None."""
    rows = list(positions)
    values: list[float | None] = []
    for i, p in enumerate(rows):
        if p.type is PositionType.ITEM:
            values.append(line_total(p))
        elif p.type is PositionType.SUBTOTAL:
            values.append(net_total(rows[:i]))
        else:
            values.append(None)
    return values


def _discount_on(base_figure: float, discount: Discount) -> float:
    if discount.type is DiscountType.PERCENT:
        amount = base_figure * discount.value / 100
    else:
        amount = discount.value
    return min(max(0.0, amount), base_figure)


def compute_totals(
    positions: Iterable[Position],
    tax_rate: float,
    discount: Discount | None = None,
) -> Totals:
    net = net_total(positions)
    rate = min(100.0, max(0.0, parse_number(tax_rate)))
    tax_factor = 1 + rate / 100
    gross_before = net * tax_factor

    if discount is None or not discount.active:
        tax = net * rate / 100
        return Totals(
            net=net,
            discount_amount=0.0,
            taxable_base=net,
            tax=tax,
            gross=net + tax,
            gross_before_discount=gross_before,
        )

    if discount.base is DiscountBase.NET:
        amount = _discount_on(net, discount)
        taxable = max(0.0, net - amount)
        tax = taxable * rate / 100
        gross = taxable + tax
    else:
        amount = _discount_on(gross_before, discount)
        gross = max(0.0, gross_before - amount)
        taxable = gross / tax_factor
        tax = gross - taxable

    return Totals(
        net=net,
        discount_amount=amount,
        taxable_base=taxable,
        tax=tax,
        gross=gross,
        gross_before_discount=gross_before,
    )
