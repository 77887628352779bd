from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Mapping

from angebot.domain.numbers import optional_number, parse_number


class PositionType(str, Enum):
    ITEM = "item"
    HEADING = "heading"
    DESCRIPTION = "description"
    SUBTOTAL = "subtotal"
    SEPARATOR = "separator"

    @classmethod
    def coerce(cls, value: Any) -> "PositionType":
        """Unknown kinds fall back to ITEM."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.ITEM


class DiscountType(str, Enum):
    PERCENT = "percent"
    AMOUNT = "amount"

    @classmethod
    def coerce(cls, value: Any) -> "DiscountType":
        return cls.AMOUNT if str(getattr(value, "value", value)) == "amount" else cls.PERCENT


class DiscountBase(str, Enum):
    NET = "net"
    GROSS = "gross"

    @classmethod
    def coerce(cls, value: Any) -> "DiscountBase":
        return cls.GROSS if str(getattr(value, "value", value)) == "gross" else cls.NET


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# Vorgaben je Positionsart beim Hinzufuegen
POSITION_DEFAULTS: dict[PositionType, dict[str, Any]] = {
    PositionType.ITEM: {"description": "", "quantity": 1.0, "unit": "Stück", "unit_price": 0.0},
    PositionType.HEADING: {"description": "Neue Überschrift"},
    PositionType.DESCRIPTION: {"description": ""},
    PositionType.SUBTOTAL: {"description": "Zwischensumme"},
    PositionType.SEPARATOR: {"description": ""},
}


@dataclass
class Position:
    type: PositionType
    description: str = ""
    quantity: float | None = None
    unit: str | None = None
    unit_price: float | None = None

    @classmethod
    def new(cls, kind: PositionType | str) -> "Position":
        kind = PositionType.coerce(kind)
        return cls(type=kind, **POSITION_DEFAULTS[kind])

    @property
    def is_item(self) -> bool:
        return self.type is PositionType.ITEM

    def to_dict(self) -> dict[str, Any]:
        """Wire format (camelCase); unset optional fields are omitted."""
        out: dict[str, Any] = {"type": self.type.value, "description": self.description}
        if self.quantity is not None:
            out["quantity"] = self.quantity
        if self.unit is not None:
            out["unit"] = self.unit
        if self.unit_price is not None:
            out["unitPrice"] = self.unit_price
        return out


@dataclass
class Discount:
    enabled: bool = False
    label: str = "Rabatt"
    type: DiscountType = DiscountType.PERCENT
    base: DiscountBase = DiscountBase.NET
    value: float = 0.0

    def __post_init__(self) -> None:
        self.enabled = _to_bool(self.enabled)
        self.label = "Rabatt" if self.label is None else str(self.label)
        self.type = DiscountType.coerce(self.type)
        self.base = DiscountBase.coerce(self.base)
        self.value = max(0.0, parse_number(self.value))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "Discount":
        raw = raw if isinstance(raw, Mapping) else {}
        label = raw.get("label")
        return cls(
            enabled=_to_bool(raw.get("enabled")),
            label=label if isinstance(label, str) and label else "Rabatt",
            type=DiscountType.coerce(raw.get("type")),
            base=DiscountBase.coerce(raw.get("base")),
            value=parse_number(raw.get("value")),
        )

    @property
    def active(self) -> bool:
        return self.enabled and self.value > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "label": self.label,
            "type": self.type.value,
            "base": self.base.value,
            "value": self.value,
        }


@dataclass
class Customer:
    id: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    company: str | None = None
    customer_number: str | None = None
    street: str | None = None
    house_number: str | None = None
    postal_code: str | None = None
    city: str | None = None
    country: str | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "Customer":
        raw = raw if isinstance(raw, Mapping) else {}
        return cls(
            id=_text(raw.get("id")),
            first_name=_text(raw.get("first_name")),
            last_name=_text(raw.get("last_name")),
            email=_text(raw.get("email")),
            company=_optional_text(raw.get("company")),
            customer_number=_optional_text(raw.get("customer_number")),
            street=_optional_text(raw.get("street")),
            house_number=_optional_text(raw.get("house_number")),
            postal_code=_optional_text(raw.get("postal_code")),
            city=_optional_text(raw.get("city")),
            country=_optional_text(raw.get("country")),
        )

    @property
    def display_name(self) -> str:
        """Firma bevorzugt, sonst Vor- und Nachname."""
        return (self.company or f"{self.first_name} {self.last_name}".strip()).strip()

    @property
    def street_line(self) -> str:
        return " ".join(filter(None, [self.street, self.house_number])).strip()

    @property
    def city_line(self) -> str:
        return " ".join(filter(None, [self.postal_code, self.city])).strip()

    @property
    def address_lines(self) -> list[str]:
        return [line for line in (self.display_name, self.street_line, self.city_line) if line]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BillingSettings:
    quote_prefix: str = ""
    quote_start: int = 0
    quote_suffix: str = ""
    template: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "BillingSettings":
        raw = raw if isinstance(raw, Mapping) else {}
        return cls(
            quote_prefix=_text(raw.get("quote_prefix")),
            quote_start=int(parse_number(raw.get("quote_start"))),
            quote_suffix=_text(raw.get("quote_suffix")),
            template=_text(raw.get("template")),
        )


@dataclass(frozen=True)
class CatalogItem:
    name: str
    unit: str = "Stk."
    unit_price: float = 0.0
    description: str | None = None
    kind: str = "product"

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CatalogItem":
        return cls(
            name=_text(raw.get("name")),
            unit=_text(raw.get("unit")) or "Stk.",
            unit_price=optional_number(raw.get("unit_price")) or 0.0,
            description=_optional_text(raw.get("description")),
            kind=_text(raw.get("kind")) or "product",
        )
