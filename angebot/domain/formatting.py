from __future__ import annotations

import math
import re
from typing import Any

from angebot.domain.models import Customer


def format_amount(value: Any) -> str:
    """
    Deutsche Formatierung mit zwei Nachkommastellen: 1234.5 -> '1.234,50'.
    Nicht-numerische oder nicht-endliche Werte werden als 0 dargestellt.
    """
    try:
        num = float(value)
    except (TypeError, ValueError):
        num = 0.0
    if not math.isfinite(num):
        num = 0.0
    # 1,234.50 -> 1.234,50
    s = f"{num:,.2f}"
    return s.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def format_eur(value: Any) -> str:
    return f"{format_amount(value)} €"


def format_quantity(value: Any) -> str:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return ""
    if num.is_integer():
        return str(int(num))
    return f"{num:g}".replace(".", ",")


def safe_filename_part(text: str) -> str:
    return re.sub(r"[\W_]+", "_", text or "").strip("_")


def fallback_filename(customer: Customer | None, offer_number: str) -> str:
    """Client-seitiger Dateiname, falls der Render-Dienst keinen vorschlaegt."""
    parts = [
        safe_filename_part(customer.display_name if customer else ""),
        offer_number or "",
        safe_filename_part((customer.customer_number or "") if customer else ""),
    ]
    return "_".join(p for p in parts if p) + ".pdf"


def offer_filename(customer: Customer | None, offer_number: str) -> str:
    """Dateiname, den der Render-Dienst im Content-Disposition-Header vorschlaegt."""
    first = customer.first_name if customer else ""
    last = customer.last_name if customer else ""
    safe_name = re.sub(r"[^\w\s\-]", "", f"{first} {last}".strip())
    safe_name = re.sub(r"\s+", "_", safe_name)
    cust_no = f"_{customer.customer_number}" if customer and customer.customer_number else ""
    return f"{safe_name or 'Kunde'}_{offer_number or 'Angebot'}{cust_no}.pdf"
