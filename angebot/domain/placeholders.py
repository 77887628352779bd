from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from angebot.domain.models import Customer


def placeholder_map(customer: Customer | Mapping[str, Any] | None, today: date | None = None) -> dict[str, str]:
    if not isinstance(customer, Customer):
        customer = Customer.from_dict(customer)
    return {
        "{{customer.first_name}}": customer.first_name,
        "{{customer.last_name}}": customer.last_name,
        "{{customer.company}}": customer.company or "",
        "{{customer.display_name}}": customer.display_name,
        "{{customer.street}}": customer.street or "",
        "{{customer.house_number}}": customer.house_number or "",
        "{{customer.postal_code}}": customer.postal_code or "",
        "{{customer.city}}": customer.city or "",
        "{{customer.address}}": "\n".join(customer.address_lines),
        "{{today}}": (today or date.today()).isoformat(),
    }


def replace_placeholders(
    text: str,
    customer: Customer | Mapping[str, Any] | None,
    today: date | None = None,
) -> str:
    """
    Ersetzt Kunden-Platzhalter wie {{customer.company}} oder {{today}}.
    Unbekannte Platzhalter bleiben als Text stehen.
    """
    if not text:
        return text
    for token, value in placeholder_map(customer, today).items():
        text = text.replace(token, value)
    return text
