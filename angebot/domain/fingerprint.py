from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Any

from angebot.domain.numbers import parse_number

if TYPE_CHECKING:
    from angebot.domain.draft import Draft


def canonical_draft(draft: "Draft") -> dict[str, Any]:
    """Alle Felder, die das gerenderte Dokument beeinflussen, in normalisierter Form."""
    c = draft.customer
    d = draft.discount
    return {
        "customerId": c.id if c else None,
        "custFirst": c.first_name if c else "",
        "custLast": c.last_name if c else "",
        "custCompany": (c.company or "") if c else "",
        "custNo": (c.customer_number or "") if c else "",
        "custAddress": c.address_lines if c else [],
        "offerNumber": draft.offer_number or "",
        "offerId": draft.offer_id or None,
        "date": draft.date or "",
        "validUntil": draft.valid_until or "",
        "title": draft.title or "",
        "intro": draft.intro or "",
        "taxRate": parse_number(draft.tax_rate),
        "template": draft.template or "",
        "positions": [
            {
                "type": p.type.value,
                "description": p.description or "",
                "quantity": parse_number(p.quantity),
                "unitPrice": parse_number(p.unit_price),
                "unit": p.unit or "",
            }
            for p in draft.positions
        ],
        "discount": {
            "enabled": bool(d.enabled),
            "label": d.label if d.label is not None else "Rabatt",
            "type": d.type.value,
            "base": d.base.value,
            "value": parse_number(d.value),
        },
    }


def draft_key(draft: "Draft") -> str:
    payload = json.dumps(
        canonical_draft(draft),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
