from __future__ import annotations

import math
from typing import Any


def _normalize_decimal(text: str) -> str:
    text = text.strip().replace(" ", "").replace("\u00a0", "")
    if "," in text and "." in text:
        # Das zuletzt stehende Zeichen ist das Dezimaltrennzeichen: 1.234,5 / 1,234.5
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    else:
        text = text.replace(",", ".")
    return text


def optional_number(raw: Any) -> float | None:
    """Finite float from a number or numeric string (period or comma decimal), else None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        text = _normalize_decimal(raw)
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def parse_number(raw: Any, default: float = 0.0) -> float:
    """Like optional_number, but never None: unparsable input becomes `default`."""
    value = optional_number(raw)
    return default if value is None else value
