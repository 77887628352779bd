from __future__ import annotations

import logging
import re

# Kundendaten laufen durch Payloads und Fehler-Bodies des Render-Dienstes
PII_PATTERNS = [
    r"[\w\.-]+@[\w\.-]+\.\w+",  # E-Mail
    r"\+\d{1,3}[-.\s]?\(?\d{1,4}\)?[-.\s]?\d{2,4}[-.\s]?\d{2,9}",  # Telefon international
    r"\b0\d{2,5}[-/\s]\d{3,9}\b",  # Telefon national, z.B. 030/1234567
]
_PII = re.compile("|".join(f"(?:{p})" for p in PII_PATTERNS))
REDACTED = "[REDACTED_PII]"


class PIISafeFormatter(logging.Formatter):
    """Schwaerzt E-Mail-Adressen und Telefonnummern in der fertigen Logzeile.

    Kundendaten stehen in Render-Payloads und in Fehlerantworten des Dienstes
    und sollen nicht im Klartext in Logdateien landen.
    """

    def format(self, record: logging.LogRecord) -> str:
        return _PII.sub(REDACTED, super().format(record))


def setup_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger("angebot")
    logger.setLevel(getattr(logging, str(level or "INFO").upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(PIISafeFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(handler)
    return logger
