"""
angebot/errors.py
Zentrales Error-Handling fuer die Angebots-Engine.
Maxime: Fail-Safe, Not Fail-Fast. Fehler im Vorschau-Pfad werden geloggt, nie an den Editor weitergereicht.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from flask import jsonify

logger = logging.getLogger("angebot.errors")


class AngebotError(Exception):
    """Base-Exception fuer alle kontrollierten Fehler der Angebots-Engine."""

    status_code = 500

    def __init__(self, message: str, error_code: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.request_id = str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc).isoformat()


class ValidationError(AngebotError):
    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "validation_error", {"field": field})
        self.field = field


class RenderError(AngebotError):
    """Render-Dienst hat mit Nicht-2xx geantwortet oder war nicht erreichbar."""

    status_code = 502

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message, "render_failed", {"status": status_code})
        self.upstream_status = status_code
        self.body = body


class CommitNotSupported(AngebotError):
    status_code = 501

    def __init__(self, message: str = "Speichern (commit) wird von diesem Dienst nicht unterstuetzt."):
        super().__init__(message, "commit_not_supported")


def json_error(code: str, message: str, status: int = 400, details: dict | None = None):
    """Hilfsfunktion fuer standardisierte JSON-Fehlermeldungen."""
    return jsonify({
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "request_id": str(uuid.uuid4()),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    }), status


def handle_error(error: Exception):
    """Flask Error Handler: AngebotError -> JSON-Envelope, alles andere -> 500."""
    from werkzeug.exceptions import HTTPException

    if isinstance(error, AngebotError):
        if error.status_code >= 500:
            logger.error(f"{error.error_code} [{error.request_id}]: {error.message}")
        return jsonify({
            "error": {
                "code": error.error_code,
                "message": error.message,
                "details": error.details,
                "request_id": error.request_id,
                "timestamp": error.timestamp,
            }
        }), error.status_code
    if isinstance(error, HTTPException):
        code = "validation_error" if error.code == 400 else "http_error"
        return json_error(code, str(error.description or error.name), status=error.code or 500)

    logger.exception(f"Unerwarteter Fehler: {error}")
    return json_error("unknown_error", "Unerwarteter Systemfehler.", status=500)
