from __future__ import annotations

from flask import Flask, jsonify

from angebot.config import AppConfig, load_config
from angebot.errors import handle_error


def create_app(config: AppConfig | None = None) -> Flask:
    """Lokaler Render-Dienst fuer die Angebotsvorschau."""
    config = config or load_config()
    app = Flask(__name__)
    app.config["ANGEBOT"] = config

    from .routes import bp

    app.register_blueprint(bp)

    @app.get("/api/ping")
    def ping():
        return jsonify(ok=True)

    app.errorhandler(Exception)(handle_error)
    return app
