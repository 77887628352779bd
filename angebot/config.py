from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_cache_dir


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


def _env_float(key: str, default: float | None) -> float | None:
    raw = _env(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw.replace(",", "."))
    except ValueError:
        return default


@dataclass(frozen=True)
class AppConfig:
    render_url: str
    templates_url: str
    templates_file: Path | None
    render_timeout: float | None
    debounce_seconds: float
    preview_dir: Path
    default_tax_rate: float
    company_name: str
    log_level: str
    port: int


def load_config() -> AppConfig:
    port = int(_env("PORT", "5052"))
    base_url = f"http://localhost:{port}"
    return AppConfig(
        render_url=_env("ANGEBOT_RENDER_URL", f"{base_url}/api/angebot/generate-offer"),
        templates_url=_env("ANGEBOT_TEMPLATES_URL", f"{base_url}/api/angebot/templates"),
        templates_file=Path(_env("ANGEBOT_TEMPLATES_FILE")) if _env("ANGEBOT_TEMPLATES_FILE") else None,
        # Kein Timeout per Default: Abbruch passiert logisch ueber neuere Entwuerfe
        render_timeout=_env_float("ANGEBOT_RENDER_TIMEOUT", None),
        debounce_seconds=max(0.0, (_env_float("ANGEBOT_DEBOUNCE_MS", 250.0) or 0.0) / 1000.0),
        preview_dir=Path(
            _env(
                "ANGEBOT_PREVIEW_DIR",
                str(Path(user_cache_dir("angebot", appauthor=False)) / "previews"),
            )
        ),
        default_tax_rate=_env_float("ANGEBOT_DEFAULT_TAX_RATE", 19.0) or 0.0,
        company_name=_env("ANGEBOT_COMPANY_NAME", "KUKANILEA Handwerksservice"),
        log_level=_env("ANGEBOT_LOG_LEVEL", "INFO").upper(),
        port=port,
    )


def doctor_report() -> dict:
    config = load_config()
    return {
        "render_url": config.render_url,
        "templates_url": config.templates_url,
        "templates_file": str(config.templates_file) if config.templates_file else None,
        "render_timeout": config.render_timeout,
        "debounce_seconds": config.debounce_seconds,
        "preview_dir": str(config.preview_dir),
        "default_tax_rate": config.default_tax_rate,
        "log_level": config.log_level,
        "port": config.port,
        "paths": {
            "preview_dir_exists": config.preview_dir.exists(),
            "templates_file_exists": bool(config.templates_file and config.templates_file.exists()),
        },
    }
