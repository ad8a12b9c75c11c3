from __future__ import annotations

import json
import logging
from pathlib import Path

from invoice_maker.utils.pdf.core.pagination import DEFAULT_TOLERANCE_MM

SETTINGS_PATH = Path(__file__).resolve().parents[2] / "data" / "settings.json"

DEFAULT_SETTINGS: dict = {
    "user": {"uid": "local", "email": "me@company.com"},
    "sender": {
        "name": "Your Company Name",
        "address": "123 Business Rd, Tech City, 10101",
        "email": "billing@company.com",
        "phone": "+62 812-3456-7890",
        "website": "www.yourcompany.com",
    },
    "invoice": {
        "currency": "IDR",
        "tax_rate": 11,
        "locale": "id-ID",
        "brand_color": "#2563EB",
        "signature_text": "Authorized Signature",
        "due_days": 7,
        "notes": "Thank you for your business. Please transfer payment to BCA 1234567890.",
    },
    "export": {
        "scale": 2,
        "jpeg_quality": 95,
        "tolerance_mm": DEFAULT_TOLERANCE_MM,
        "output_dir": "",
    },
    "store": {"path": ""},
    "scan": {
        "model": "gpt-4o-mini",
        "base_url": "",
        "api_key_env": "OPENAI_API_KEY",
        "timeout": 60,
    },
    "currencies": ["IDR", "USD", "EUR", "SGD"],
}

logger = logging.getLogger(__name__)


def _merge(defaults: dict, data: dict) -> dict:
    merged = dict(defaults)
    for key, value in data.items():
        if isinstance(value, dict) and isinstance(defaults.get(key), dict):
            merged[key] = _merge(defaults[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(path: Path | None = None) -> dict:
    """
    Load settings JSON merged over the defaults.
    Missing or unreadable files give the defaults.
    """
    target = path or SETTINGS_PATH
    defaults = json.loads(json.dumps(DEFAULT_SETTINGS))
    if target.exists():
        try:
            data = json.loads(target.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", target, exc)
            return defaults
        if isinstance(data, dict):
            return _merge(defaults, data)
    return defaults


def save_settings(data: dict, path: Path | None = None) -> Path:
    target = path or SETTINGS_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    return target


def store_path(settings: dict) -> Path:
    raw = (settings.get("store") or {}).get("path") or ""
    return Path(raw) if raw else SETTINGS_PATH.parent / "invoices.json"


def export_dir(settings: dict) -> Path:
    raw = (settings.get("export") or {}).get("output_dir") or ""
    return Path(raw) if raw else Path.home()


def _number(raw, default, cast=float):
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid export setting %r", raw)
        return default


def export_options(settings: dict) -> dict:
    """Keyword arguments for export_invoice_pdf; missing, null or invalid values use the defaults."""
    cfg = settings.get("export") or {}
    return {
        "scale": _number(cfg.get("scale"), 2.0) or 2.0,
        "jpeg_quality": _number(cfg.get("jpeg_quality"), 95, int) or 95,
        "tolerance_mm": _number(cfg.get("tolerance_mm"), DEFAULT_TOLERANCE_MM),
    }
