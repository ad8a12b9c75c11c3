"""
Import line items from a photographed receipt or invoice.

The extraction itself is done by a vision model behind `LineItemExtractor`
(`OpenAIVisionExtractor` for any OpenAI-compatible endpoint); this module
prepares the image and maps the JSON answer to `LineItem`s.
"""

from __future__ import annotations

import base64
import io
import json
import logging
import os
import uuid
from typing import Any, Optional, Protocol

from openai import OpenAI
from PIL import Image

from invoice_maker.core.models.invoice import LineItem
from invoice_maker.errors import ScanImportError

SCAN_PROMPT = (
    "Analyze this receipt/invoice image. Extract the line items. Return a list of items with "
    "description, quantity (default to 1 if missing), and price per unit (as a number, remove "
    "currency symbols). Ignore totals/subtotals, just get the items. "
    'Answer with JSON only: {"items": [{"description": "...", "quantity": 1, "price": 0}]}'
)

DEFAULT_SCAN_SETTINGS = {
    "model": "gpt-4o-mini",
    "base_url": "",
    "api_key_env": "OPENAI_API_KEY",
    "timeout": 60,
}

logger = logging.getLogger(__name__)


class LineItemExtractor(Protocol):
    def extract(self, image_base64: str, prompt: str) -> str:
        """Return JSON text with the extracted {description, quantity, price} objects."""
        ...


def _guess_mime(image_base64: str, default: str = "image/png") -> str:
    try:
        with Image.open(io.BytesIO(base64.b64decode(image_base64))) as img:
            return Image.MIME.get(img.format or "", default)
    except (OSError, ValueError):
        return default


class OpenAIVisionExtractor:
    """Chat-completions vision call returning a JSON object with an `items` list."""

    def __init__(self, client: Any, model: str = DEFAULT_SCAN_SETTINGS["model"]):
        self.client = client
        self.model = model

    def extract(self, image_base64: str, prompt: str) -> str:
        data_url = f"data:{_guess_mime(image_base64)};base64,{image_base64}"
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                }
            ],
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""


def extractor_from_settings(settings: dict, client: Optional[Any] = None) -> OpenAIVisionExtractor:
    """
    Build the extractor from the `scan` settings block.
    The API key is read from the environment variable named by `api_key_env`.
    """
    cfg = {**DEFAULT_SCAN_SETTINGS, **(settings.get("scan") or {})}
    if client is None:
        api_key = os.environ.get(cfg["api_key_env"] or "")
        if not api_key:
            raise ScanImportError(f"API key is missing. Please set {cfg['api_key_env']}.")
        client = OpenAI(api_key=api_key, base_url=cfg["base_url"] or None, timeout=float(cfg["timeout"] or 60))
    return OpenAIVisionExtractor(client, model=cfg["model"] or DEFAULT_SCAN_SETTINGS["model"])


def strip_data_url(value: str) -> str:
    """Drop a `data:image/...;base64,` header if present."""
    head, sep, tail = value.partition(",")
    if sep and head.startswith("data:"):
        return tail
    return value


def parse_extracted_items(text: str) -> list[LineItem]:
    """Accepts a JSON array of items or an object holding it under `items`."""
    if not text or not text.strip():
        return []
    try:
        raw = json.loads(text)
    except ValueError as exc:
        raise ScanImportError(f"Extractor returned invalid JSON: {exc}") from exc
    if isinstance(raw, dict) and isinstance(raw.get("items"), list):
        raw = raw["items"]
    if not isinstance(raw, list):
        raise ScanImportError("Extractor response is not a list of items")
    items: list[LineItem] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            quantity = float(entry.get("quantity") or 1)
            price = float(entry.get("price") or 0)
        except (TypeError, ValueError) as exc:
            raise ScanImportError(f"Invalid number in extracted item {entry!r}") from exc
        items.append(
            LineItem(
                id=str(uuid.uuid4()),
                description=str(entry.get("description") or ""),
                quantity=quantity,
                unit_price=price,
            )
        )
    return items


def scan_invoice_image(image: bytes | str, extractor: LineItemExtractor) -> list[LineItem]:
    """Send an image (raw bytes or base64/data URL text) to the extractor and parse its answer."""
    if isinstance(image, bytes):
        payload = base64.b64encode(image).decode("ascii")
    else:
        payload = strip_data_url(image)
    try:
        text = extractor.extract(payload, SCAN_PROMPT)
    except Exception as exc:
        logger.exception("Line item extraction failed")
        raise ScanImportError(f"Scan failed: {exc}") from exc
    items = parse_extracted_items(text)
    logger.info("Scanned %d line items", len(items))
    return items
