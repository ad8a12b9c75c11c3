from __future__ import annotations

import base64
import mimetypes
import random
import re
import time
import uuid
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, Optional

from invoice_maker.core.calculations.terbilang import terbilang
from invoice_maker.core.calculations.totals_engine import InvoiceTotals, compute_totals
from invoice_maker.core.models.invoice import (
    ClientInfo,
    CompanyInfo,
    Invoice,
    InvoiceSettings,
    LineItem,
)

# Path separators, Windows-reserved characters and control characters
_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def generate_invoice_number(year: int | None = None, digits: int = 3) -> str:
    """INV-<year>-<random zero-padded number>, e.g. INV-2025-042."""
    year = year or date.today().year
    return f"INV-{year}-{random.randrange(10 ** digits):0{digits}d}"


def new_invoice(settings: dict, user_id: str = "", today: Optional[date] = None) -> Invoice:
    """
    Fresh invoice prefilled from settings (sender, currency, tax, notes).
    Starts with an empty item list.
    """
    today = today or date.today()
    inv_cfg = settings.get("invoice", {}) or {}
    sender_cfg = settings.get("sender", {}) or {}
    due_days = int(inv_cfg.get("due_days", 7) or 0)
    return Invoice(
        id=str(uuid.uuid4()),
        user_id=user_id,
        invoice_number=generate_invoice_number(today.year),
        date=today.isoformat(),
        due_date=(today + timedelta(days=due_days)).isoformat(),
        status="UNPAID",
        sender=CompanyInfo(
            name=sender_cfg.get("name", ""),
            address=sender_cfg.get("address", ""),
            email=sender_cfg.get("email", ""),
            phone=sender_cfg.get("phone", ""),
            logo=sender_cfg.get("logo"),
            website=sender_cfg.get("website"),
        ),
        receiver=ClientInfo(),
        items=[],
        notes=inv_cfg.get("notes", ""),
        settings=InvoiceSettings(
            currency=inv_cfg.get("currency", "IDR"),
            tax_rate=float(inv_cfg.get("tax_rate", 0) or 0),
            brand_color=inv_cfg.get("brand_color", "#2563EB"),
            locale=inv_cfg.get("locale", "id-ID"),
            signature_text=inv_cfg.get("signature_text", ""),
        ),
        created_at=int(time.time() * 1000),
    )


def add_item(invoice: Invoice, description: str = "New Item", quantity: float = 1, unit_price: float = 0) -> LineItem:
    item = LineItem(id=str(uuid.uuid4()), description=description, quantity=quantity, unit_price=unit_price)
    invoice.items.append(item)
    return item


def update_item(invoice: Invoice, item_id: str, **fields) -> LineItem | None:
    """Update fields of the item with `item_id`; unknown ids are ignored."""
    for item in invoice.items:
        if item.id == item_id:
            for key, value in fields.items():
                if key == "id" or key not in LineItem.__dataclass_fields__:
                    continue
                setattr(item, key, value)
            return item
    return None


def remove_item(invoice: Invoice, item_id: str) -> None:
    invoice.items = [item for item in invoice.items if item.id != item_id]


def set_items(invoice: Invoice, items: Iterable[LineItem]) -> None:
    invoice.items = list(items)


def invoice_totals(invoice: Invoice) -> InvoiceTotals:
    return compute_totals(invoice.items, invoice.settings.tax_rate)


def amount_in_words(invoice: Invoice) -> str:
    if invoice.settings.currency != "IDR":
        return ""
    words = terbilang(invoice_totals(invoice).grand_total)
    return f"{words} Rupiah" if words else ""


def pdf_filename(invoice: Invoice) -> str:
    """`Invoice-<number>.pdf`; characters not allowed in file names become `_`."""
    number = _UNSAFE_FILENAME_CHARS.sub("_", invoice.invoice_number or "")
    return f"Invoice-{number}.pdf"


def logo_data_url(path: str | Path) -> str:
    """Read an image file into the `data:<mime>;base64,...` form stored in `sender.logo`."""
    path = Path(path)
    mime = mimetypes.guess_type(path.name)[0] or "image/png"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"
