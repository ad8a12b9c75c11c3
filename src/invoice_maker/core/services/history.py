from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from invoice_maker.core.calculations.totals_engine import compute_totals
from invoice_maker.core.models.invoice import Invoice

CSV_HEADERS = [
    "Invoice Number",
    "Date",
    "Due Date",
    "Sender Name",
    "Client Name",
    "Client Email",
    "Currency",
    "Subtotal",
    "Tax Rate (%)",
    "Tax Amount",
    "Grand Total",
    "Status",
    "Notes",
]

logger = logging.getLogger(__name__)


def filter_history(invoices: Iterable[Invoice], query: str) -> list[Invoice]:
    """Case-insensitive match on invoice number or client name."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(invoices)
    return [
        inv
        for inv in invoices
        if needle in inv.invoice_number.lower() or needle in (inv.receiver.name or "").lower()
    ]


def csv_escape(text: Optional[str]) -> str:
    return '"' + (text or "").replace('"', '""') + '"'


def _plain_number(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def csv_row(invoice: Invoice) -> str:
    totals = compute_totals(invoice.items, invoice.settings.tax_rate)
    return ",".join(
        [
            csv_escape(invoice.invoice_number),
            csv_escape(invoice.date),
            csv_escape(invoice.due_date),
            csv_escape(invoice.sender.name),
            csv_escape(invoice.receiver.name),
            csv_escape(invoice.receiver.email),
            csv_escape(invoice.settings.currency),
            f"{totals.subtotal:.2f}",
            _plain_number(invoice.settings.tax_rate),
            f"{totals.tax_amount:.2f}",
            f"{totals.grand_total:.2f}",
            csv_escape(invoice.status),
            csv_escape(invoice.notes),
        ]
    )


def build_csv(invoices: Iterable[Invoice]) -> str:
    lines = [",".join(CSV_HEADERS)]
    lines.extend(csv_row(inv) for inv in invoices)
    return "\n".join(lines)


def csv_filename(today: Optional[date] = None) -> str:
    return f"invoice_history_{(today or date.today()).isoformat()}.csv"


def export_csv(invoices: Iterable[Invoice], directory: Path, today: Optional[date] = None) -> Path:
    invoices = list(invoices)
    target = Path(directory) / csv_filename(today)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(build_csv(invoices), encoding="utf-8")
    logger.info("Exported %d invoices to %s", len(invoices), target)
    return target
