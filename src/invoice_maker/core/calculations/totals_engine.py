from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from babel.core import Locale, UnknownLocaleError
from babel.numbers import parse_pattern

from invoice_maker.core.models.invoice import LineItem

DEFAULT_LOCALE = "id-ID"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    tax_rate: float  # percent

    @property
    def tax_amount(self) -> float:
        return self.subtotal * self.tax_rate / 100

    @property
    def grand_total(self) -> float:
        return self.subtotal + self.tax_amount


def compute_totals(items: Iterable[LineItem], tax_rate: float) -> InvoiceTotals:
    """
    Sum quantity x unit price over the items and apply the tax rate (percent).
    No rounding; negative rows are summed as entered.
    """
    subtotal = 0.0
    for item in items:
        subtotal += float(item.quantity) * float(item.unit_price)
    return InvoiceTotals(subtotal=subtotal, tax_rate=float(tax_rate))


def _parse_locale(tag: str | None) -> Locale:
    try:
        return Locale.parse((tag or DEFAULT_LOCALE).replace("-", "_"))
    except (UnknownLocaleError, ValueError, TypeError):
        logger.debug("Unknown locale %r, formatting with %s", tag, DEFAULT_LOCALE)
        return Locale.parse(DEFAULT_LOCALE.replace("-", "_"))


def format_currency(amount: float | Decimal, currency: str = "IDR", locale: str = DEFAULT_LOCALE) -> str:
    """
    Locale currency string with 0 to 2 fraction digits (CLDR data via Babel).
    Unknown or half-typed locale tags fall back to DEFAULT_LOCALE.
    """
    loc = _parse_locale(locale)
    pattern = parse_pattern(loc.currency_formats["standard"].pattern)
    pattern.frac_prec = (0, 2)
    return pattern.apply(amount, loc, currency=currency, currency_digits=False)


class TotalsEngine:
    """Binds tax rate, currency and locale of one invoice to the totals helpers."""

    def __init__(self, tax_rate: float = 0.0, currency: str = "IDR", locale: str = DEFAULT_LOCALE):
        self.tax_rate = tax_rate
        self.currency = currency
        self.locale = locale

    def update_settings(self, tax_rate: float, currency: str, locale: str) -> None:
        self.tax_rate = tax_rate
        self.currency = currency
        self.locale = locale

    def summarize(self, items: Iterable[LineItem]) -> InvoiceTotals:
        return compute_totals(items, self.tax_rate)

    def format(self, amount: float) -> str:
        return format_currency(amount, self.currency, self.locale)
