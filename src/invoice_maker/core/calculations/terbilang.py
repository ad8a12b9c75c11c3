"""
Indonesian number-to-words ("terbilang") for invoice totals.

Only the integer part is spelled out. Amounts of one trillion (1e12) and more
have no wording and yield an empty string.
"""

from __future__ import annotations

import math

_HURUF = (
    "",
    "Satu",
    "Dua",
    "Tiga",
    "Empat",
    "Lima",
    "Enam",
    "Tujuh",
    "Delapan",
    "Sembilan",
    "Sepuluh",
    "Sebelas",
)


def terbilang(amount: float) -> str:
    """
    >>> terbilang(2021)
    'Dua Ribu Dua Puluh Satu'
    """
    return _spell(amount).strip()


def _spell(n: float) -> str:
    # Every word group carries its own leading space; terbilang() strips the edges.
    if n < 0:
        return " Minus" + _spell(abs(n))
    if n < 12:
        word = _HURUF[math.floor(n)]
        return f" {word}" if word else ""
    if n < 20:
        return _spell(n - 10) + " Belas"
    if n < 100:
        return _spell(math.floor(n / 10)) + " Puluh" + _spell(n % 10)
    if n < 200:
        return " Seratus" + _spell(n - 100)
    if n < 1000:
        return _spell(math.floor(n / 100)) + " Ratus" + _spell(n % 100)
    if n < 2000:
        return " Seribu" + _spell(n - 1000)
    if n < 1_000_000:
        return _spell(math.floor(n / 1000)) + " Ribu" + _spell(n % 1000)
    if n < 1_000_000_000:
        return _spell(math.floor(n / 1_000_000)) + " Juta" + _spell(n % 1_000_000)
    if n < 1_000_000_000_000:
        return _spell(math.floor(n / 1_000_000_000)) + " Milyar" + _spell(n % 1_000_000_000)
    return ""
