"""
Layout and style constants for the rendered invoice page.
Pixel values are at scale 1 (96 dpi); the rasterizer multiplies them by its scale.
"""

# Page geometry (A4 at 96 dpi)
PAGE_W_PX, PAGE_H_PX = 794, 1123
PADDING = 24

# Bars
TOP_BAR_H = 16
BOTTOM_BAR_H = 32
HINT_H = 36

# Items table
TABLE_HEADER_H = 32
TABLE_ROW_PAD = 8
QTY_COL_W = 80
PRICE_COL_W = 120
TOTAL_COL_W = 120

# Summary box takes this share of the content width, aligned right
SUMMARY_WIDTH_RATIO = 5 / 12
SIGNATURE_W = 180

COLORS = {
    "text": "#111827",
    "body": "#374151",
    "muted": "#6b7280",
    "border": "#e5e7eb",
    "panel": "#f9fafb",
    "hint": "#fef3c7",
    "white": "#ffffff",
}

STATUS_COLORS = {
    "PAID": "#22c55e",
    "UNPAID": "#ef4444",
    "DRAFT": "#9ca3af",
}


def color(name: str) -> str:
    return COLORS.get(name, "#000000")


def hex_to_rgb(value: str, default: str = "#2563EB") -> tuple[int, int, int]:
    raw = (value or "").strip().lstrip("#")
    if len(raw) == 3:
        raw = "".join(ch * 2 for ch in raw)
    try:
        return int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16)
    except ValueError:
        return hex_to_rgb(default) if value != default else (37, 99, 235)
