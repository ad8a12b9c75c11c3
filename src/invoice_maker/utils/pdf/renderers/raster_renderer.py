"""
Rasterizer: draws an InvoiceDocument into one tall Pillow image.

Each visible element is laid out into a list of drawing ops plus its height;
the ops are then painted top to bottom onto a canvas sized to fit them all.
A short document is stretched to one A4 page with the notes/footer group
pushed to the bottom.
"""

from __future__ import annotations

import base64
import io
import math
from dataclasses import dataclass, field
from typing import Any

from PIL import Image, ImageDraw

from invoice_maker.core.calculations.terbilang import terbilang
from invoice_maker.core.calculations.totals_engine import compute_totals, format_currency
from invoice_maker.core.models.invoice import Invoice
from invoice_maker.errors import CaptureError, RenderError
from invoice_maker.utils.pdf.core.document import Element, InvoiceDocument
from invoice_maker.utils.pdf.core.fonts import FontSet
from invoice_maker.utils.pdf.core.layout_common import (
    BOTTOM_BAR_H,
    HINT_H,
    PADDING,
    PAGE_H_PX,
    PAGE_W_PX,
    PRICE_COL_W,
    QTY_COL_W,
    SIGNATURE_W,
    STATUS_COLORS,
    SUMMARY_WIDTH_RATIO,
    TABLE_HEADER_H,
    TABLE_ROW_PAD,
    TOP_BAR_H,
    TOTAL_COL_W,
    color,
    hex_to_rgb,
)


@dataclass
class _Section:
    kind: str
    height: float
    ops: list[tuple[Any, ...]] = field(default_factory=list)


def _format_qty(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else f"{value:g}"


class InvoiceRasterizer:
    def __init__(self, fonts: FontSet | None = None):
        self.fonts = fonts or FontSet()

    def rasterize(self, document: InvoiceDocument | None, scale: float = 2, background: str = "#ffffff") -> Image.Image:
        if document is None:
            raise CaptureError("Invoice document not found")
        elements = document.visible_elements()
        if not elements:
            raise CaptureError("Invoice document has nothing visible to capture")
        try:
            return self._render(document.invoice, elements, scale, background)
        except (OSError, ValueError) as exc:
            raise RenderError(f"Failed to render invoice: {exc}") from exc

    def _render(self, invoice: Invoice, elements: list[Element], scale: float, background: str) -> Image.Image:
        layout = _SectionLayout(invoice, self.fonts, scale)
        sections = [layout.build(el.kind) for el in elements]

        total = sum(sec.height for sec in sections)
        min_height = PAGE_H_PX * scale
        if total < min_height and sections:
            # Keep notes + footer at the page bottom.
            anchor = next((i for i, sec in enumerate(sections) if sec.kind == "notes"), len(sections) - 1)
            sections.insert(anchor, _Section("spacer", min_height - total))
            total = min_height

        width = int(round(PAGE_W_PX * scale))
        image = Image.new("RGB", (width, int(math.ceil(total))), background)
        draw = ImageDraw.Draw(image)
        y = 0.0
        for section in sections:
            _paint(image, draw, section.ops, y)
            y += section.height
        return image


def _paint(image: Image.Image, draw: ImageDraw.ImageDraw, ops: list[tuple[Any, ...]], dy: float) -> None:
    for op in ops:
        kind = op[0]
        if kind == "rect":
            _, (x0, y0, x1, y1), fill, outline, width = op
            draw.rectangle((x0, y0 + dy, x1, y1 + dy), fill=fill, outline=outline, width=width)
        elif kind == "rrect":
            _, (x0, y0, x1, y1), radius, fill, outline, width = op
            draw.rounded_rectangle((x0, y0 + dy, x1, y1 + dy), radius=radius, fill=fill, outline=outline, width=width)
        elif kind == "line":
            _, (x0, y0, x1, y1), fill, width = op
            draw.line((x0, y0 + dy, x1, y1 + dy), fill=fill, width=width)
        elif kind == "text":
            _, (x, y), text, font, fill = op
            draw.text((x, y + dy), text, font=font, fill=fill)
        elif kind == "image":
            _, (x, y), picture = op
            mask = picture if picture.mode == "RGBA" else None
            image.paste(picture, (int(x), int(y + dy)), mask)


class _SectionLayout:
    """Builds the drawing ops of each element kind in scaled pixels."""

    def __init__(self, invoice: Invoice, fonts: FontSet, scale: float):
        self.inv = invoice
        self.fonts = fonts
        self.s = scale
        self.width = PAGE_W_PX * scale
        self.pad = PADDING * scale
        self.brand = hex_to_rgb(invoice.settings.brand_color)
        self.totals = compute_totals(invoice.items, invoice.settings.tax_rate)
        self._measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))

    # --- helpers ---
    def u(self, value: float) -> float:
        return value * self.s

    def font(self, size: int, bold: bool = False):
        return self.fonts.get(int(round(size * self.s)), bold)

    def line_h(self, size: int) -> float:
        return self.u(size * 1.4)

    def text_w(self, text: str, font) -> float:
        return self._measure.textlength(text, font=font)

    def money(self, amount: float) -> str:
        return format_currency(amount, self.inv.settings.currency, self.inv.settings.locale)

    def wrap(self, text: str, font, max_width: float) -> list[str]:
        lines: list[str] = []
        for para in (text or "").splitlines() or [""]:
            words = para.split()
            if not words:
                lines.append("")
                continue
            current = words[0]
            for word in words[1:]:
                trial = f"{current} {word}"
                if self.text_w(trial, font) <= max_width:
                    current = trial
                else:
                    lines.append(current)
                    current = word
            lines.append(current)
        return lines

    def text_block(self, ops: list, lines: list[str], x: float, y: float, size: int, fill, bold: bool = False, right: bool = False) -> float:
        """Append text lines at (x, y) (right edge when `right`); return y below the block."""
        font = self.font(size, bold)
        for line in lines:
            tx = x - self.text_w(line, font) if right else x
            ops.append(("text", (tx, y), line, font, fill))
            y += self.line_h(size)
        return y

    def build(self, kind: str) -> _Section:
        builder = getattr(self, f"_build_{kind}", None)
        if builder is None:
            raise ValueError(f"Unknown document element: {kind}")
        return builder()

    # --- elements ---
    def _build_hint(self) -> _Section:
        h = self.u(HINT_H)
        ops = [
            ("rect", (0, 0, self.width, h), color("hint"), None, 0),
            ("text", (self.pad, self.u(10)), "Preview - this bar is not printed", self.font(12), color("muted")),
        ]
        return _Section("hint", h, ops)

    def _build_top_bar(self) -> _Section:
        h = self.u(TOP_BAR_H)
        return _Section("top_bar", h, [("rect", (0, 0, self.width, h), self.brand, None, 0)])

    def _build_header(self) -> _Section:
        ops: list = []
        sender = self.inv.sender
        left_x = self.pad
        y = self.pad

        logo = _decode_logo(sender.logo, max_w=self.u(180), max_h=self.u(64))
        if logo is not None:
            ops.append(("image", (left_x, y), logo))
            y += logo.height + self.u(12)
        else:
            ops.append(("text", (left_x, y), "LOGO", self.font(20, bold=True), color("border")))
            y += self.u(48)

        col_w = self.width / 2 - self.pad
        y = self.text_block(ops, self.wrap(sender.name, self.font(20, True), col_w), left_x, y, 20, color("text"), bold=True)
        info = self.wrap(sender.address, self.font(12), col_w)
        info += [line for line in (sender.email, sender.phone) if line]
        left_bottom = self.text_block(ops, info, left_x, y + self.u(4), 12, color("muted"))

        right_x = self.width - self.pad
        ry = self.pad
        ry = self.text_block(ops, ["INVOICE"], right_x, ry, 40, self.brand, bold=True, right=True)
        ry = self.text_block(ops, [f"#{self.inv.invoice_number}"], right_x, ry + self.u(4), 16, color("text"), bold=True, right=True)
        ry += self.u(8)
        label_font = self.font(12)
        for label, value in (("Date:", self.inv.date), ("Due Date:", self.inv.due_date)):
            value_font = self.font(12, bold=True)
            value_w = self.text_w(value, value_font)
            ops.append(("text", (right_x - value_w, ry), value, value_font, color("text")))
            ops.append(("text", (right_x - value_w - self.u(110), ry), label, label_font, color("muted")))
            ry += self.line_h(12)

        if self.inv.settings.use_status:
            status = self.inv.status
            badge_color = STATUS_COLORS.get(status, STATUS_COLORS["DRAFT"])
            badge_font = self.font(13, bold=True)
            badge_w = self.text_w(status, badge_font) + self.u(40)
            top = ry + self.u(10)
            bottom = top + self.u(28)
            ops.append(("rrect", (right_x - badge_w, top, right_x, bottom), self.u(6), None, badge_color, max(1, int(self.u(2)))))
            ops.append(("text", (right_x - badge_w + self.u(20), top + self.u(6)), status, badge_font, badge_color))
            ry = bottom

        return _Section("header", max(left_bottom, ry) + self.u(16), ops)

    def _build_bill_to(self) -> _Section:
        ops: list = []
        receiver = self.inv.receiver
        x0, x1 = self.pad, self.width - self.pad
        inner = x0 + self.u(16)
        y = self.u(16)
        y = self.text_block(ops, ["BILL TO"], inner, y, 10, self.brand, bold=True)
        y = self.text_block(ops, [receiver.name or "Client Name"], inner, y, 16, color("text"), bold=True)
        lines = self.wrap(receiver.address or "Client Address", self.font(12), x1 - inner - self.u(16))
        if receiver.email:
            lines.append(receiver.email)
        y = self.text_block(ops, lines, inner, y, 12, color("body"))
        bottom = y + self.u(12)
        box = ("rrect", (x0, 0, x1, bottom), self.u(16), color("panel"), color("border"), max(1, int(self.u(2))))
        return _Section("bill_to", bottom + self.u(16), [box] + ops)

    def _build_items(self) -> _Section:
        ops: list = []
        x0, x1 = self.pad, self.width - self.pad
        total_r = x1 - self.u(12)
        price_r = total_r - self.u(TOTAL_COL_W)
        qty_c = price_r - self.u(PRICE_COL_W) - self.u(QTY_COL_W) / 2
        desc_w = qty_c - self.u(QTY_COL_W) / 2 - x0 - self.u(24)

        header_h = self.u(TABLE_HEADER_H)
        head_font = self.font(11, bold=True)
        ops.append(("rect", (x0, 0, x1, header_h), self.brand, None, 0))
        text_y = (header_h - self.u(11)) / 2
        ops.append(("text", (x0 + self.u(12), text_y), "DESCRIPTION", head_font, color("white")))
        ops.append(("text", (qty_c - self.text_w("QTY", head_font) / 2, text_y), "QTY", head_font, color("white")))
        ops.append(("text", (price_r - self.text_w("PRICE", head_font), text_y), "PRICE", head_font, color("white")))
        ops.append(("text", (total_r - self.text_w("TOTAL", head_font), text_y), "TOTAL", head_font, color("white")))

        y = header_h
        body_font = self.font(12)
        bold_font = self.font(12, bold=True)
        for idx, item in enumerate(self.inv.items):
            lines = self.wrap(item.description, body_font, desc_w)
            row_h = len(lines) * self.line_h(12) + 2 * self.u(TABLE_ROW_PAD)
            fill = color("white") if idx % 2 == 0 else color("panel")
            ops.append(("rect", (x0, y, x1, y + row_h), fill, None, 0))
            ops.append(("line", (x0, y + row_h, x1, y + row_h), color("border"), max(1, int(self.u(1)))))
            ty = y + self.u(TABLE_ROW_PAD)
            self.text_block(ops, lines, x0 + self.u(12), ty, 12, color("body"))
            qty = _format_qty(item.quantity)
            ops.append(("text", (qty_c - self.text_w(qty, body_font) / 2, ty), qty, body_font, color("body")))
            price = self.money(item.unit_price)
            ops.append(("text", (price_r - self.text_w(price, body_font), ty), price, body_font, color("muted")))
            line_total = self.money(item.line_total)
            ops.append(("text", (total_r - self.text_w(line_total, bold_font), ty), line_total, bold_font, color("text")))
            y += row_h
        return _Section("items", y + self.u(16), ops)

    def _build_summary(self) -> _Section:
        ops: list = []
        settings = self.inv.settings
        x1 = self.width - self.pad
        x0 = x1 - (self.width - 2 * self.pad) * SUMMARY_WIDTH_RATIO
        inner_l, inner_r = x0 + self.u(16), x1 - self.u(16)
        y = self.u(12)

        rows = (
            ("Subtotal", self.money(self.totals.subtotal)),
            (f"Tax ({_format_qty(settings.tax_rate)}%)", self.money(self.totals.tax_amount)),
        )
        for label, value in rows:
            ops.append(("text", (inner_l, y), label, self.font(12), color("body")))
            value_font = self.font(12, bold=True)
            ops.append(("text", (inner_r - self.text_w(value, value_font), y), value, value_font, color("text")))
            y += self.line_h(12) + self.u(4)
            ops.append(("line", (inner_l, y, inner_r, y), color("border"), max(1, int(self.u(1)))))
            y += self.u(6)

        total_text = self.money(self.totals.grand_total)
        ops.append(("text", (inner_l, y + self.u(4)), "Total", self.font(16, bold=True), color("text")))
        total_font = self.font(20, bold=True)
        ops.append(("text", (inner_r - self.text_w(total_text, total_font), y), total_text, total_font, self.brand))
        y += self.line_h(20) + self.u(4)

        if settings.currency == "IDR":
            words = terbilang(self.totals.grand_total)
            if words:
                ops.append(("line", (inner_l, y, inner_r, y), color("border"), max(1, int(self.u(1)))))
                y += self.u(6)
                lines = self.wrap(f"{words} Rupiah", self.font(11), inner_r - inner_l)
                y = self.text_block(ops, lines, inner_r, y, 11, color("muted"), right=True)

        bottom = y + self.u(12)
        box = ("rrect", (x0, 0, x1, bottom), self.u(16), color("panel"), color("border"), max(1, int(self.u(1))))
        return _Section("summary", bottom + self.u(16), [box] + ops)

    def _build_notes(self) -> _Section:
        ops: list = []
        x0, x1 = self.pad, self.width - self.pad
        sig_l = x1 - self.u(SIGNATURE_W)
        notes_r = sig_l - self.u(24)

        y = self.text_block(ops, ["NOTES & PAYMENT INFO"], x0, 0, 10, self.brand, bold=True) + self.u(4)
        lines = self.wrap(self.inv.notes, self.font(12), notes_r - x0 - self.u(16))
        notes_bottom = self.text_block(ops, lines, x0 + self.u(16), y + self.u(8), 12, color("body")) + self.u(8)
        ops.append(("rect", (x0, y, x0 + self.u(4), notes_bottom), self.brand, None, 0))

        sy = self.u(56)
        ops.append(("line", (sig_l, sy, x1, sy), self.brand, max(1, int(self.u(2)))))
        sy += self.u(8)
        center = (sig_l + x1) / 2
        sig_font = self.font(12, bold=True)
        signature = self.inv.settings.signature_text
        ops.append(("text", (center - self.text_w(signature, sig_font) / 2, sy), signature, sig_font, color("text")))
        sy += self.line_h(12)
        name_font = self.font(11)
        ops.append(("text", (center - self.text_w(self.inv.sender.name, name_font) / 2, sy), self.inv.sender.name, name_font, color("muted")))
        sy += self.line_h(11)

        return _Section("notes", max(notes_bottom, sy) + self.u(16), ops)

    def _build_bottom_bar(self) -> _Section:
        h = self.u(BOTTOM_BAR_H)
        ops: list = [("rect", (0, 0, self.width, h), self.brand, None, 0)]
        ty = (h - self.u(11)) / 2
        website = self.inv.sender.website or ""
        if website:
            ops.append(("text", (self.pad, ty), website, self.font(11), color("white")))
        credit = "Powered by Invoice Maker"
        credit_font = self.font(11, bold=True)
        ops.append(("text", (self.width - self.pad - self.text_w(credit, credit_font), ty), credit, credit_font, color("white")))
        return _Section("bottom_bar", h, ops)


def _decode_logo(logo: str | None, max_w: float, max_h: float) -> Image.Image | None:
    """Decode a base64 (or data URL) logo and fit it into max_w x max_h; None when unusable."""
    if not logo:
        return None
    raw = logo.split(",", 1)[1] if logo.startswith("data:") and "," in logo else logo
    try:
        picture = Image.open(io.BytesIO(base64.b64decode(raw)))
        picture.load()
    except (OSError, ValueError):
        return None
    picture = picture.convert("RGBA")
    picture.thumbnail((max(1, int(max_w)), max(1, int(max_h))))
    return picture
