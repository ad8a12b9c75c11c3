"""
Split one tall rendered bitmap into A4 pages.

Every page draws the full image, shifted up so the next unseen band lines up
with the page top; the page box clips the rest.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from invoice_maker.errors import CaptureError

# A4 portrait, millimetres
PAGE_W_MM, PAGE_H_MM = 210.0, 297.0

# Overflow below this is scaling noise, not content worth a new page.
DEFAULT_TOLERANCE_MM = 2.0


@dataclass(frozen=True)
class PageSlice:
    page_index: int
    vertical_offset_mm: float


@dataclass(frozen=True)
class PageLayout:
    img_width_mm: float
    img_height_mm: float
    slices: tuple[PageSlice, ...]

    @property
    def page_count(self) -> int:
        return len(self.slices)


class ImagePageWriter(Protocol):
    def add_image_page(self, image_data: bytes, x: float, y: float, width: float, height: float) -> None: ...

    def add_page(self) -> None: ...


def paginate(
    canvas_width_px: int,
    canvas_height_px: int,
    page_width_mm: float = PAGE_W_MM,
    page_height_mm: float = PAGE_H_MM,
    tolerance_mm: float = DEFAULT_TOLERANCE_MM,
) -> PageLayout:
    if canvas_width_px <= 0 or canvas_height_px <= 0:
        raise CaptureError(f"Captured image has no area ({canvas_width_px}x{canvas_height_px} px)")
    if page_height_mm <= 0:
        raise ValueError("page_height_mm must be positive")

    img_width_mm = page_width_mm
    img_height_mm = canvas_height_px * img_width_mm / canvas_width_px

    slices = [PageSlice(page_index=0, vertical_offset_mm=0.0)]
    height_left = img_height_mm - page_height_mm
    while height_left >= tolerance_mm:
        slices.append(PageSlice(page_index=len(slices), vertical_offset_mm=height_left - img_height_mm))
        height_left -= page_height_mm

    return PageLayout(img_width_mm=img_width_mm, img_height_mm=img_height_mm, slices=tuple(slices))


def render_pages(writer: ImagePageWriter, image_data: bytes, layout: PageLayout) -> None:
    """Draw the image once per slice; the writer already holds the first page."""
    for page in layout.slices:
        if page.page_index > 0:
            writer.add_page()
        writer.add_image_page(image_data, 0, page.vertical_offset_mm, layout.img_width_mm, layout.img_height_mm)
