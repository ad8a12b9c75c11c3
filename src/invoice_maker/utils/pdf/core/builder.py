"""
PDF object builder: image-only pages assembled into a minimal PDF byte output.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import List

from PIL import Image

PAGE_FORMATS_MM = {
    "a4": (210.0, 297.0),
    "a5": (148.0, 210.0),
    "letter": (215.9, 279.4),
}

UNIT_TO_PT = {
    "pt": 1.0,
    "mm": 72.0 / 25.4,
    "cm": 72.0 / 2.54,
    "in": 72.0,
}

_COLOR_SPACES = {"RGB": "/DeviceRGB", "L": "/DeviceGray", "CMYK": "/DeviceCMYK"}


@dataclass(frozen=True)
class JpegImage:
    name: str  # XObject resource name, e.g. "/Im1"
    data: bytes
    width: int
    height: int
    color_space: str


def build_pdf_bytes(content_streams: List[str], images: List[JpegImage], page_size=(595.28, 841.89)) -> bytes:
    """
    Given list of page content streams (str) and the JPEG images they reference,
    return ready-to-write PDF bytes. Every page shares the same image resources.
    """
    objs: list[bytes] = []
    next_obj_id = 3

    xobject_refs: list[str] = []
    for image in images:
        header = (
            f"{next_obj_id} 0 obj << /Type /XObject /Subtype /Image /Width {image.width} /Height {image.height} "
            f"/ColorSpace {image.color_space} /BitsPerComponent 8 /Filter /DCTDecode /Length {len(image.data)} >> stream\n"
        ).encode("ascii")
        objs.append(header + image.data + b"\nendstream endobj\n")
        xobject_refs.append(f"{image.name} {next_obj_id} 0 R")
        next_obj_id += 1
    resources = f"<< /XObject << {' '.join(xobject_refs)} >> >>"

    pages_kids: list[int] = []
    for stream in content_streams:
        stream_bytes = stream.encode("ascii")
        content_id = next_obj_id
        page_id = next_obj_id + 1
        pages_kids.append(page_id)
        objs.append(
            f"{content_id} 0 obj << /Length {len(stream_bytes)} >> stream\n".encode("ascii") + stream_bytes + b"\nendstream endobj\n"
        )
        objs.append(
            f"{page_id} 0 obj << /Type /Page /Parent 2 0 R /MediaBox [0 0 {page_size[0]:.2f} {page_size[1]:.2f}] /Contents {content_id} 0 R /Resources {resources} >> endobj\n".encode(
                "ascii"
            )
        )
        next_obj_id += 2

    kids_ref = " ".join(f"{kid} 0 R" for kid in pages_kids)
    pages_obj = f"2 0 obj << /Type /Pages /Count {len(pages_kids)} /Kids [{kids_ref}] >> endobj\n".encode("ascii")
    catalog_obj = b"1 0 obj << /Type /Catalog /Pages 2 0 R >> endobj\n"

    objs = [catalog_obj, pages_obj] + objs

    header = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"
    offsets = [0]
    pdf_body = bytearray()
    current_offset = len(header)
    for obj in objs:
        offsets.append(current_offset)
        pdf_body += obj
        current_offset += len(obj)

    xref_entries = ["0000000000 65535 f \n"] + [_format_xref_entry(off) for off in offsets[1:]]
    xref = ("xref\n0 %d\n" % len(offsets)).encode("ascii") + "".join(xref_entries).encode("ascii")
    startxref = len(header) + len(pdf_body)
    trailer = f"trailer << /Size {len(offsets)} /Root 1 0 R >>\nstartxref\n{startxref}\n%%EOF\n".encode("ascii")

    return header + bytes(pdf_body) + xref + trailer


def _format_xref_entry(offset: int) -> str:
    return f"{offset:010d} 00000 n \n"


class PdfImageWriter:
    """
    Page-by-page writer for raster documents.
    Coordinates are given in `unit` from the top-left page corner; the first
    page exists from the start, further pages come from `add_page()`.
    """

    def __init__(self, orientation: str = "portrait", unit: str = "mm", page_format: str = "a4"):
        if unit not in UNIT_TO_PT:
            raise ValueError(f"Unsupported unit: {unit}")
        if page_format.lower() not in PAGE_FORMATS_MM:
            raise ValueError(f"Unsupported page format: {page_format}")
        width_mm, height_mm = PAGE_FORMATS_MM[page_format.lower()]
        if orientation.lower().startswith("l"):
            width_mm, height_mm = height_mm, width_mm
        self._k = UNIT_TO_PT[unit]
        self.page_size = (width_mm * UNIT_TO_PT["mm"], height_mm * UNIT_TO_PT["mm"])
        self._pages: list[list[str]] = [[]]
        self._images: dict[bytes, JpegImage] = {}

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def add_page(self) -> None:
        self._pages.append([])

    def add_image_page(self, image_data: bytes, x: float, y: float, width: float, height: float) -> None:
        """Draw JPEG `image_data` on the current page with its top-left corner at (x, y)."""
        image = self._register_image(image_data)
        k = self._k
        pdf_x = x * k
        pdf_y = self.page_size[1] - (y + height) * k  # PDF y grows up
        self._pages[-1].append(f"q {width * k:.2f} 0 0 {height * k:.2f} {pdf_x:.2f} {pdf_y:.2f} cm {image.name} Do Q\n")

    def _register_image(self, image_data: bytes) -> JpegImage:
        cached = self._images.get(image_data)
        if cached is not None:
            return cached
        with Image.open(io.BytesIO(image_data)) as img:
            if img.format != "JPEG":
                raise ValueError(f"Expected JPEG image data, got {img.format}")
            color_space = _COLOR_SPACES.get(img.mode)
            if color_space is None:
                raise ValueError(f"Unsupported JPEG color mode: {img.mode}")
            width, height = img.size
        image = JpegImage(f"/Im{len(self._images) + 1}", image_data, width, height, color_space)
        self._images[image_data] = image
        return image

    def to_bytes(self) -> bytes:
        streams = ["".join(ops) for ops in self._pages]
        return build_pdf_bytes(streams, list(self._images.values()), page_size=self.page_size)

    def save(self, filename: str | Path) -> Path:
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_bytes())
        return path
