from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Callable, Protocol

from PIL import Image

from invoice_maker.core.services.invoice import pdf_filename
from invoice_maker.errors import ExportError
from invoice_maker.utils.pdf.core.builder import PdfImageWriter
from invoice_maker.utils.pdf.core.document import InvoiceDocument, printable
from invoice_maker.utils.pdf.core.pagination import DEFAULT_TOLERANCE_MM, paginate, render_pages
from invoice_maker.utils.pdf.renderers.raster_renderer import InvoiceRasterizer

logger = logging.getLogger(__name__)


class Rasterizer(Protocol):
    def rasterize(self, document: InvoiceDocument, scale: float = 2, background: str = "#ffffff") -> Image.Image: ...


def encode_jpeg(image: Image.Image, quality: int = 95) -> bytes:
    buf = io.BytesIO()
    image.convert("RGB").save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def export_invoice_pdf(
    document: InvoiceDocument,
    out_dir: Path,
    rasterizer: Rasterizer | None = None,
    scale: float = 2,
    jpeg_quality: int = 95,
    tolerance_mm: float = DEFAULT_TOLERANCE_MM,
    writer_factory: Callable[..., PdfImageWriter] = PdfImageWriter,
) -> Path:
    """
    Capture the printable part of `document` and write it as `Invoice-<number>.pdf`
    into `out_dir`, split over as many A4 pages as the capture needs.

    CaptureError and RenderError pass through untouched; failures while
    assembling or writing the PDF are raised as ExportError.
    """
    rasterizer = rasterizer or InvoiceRasterizer()
    with printable(document):
        image = rasterizer.rasterize(document, scale=scale, background="#ffffff")

    layout = paginate(image.width, image.height, tolerance_mm=tolerance_mm)
    target = Path(out_dir) / pdf_filename(document.invoice)
    try:
        image_data = encode_jpeg(image, jpeg_quality)
        writer = writer_factory(orientation="portrait", unit="mm", page_format="a4")
        render_pages(writer, image_data, layout)
        path = writer.save(target)
    except (OSError, ValueError) as exc:
        raise ExportError(f"Failed to write {target.name}: {exc}") from exc
    logger.info("Exported %s (%d page(s), %dx%d px)", path, layout.page_count, image.width, image.height)
    return path
