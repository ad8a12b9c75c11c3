import tkinter as tk

import customtkinter as ctk

from invoice_maker.errors import InvoiceMakerError
from invoice_maker.utils.pdf.core.document import InvoiceDocument
from invoice_maker.utils.pdf.renderers.raster_renderer import InvoiceRasterizer

PREVIEW_WIDTH = 520


class PreviewPanel(ctk.CTkScrollableFrame):
    """Live on-screen rendering of the invoice document, preview-only bar included."""

    def __init__(self, master: tk.Misc, rasterizer: InvoiceRasterizer):
        super().__init__(master, label_text="Preview")
        self._rasterizer = rasterizer
        self._image: ctk.CTkImage | None = None
        self._label = ctk.CTkLabel(self, text="")
        self._label.pack(fill="both", expand=True, padx=4, pady=4)

    def show(self, document: InvoiceDocument) -> None:
        try:
            rendered = self._rasterizer.rasterize(document, scale=1)
        except InvoiceMakerError as exc:
            self._label.configure(image=None, text=f"Preview unavailable: {exc}")
            return
        height = int(rendered.height * PREVIEW_WIDTH / rendered.width)
        self._image = ctk.CTkImage(light_image=rendered, dark_image=rendered, size=(PREVIEW_WIDTH, height))
        self._label.configure(image=self._image, text="")
