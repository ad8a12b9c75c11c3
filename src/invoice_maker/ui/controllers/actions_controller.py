from __future__ import annotations

import logging
from pathlib import Path
from tkinter import filedialog, messagebox

from invoice_maker.core.services.history import export_csv
from invoice_maker.core.services.invoice import new_invoice
from invoice_maker.core.services.scan_import import extractor_from_settings, scan_invoice_image
from invoice_maker.core.services.settings import export_dir, export_options
from invoice_maker.errors import CaptureError, ExportError, RenderError, ScanImportError, StoreError
from invoice_maker.utils.pdf.core.document import build_document
from invoice_maker.utils.pdf.exports.invoice import export_invoice_pdf

logger = logging.getLogger(__name__)


class ActionsController:
    """
    New / save / copy / open / delete of invoices, receipt scanning, and the PDF and CSV exports.
    Holds a reference to the main window so the editing state lives in one place.
    """

    def __init__(self, window) -> None:
        self.w = window

    # --- Records ---
    def new_invoice(self) -> None:
        self.w.set_invoice(new_invoice(self.w.settings, user_id=self.w.user.uid), editing=False)

    def save(self, force_new: bool = False) -> None:
        invoice = self.w.collect_invoice()
        try:
            saved = self.w.store.save_invoice(
                self.w.user, invoice, editing_existing=self.w.editing_existing, force_new=force_new
            )
        except StoreError as exc:
            logger.exception("Saving invoice %s failed", invoice.invoice_number)
            messagebox.showerror("Save invoice", str(exc))
            return
        self.w.set_invoice(saved, editing=True)
        label = "Saved as copy" if force_new else "Saved"
        messagebox.showinfo("Save invoice", f"{label}: {saved.invoice_number}")

    def save_copy(self) -> None:
        self.save(force_new=True)

    def open_invoice(self, invoice_id: str) -> None:
        try:
            invoice = self.w.store.load_invoice(self.w.user, invoice_id)
        except StoreError as exc:
            messagebox.showerror("Open invoice", str(exc))
            return
        self.w.set_invoice(invoice, editing=True)

    def delete_invoice(self, invoice_id: str) -> None:
        if not messagebox.askyesno("Delete invoice", "Delete this invoice permanently?"):
            return
        try:
            self.w.store.delete_invoice(self.w.user, invoice_id)
        except StoreError as exc:
            logger.exception("Deleting invoice %s failed", invoice_id)
            messagebox.showerror("Delete invoice", str(exc))
            return
        if self.w.current_invoice.id == invoice_id:
            self.new_invoice()

    # --- Items ---
    def scan_receipt(self) -> None:
        title = "Scan receipt"
        path = filedialog.askopenfilename(
            title=title,
            filetypes=[("Images", "*.png *.jpg *.jpeg *.webp"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            messagebox.showerror(title, f"Cannot read image:\n{exc}")
            return
        try:
            items = scan_invoice_image(data, extractor_from_settings(self.w.settings))
        except ScanImportError as exc:
            logger.exception("Receipt scan failed")
            messagebox.showerror(title, f"Failed to scan receipt. Please try again or enter items manually.\n{exc}")
            return
        if not items:
            messagebox.showinfo(title, "No line items were found on the image.")
            return
        self.w.replace_items(items)

    # --- Exports ---
    def export_pdf(self) -> None:
        title = "Export PDF"
        folder = filedialog.askdirectory(title=title, initialdir=str(export_dir(self.w.settings)))
        if not folder:
            return
        document = build_document(self.w.collect_invoice())
        try:
            out_path = export_invoice_pdf(
                document,
                Path(folder),
                rasterizer=self.w.rasterizer,
                **export_options(self.w.settings),
            )
        except CaptureError as exc:
            messagebox.showwarning(title, f"Nothing to export:\n{exc}")
            return
        except (RenderError, ExportError) as exc:
            logger.exception("PDF export failed")
            messagebox.showerror(title, f"Failed to generate PDF:\n{exc}")
            return
        messagebox.showinfo(title, f"PDF saved:\n{out_path}")

    def export_history_csv(self) -> None:
        title = "Export CSV"
        invoices = self.w.history_invoices()
        if not invoices:
            messagebox.showwarning(title, "No invoices to export.")
            return
        folder = filedialog.askdirectory(title=title, initialdir=str(export_dir(self.w.settings)))
        if not folder:
            return
        try:
            out_path = export_csv(invoices, Path(folder))
        except OSError as exc:
            logger.exception("CSV export failed")
            messagebox.showerror(title, f"Export failed:\n{exc}")
            return
        messagebox.showinfo(title, f"CSV saved:\n{out_path}")
