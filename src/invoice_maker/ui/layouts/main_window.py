import logging
import tkinter as tk

import customtkinter as ctk

from invoice_maker.core.calculations.totals_engine import TotalsEngine
from invoice_maker.core.models.invoice import Invoice, UserProfile
from invoice_maker.core.services import invoice as invoice_service
from invoice_maker.core.services.invoice import new_invoice
from invoice_maker.core.services.record_store import RecordStore
from invoice_maker.ui.components.history_panel import HistoryPanel
from invoice_maker.ui.components.items_table import ItemsTable
from invoice_maker.ui.components.preview_panel import PreviewPanel
from invoice_maker.ui.controllers.actions_controller import ActionsController
from invoice_maker.ui.layouts.actions_bar import ActionsBar
from invoice_maker.ui.layouts.invoice_form import InvoiceForm
from invoice_maker.ui.styles import theme
from invoice_maker.utils.pdf.core.document import build_document
from invoice_maker.utils.pdf.renderers.raster_renderer import InvoiceRasterizer

logger = logging.getLogger(__name__)

PREVIEW_DELAY_MS = 400


class MainWindow(ctk.CTk):
    def __init__(self, settings: dict, store: RecordStore, user: UserProfile):
        super().__init__()
        self._palette = theme.apply_theme(self, "light")
        self._title_base = "Invoice Maker"
        self.title(self._title_base)
        self.geometry("1360x820")
        self.minsize(1000, 640)

        self.settings = settings
        self.store = store
        self.user = user
        self.rasterizer = InvoiceRasterizer()
        self.current_invoice: Invoice = new_invoice(settings, user_id=user.uid)
        self.editing_existing = False
        self._history: list[Invoice] = []
        self._preview_after_id: str | None = None
        self._totals = TotalsEngine()

        self.columnconfigure(0, weight=0, minsize=340)
        self.columnconfigure(1, weight=1)
        self.columnconfigure(2, weight=1)
        self.rowconfigure(0, weight=1)

        self._actions = ActionsController(self)

        self.form = InvoiceForm(self, list(settings.get("currencies") or ["IDR"]), on_change=self._on_form_change)
        self.form.grid(row=0, column=0, sticky="nsew", padx=(8, 4), pady=8)

        middle = ctk.CTkFrame(self, fg_color="transparent")
        middle.grid(row=0, column=1, sticky="nsew", padx=4, pady=8)
        middle.columnconfigure(0, weight=1)
        middle.rowconfigure(0, weight=1)
        middle.rowconfigure(2, weight=1)

        self.items_table = ItemsTable(
            middle,
            self._totals,
            on_add=self._add_item,
            on_update=self._update_item,
            on_remove=self._remove_item,
            on_scan=self._actions.scan_receipt,
        )
        self.items_table.grid(row=0, column=0, sticky="nsew")

        summary = ctk.CTkFrame(middle, fg_color=self._palette["panel"], corner_radius=8)
        summary.grid(row=1, column=0, sticky="ew", pady=8)
        summary.columnconfigure(1, weight=1)
        self._summary_vars = {key: tk.StringVar() for key in ("subtotal", "tax", "total", "words")}
        for row, (key, label) in enumerate((("subtotal", "Subtotal"), ("tax", "Tax"), ("total", "Total"))):
            ctk.CTkLabel(summary, text=label).grid(row=row, column=0, sticky="w", padx=8)
            ctk.CTkLabel(summary, textvariable=self._summary_vars[key]).grid(row=row, column=1, sticky="e", padx=8)
        ctk.CTkLabel(summary, textvariable=self._summary_vars["words"], wraplength=360, justify="left").grid(
            row=3, column=0, columnspan=2, sticky="w", padx=8, pady=(0, 6)
        )

        self.history = HistoryPanel(
            middle,
            on_open=self._actions.open_invoice,
            on_delete=self._actions.delete_invoice,
            on_export_csv=self._actions.export_history_csv,
        )
        self.history.grid(row=2, column=0, sticky="nsew")

        self.preview = PreviewPanel(self, self.rasterizer)
        self.preview.grid(row=0, column=2, sticky="nsew", padx=(4, 8), pady=8)

        self.actions = ActionsBar(
            self,
            on_new=self._actions.new_invoice,
            on_save=self._actions.save,
            on_save_copy=self._actions.save_copy,
            on_pdf=self._actions.export_pdf,
            row=1,
        )

        self._unsubscribe = store.subscribe(user, self._on_history)
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self.set_invoice(self.current_invoice, editing=False)

    # --- state ---
    def set_invoice(self, invoice: Invoice, editing: bool) -> None:
        self.current_invoice = invoice
        self.editing_existing = editing
        self.form.load(invoice)
        self.actions.set_editing(editing)
        self.refresh()

    def collect_invoice(self) -> Invoice:
        self.form.apply_to(self.current_invoice)
        return self.current_invoice

    def history_invoices(self) -> list[Invoice]:
        return list(self._history)

    def _on_history(self, invoices: list[Invoice]) -> None:
        self._history = invoices
        self.history.set_invoices(invoices)

    # --- items ---
    def _add_item(self) -> None:
        invoice_service.add_item(self.collect_invoice())
        self.refresh()

    def _update_item(self, item_id: str, fields: dict) -> None:
        invoice_service.update_item(self.collect_invoice(), item_id, **fields)
        self.refresh()

    def _remove_item(self, item_id: str) -> None:
        invoice_service.remove_item(self.collect_invoice(), item_id)
        self.refresh()

    def replace_items(self, items: list) -> None:
        invoice_service.set_items(self.collect_invoice(), items)
        self.refresh()

    # --- rendering ---
    def _on_form_change(self) -> None:
        self.collect_invoice()
        self.refresh()

    def refresh(self) -> None:
        invoice = self.current_invoice
        cfg = invoice.settings
        self._totals.update_settings(cfg.tax_rate, cfg.currency, cfg.locale)
        self.items_table.refresh(invoice.items)
        totals = self._totals.summarize(invoice.items)
        self._summary_vars["subtotal"].set(self._totals.format(totals.subtotal))
        self._summary_vars["tax"].set(f"{self._totals.format(totals.tax_amount)} ({cfg.tax_rate:g}%)")
        self._summary_vars["total"].set(self._totals.format(totals.grand_total))
        self._summary_vars["words"].set(invoice_service.amount_in_words(invoice))
        self._update_title()
        self._schedule_preview()

    def _schedule_preview(self) -> None:
        # Typing triggers many refreshes; render once input settles.
        if self._preview_after_id is not None:
            self.after_cancel(self._preview_after_id)
        self._preview_after_id = self.after(PREVIEW_DELAY_MS, self._render_preview)

    def _render_preview(self) -> None:
        self._preview_after_id = None
        self.preview.show(build_document(self.current_invoice, preview_hint=True))

    def _update_title(self) -> None:
        number = self.current_invoice.invoice_number or "new"
        mode = "edit" if self.editing_existing else "new"
        self.title(f"{self._title_base} - {number} ({mode})")

    def _on_close(self) -> None:
        self._unsubscribe()
        logger.info("Closing main window")
        self.destroy()
