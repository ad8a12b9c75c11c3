import tkinter as tk
from tkinter import ttk
from typing import Callable

import customtkinter as ctk

from invoice_maker.core.calculations.totals_engine import compute_totals, format_currency
from invoice_maker.core.models.invoice import Invoice
from invoice_maker.core.services.history import filter_history


class HistoryPanel(ctk.CTkFrame):
    """
    Saved invoices of the signed-in user, newest first, with a search box.
    """

    def __init__(
        self,
        master: tk.Misc,
        on_open: Callable[[str], None],
        on_delete: Callable[[str], None],
        on_export_csv: Callable[[], None],
    ):
        super().__init__(master)
        self._on_open = on_open
        self._on_delete = on_delete
        self._invoices: list[Invoice] = []

        self.columnconfigure(0, weight=1)
        self.rowconfigure(2, weight=1)
        ctk.CTkLabel(self, text="History", font=("Segoe UI", 12, "bold")).grid(row=0, column=0, sticky="w", padx=8, pady=(8, 4))

        self._query = tk.StringVar()
        search = ctk.CTkEntry(self, textvariable=self._query, placeholder_text="Search number or client")
        search.grid(row=1, column=0, sticky="ew", padx=8)
        search.bind("<KeyRelease>", lambda _e: self._render())

        self.tree = ttk.Treeview(self, columns=("number", "client", "status", "total"), show="headings")
        for col, text, width, anchor in (
            ("number", "Number", 110, "w"),
            ("client", "Client", 140, "w"),
            ("status", "Status", 70, "center"),
            ("total", "Total", 120, "e"),
        ):
            self.tree.heading(col, text=text)
            self.tree.column(col, width=width, anchor=anchor)
        self.tree.grid(row=2, column=0, sticky="nsew", padx=8, pady=(6, 0))
        self.tree.bind("<Double-Button-1>", lambda _e: self._open_selected())

        self._empty_label = ctk.CTkLabel(self, text="No invoices saved yet.")

        buttons = ctk.CTkFrame(self, fg_color="transparent")
        buttons.grid(row=4, column=0, sticky="ew", padx=8, pady=8)
        ctk.CTkButton(buttons, text="Open", command=self._open_selected, width=80).pack(side="left")
        ctk.CTkButton(buttons, text="Delete", command=self._delete_selected, width=80).pack(side="left", padx=(6, 0))
        ctk.CTkButton(buttons, text="Export CSV", command=on_export_csv, width=100).pack(side="right")

    def set_invoices(self, invoices: list[Invoice]) -> None:
        self._invoices = list(invoices)
        self._render()

    def _render(self) -> None:
        self.tree.delete(*self.tree.get_children())
        visible = filter_history(self._invoices, self._query.get())
        for inv in visible:
            total = compute_totals(inv.items, inv.settings.tax_rate).grand_total
            self.tree.insert(
                "",
                tk.END,
                iid=inv.id,
                values=(inv.invoice_number, inv.receiver.name, inv.status, format_currency(total, inv.settings.currency, inv.settings.locale)),
            )
        if visible:
            self._empty_label.grid_remove()
        else:
            self._empty_label.grid(row=3, column=0, sticky="w", padx=8)

    def _selected_id(self) -> str | None:
        selection = self.tree.selection()
        return selection[0] if selection else None

    def _open_selected(self) -> None:
        invoice_id = self._selected_id()
        if invoice_id:
            self._on_open(invoice_id)

    def _delete_selected(self) -> None:
        invoice_id = self._selected_id()
        if invoice_id:
            self._on_delete(invoice_id)
