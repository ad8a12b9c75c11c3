import tkinter as tk
from tkinter import messagebox, ttk
from typing import Callable

import customtkinter as ctk

from invoice_maker.core.calculations.totals_engine import TotalsEngine
from invoice_maker.core.models.invoice import LineItem
from invoice_maker.ui.styles import theme


class ItemDialog(ctk.CTkToplevel):
    """Edit description, quantity and unit price of one line item."""

    def __init__(self, master: tk.Misc, item: LineItem, on_save: Callable[[dict], None]):
        super().__init__(master)
        self.title("Line item")
        self.transient(master)
        self.grab_set()
        self.geometry("420x220")
        self._on_save = on_save

        frame = ctk.CTkFrame(self, fg_color="transparent")
        frame.pack(fill="both", expand=True, padx=16, pady=16)
        frame.columnconfigure(1, weight=1)

        self._desc = tk.StringVar(value=item.description)
        self._qty = tk.StringVar(value=f"{item.quantity:g}")
        self._price = tk.StringVar(value=f"{item.unit_price:g}")
        for row, (label, var) in enumerate((("Description", self._desc), ("Quantity", self._qty), ("Unit price", self._price))):
            ctk.CTkLabel(frame, text=label).grid(row=row, column=0, sticky="w", padx=(0, 8), pady=4)
            ctk.CTkEntry(frame, textvariable=var).grid(row=row, column=1, sticky="ew", pady=4)

        buttons = ctk.CTkFrame(frame, fg_color="transparent")
        buttons.grid(row=3, column=0, columnspan=2, sticky="e", pady=(12, 0))
        ctk.CTkButton(buttons, text="Cancel", command=self.destroy, width=90).pack(side="right", padx=(6, 0))
        ctk.CTkButton(buttons, text="Save", command=self._save, width=90, **theme.accent_button_kwargs()).pack(side="right")

    def _save(self) -> None:
        try:
            qty = float(self._qty.get().strip().replace(",", "."))
            price = float(self._price.get().strip().replace(",", "."))
        except ValueError:
            messagebox.showerror("Line item", "Quantity and price must be numbers.", parent=self)
            return
        self._on_save({"description": self._desc.get().strip(), "quantity": qty, "unit_price": price})
        self.destroy()


class ItemsTable(ctk.CTkFrame):
    """
    Line items of the current invoice with add / edit / remove buttons and an
    optional receipt scan that replaces the list.
    """

    def __init__(
        self,
        master: tk.Misc,
        totals: TotalsEngine,
        on_add: Callable[[], None],
        on_update: Callable[[str, dict], None],
        on_remove: Callable[[str], None],
        on_scan: Callable[[], None] | None = None,
    ):
        super().__init__(master)
        self._totals = totals
        self._on_update = on_update
        self._on_remove = on_remove
        self._items: list[LineItem] = []

        self.columnconfigure(0, weight=1)
        self.rowconfigure(1, weight=1)
        ctk.CTkLabel(self, text="Items", font=("Segoe UI", 12, "bold")).grid(row=0, column=0, sticky="w", padx=8, pady=(8, 4))

        self.tree = ttk.Treeview(self, columns=("desc", "qty", "price", "total"), show="headings", height=6)
        self.tree.heading("desc", text="Description")
        self.tree.heading("qty", text="Qty")
        self.tree.heading("price", text="Price")
        self.tree.heading("total", text="Total")
        self.tree.column("desc", width=200)
        self.tree.column("qty", width=50, anchor="center")
        self.tree.column("price", width=110, anchor="e")
        self.tree.column("total", width=120, anchor="e")
        self.tree.grid(row=1, column=0, sticky="nsew", padx=8)
        self.tree.bind("<Double-Button-1>", lambda _e: self._edit_selected())

        buttons = ctk.CTkFrame(self, fg_color="transparent")
        buttons.grid(row=2, column=0, sticky="ew", padx=8, pady=8)
        ctk.CTkButton(buttons, text="Add item", command=on_add, width=100, **theme.accent_button_kwargs()).pack(side="left")
        ctk.CTkButton(buttons, text="Edit", command=self._edit_selected, width=80).pack(side="left", padx=(6, 0))
        ctk.CTkButton(buttons, text="Remove", command=self._remove_selected, width=80).pack(side="left", padx=(6, 0))
        if on_scan is not None:
            ctk.CTkButton(buttons, text="Scan receipt", command=on_scan, width=110).pack(side="right")

    def refresh(self, items: list[LineItem]) -> None:
        self._items = list(items)
        self.tree.delete(*self.tree.get_children())
        for item in self._items:
            self.tree.insert(
                "",
                tk.END,
                iid=item.id,
                values=(
                    item.description,
                    self._format_qty(item.quantity),
                    self._totals.format(item.unit_price),
                    self._totals.format(item.line_total),
                ),
            )

    def _selected_item(self) -> LineItem | None:
        selection = self.tree.selection()
        if not selection:
            return None
        return next((item for item in self._items if item.id == selection[0]), None)

    def _edit_selected(self) -> None:
        item = self._selected_item()
        if item is None:
            return
        ItemDialog(self, item, on_save=lambda fields: self._on_update(item.id, fields))

    def _remove_selected(self) -> None:
        item = self._selected_item()
        if item is not None:
            self._on_remove(item.id)

    @staticmethod
    def _format_qty(value: float) -> str:
        value = float(value)
        return str(int(value)) if value.is_integer() else f"{value:.2f}"
