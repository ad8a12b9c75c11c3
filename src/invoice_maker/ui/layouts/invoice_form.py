import logging
import tkinter as tk
from tkinter import filedialog, messagebox

import customtkinter as ctk

from invoice_maker.core.models.invoice import STATUSES, Invoice
from invoice_maker.core.services.invoice import logo_data_url
from invoice_maker.ui.styles import theme

logger = logging.getLogger(__name__)


class InvoiceForm(ctk.CTkScrollableFrame):
    """
    Editable invoice fields bound to StringVars.
    `load(invoice)` fills the form, `apply_to(invoice)` writes the values back.
    The sender logo is kept as a data URL in `self.logo`.
    """

    def __init__(self, master: tk.Misc, currencies: list[str], on_change):
        super().__init__(master, fg_color=theme.PALETTE["panel"], corner_radius=8)
        self.columnconfigure(1, weight=1)
        self._on_change = on_change
        self._loading = False
        self._row = 0

        self.vars: dict[str, tk.StringVar] = {}
        self.logo: str | None = None

        self._section("Details")
        self._entry("invoice_number", "Invoice no.")
        self._entry("date", "Date")
        self._entry("due_date", "Due date")
        self._combo("status", "Status", list(STATUSES))

        self._section("From")
        self._entry("sender.name", "Company")
        self._entry("sender.address", "Address")
        self._entry("sender.email", "Email")
        self._entry("sender.phone", "Phone")
        self._entry("sender.website", "Website")
        self._logo_row()

        self._section("Bill to")
        self._entry("receiver.name", "Client")
        self._entry("receiver.address", "Address")
        self._entry("receiver.email", "Email")
        self._entry("receiver.phone", "Phone")

        self._section("Settings")
        self._combo("settings.currency", "Currency", currencies)
        self._entry("settings.tax_rate", "Tax rate (%)")
        self._entry("settings.locale", "Locale")
        self._entry("settings.brand_color", "Brand color")
        self._entry("settings.signature_text", "Signature")
        self.use_status = tk.BooleanVar(value=True)
        ctk.CTkCheckBox(self, text="Show status badge", variable=self.use_status, command=self._changed).grid(
            row=self._next_row(), column=1, sticky="w", padx=(4, 8), pady=2
        )

        self._section("Notes")
        self.notes = ctk.CTkTextbox(self, height=80)
        self.notes.grid(row=self._next_row(), column=0, columnspan=2, sticky="ew", padx=8, pady=(0, 8))
        self.notes.bind("<KeyRelease>", lambda _e: self._changed())

        for var in self.vars.values():
            var.trace_add("write", lambda *_: self._changed())

    # --- layout helpers ---
    def _next_row(self) -> int:
        self._row += 1
        return self._row

    def _section(self, title: str) -> None:
        ctk.CTkLabel(self, text=title, font=("Segoe UI", 12, "bold")).grid(
            row=self._next_row(), column=0, columnspan=2, sticky="w", padx=8, pady=(10, 2)
        )

    def _entry(self, key: str, label: str) -> None:
        var = self.vars[key] = tk.StringVar()
        row = self._next_row()
        ctk.CTkLabel(self, text=label).grid(row=row, column=0, sticky="w", padx=8)
        ctk.CTkEntry(self, textvariable=var).grid(row=row, column=1, sticky="ew", padx=(4, 8), pady=2)

    def _combo(self, key: str, label: str, values: list[str]) -> None:
        var = self.vars[key] = tk.StringVar(value=values[0] if values else "")
        row = self._next_row()
        ctk.CTkLabel(self, text=label).grid(row=row, column=0, sticky="w", padx=8)
        ctk.CTkComboBox(self, values=values, variable=var).grid(row=row, column=1, sticky="ew", padx=(4, 8), pady=2)

    def _logo_row(self) -> None:
        row = self._next_row()
        ctk.CTkLabel(self, text="Logo").grid(row=row, column=0, sticky="w", padx=8)
        box = ctk.CTkFrame(self, fg_color="transparent")
        box.grid(row=row, column=1, sticky="ew", padx=(4, 8), pady=2)
        self._logo_status = ctk.CTkLabel(box, text="None")
        self._logo_status.pack(side="left")
        ctk.CTkButton(box, text="Clear", command=self._clear_logo, width=60).pack(side="right")
        ctk.CTkButton(box, text="Upload", command=self._upload_logo, width=70).pack(side="right", padx=(0, 6))

    def _upload_logo(self) -> None:
        path = filedialog.askopenfilename(
            title="Upload logo",
            filetypes=[("Images", "*.png *.jpg *.jpeg *.gif *.bmp *.webp"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            self.logo = logo_data_url(path)
        except OSError as exc:
            logger.exception("Reading logo %s failed", path)
            messagebox.showerror("Upload logo", f"Cannot read image:\n{exc}")
            return
        self._show_logo_status()
        self._changed()

    def _clear_logo(self) -> None:
        self.logo = None
        self._show_logo_status()
        self._changed()

    def _show_logo_status(self) -> None:
        self._logo_status.configure(text="Uploaded" if self.logo else "None")

    def _changed(self) -> None:
        if not self._loading:
            self._on_change()

    # --- data binding ---
    def load(self, invoice: Invoice) -> None:
        self._loading = True
        try:
            for key, var in self.vars.items():
                value = _get_path(invoice, key)
                if key == "settings.tax_rate":
                    value = f"{float(value):g}"
                var.set("" if value is None else str(value))
            self.use_status.set(invoice.settings.use_status)
            self.logo = invoice.sender.logo
            self._show_logo_status()
            self.notes.delete("1.0", tk.END)
            self.notes.insert("1.0", invoice.notes)
        finally:
            self._loading = False

    def apply_to(self, invoice: Invoice) -> None:
        for key, var in self.vars.items():
            value: object = var.get().strip()
            if key == "settings.tax_rate":
                try:
                    value = float(str(value).replace(",", "."))
                except ValueError:
                    value = invoice.settings.tax_rate
            elif key in ("sender.website", "receiver.phone") and not value:
                value = None
            _set_path(invoice, key, value)
        invoice.settings.use_status = bool(self.use_status.get())
        invoice.sender.logo = self.logo
        invoice.notes = self.notes.get("1.0", tk.END).rstrip("\n")


def _get_path(obj, dotted: str):
    for part in dotted.split("."):
        obj = getattr(obj, part)
    return obj


def _set_path(obj, dotted: str, value) -> None:
    *parents, last = dotted.split(".")
    for part in parents:
        obj = getattr(obj, part)
    setattr(obj, last, value)
