import tkinter as tk

import customtkinter as ctk

from invoice_maker.ui.styles import theme


class ActionsBar(ctk.CTkFrame):
    """
    Bottom action bar: new / save / save copy on the left, PDF export on the right.
    """

    def __init__(
        self,
        master: tk.Misc,
        on_new,
        on_save,
        on_save_copy,
        on_pdf,
        row: int = 1,
    ):
        super().__init__(master, fg_color="transparent")
        self.grid(row=row, column=0, columnspan=3, sticky="ew", padx=8, pady=6)

        self.new_btn = ctk.CTkButton(self, text="New invoice", command=on_new)
        self.new_btn.pack(side="left", padx=(0, 6))

        self.save_btn = ctk.CTkButton(self, text="Save", command=on_save, **theme.accent_button_kwargs())
        self.save_btn.pack(side="left", padx=(0, 6))

        self.copy_btn = ctk.CTkButton(self, text="Save as copy", command=on_save_copy)
        self.copy_btn.pack(side="left", padx=(0, 6))

        self.pdf_btn = ctk.CTkButton(self, text="Export PDF", command=on_pdf, **theme.accent_button_kwargs())
        self.pdf_btn.pack(side="right")

        self.mode_label = ctk.CTkLabel(self, text="")
        self.mode_label.pack(side="right", padx=(0, 12))

    def set_editing(self, editing: bool) -> None:
        self.copy_btn.configure(state="normal" if editing else "disabled")
        self.save_btn.configure(text="Update" if editing else "Save")
        self.mode_label.configure(text="Editing saved invoice" if editing else "New invoice")
