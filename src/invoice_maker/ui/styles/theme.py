import tkinter as tk
from tkinter import ttk
from typing import Dict

import customtkinter as ctk

THEMES: Dict[str, dict] = {
    "light": {
        "bg": "#f3f4f6",
        "surface": "#ffffff",
        "panel": "#f9fafb",
        "muted": "#6b7280",
        "text": "#111827",
        "accent": "#2563eb",
        "accent_dim": "#1d4ed8",
        "danger": "#ef4444",
        "border": "#e5e7eb",
    },
    "dark": {
        "bg": "#0f172a",
        "surface": "#111827",
        "panel": "#1f2937",
        "muted": "#9ca3af",
        "text": "#f9fafb",
        "accent": "#06b6d4",
        "accent_dim": "#0891b2",
        "danger": "#f87171",
        "border": "#374151",
    },
}

ACTIVE_THEME = "light"
PALETTE = THEMES[ACTIVE_THEME]


def apply_theme(root: tk.Misc, name: str = "light") -> dict:
    global ACTIVE_THEME, PALETTE
    if name not in THEMES:
        name = "light"
    ACTIVE_THEME = name
    PALETTE = THEMES[name]

    ctk.set_appearance_mode("Light" if name == "light" else "Dark")
    ctk.set_default_color_theme("blue")
    root.configure(fg_color=PALETTE["bg"])  # type: ignore[call-arg]

    style = ttk.Style(root)
    style.theme_use("clam")
    base_font = ("Segoe UI", 10)
    style.configure(
        "Treeview",
        background=PALETTE["surface"],
        fieldbackground=PALETTE["surface"],
        foreground=PALETTE["text"],
        bordercolor=PALETTE["border"],
        rowheight=26,
        font=base_font,
    )
    style.map(
        "Treeview",
        background=[("selected", PALETTE["accent_dim"])],
        foreground=[("selected", "#ffffff")],
    )
    style.configure(
        "Treeview.Heading",
        background=PALETTE["panel"],
        foreground=PALETTE["text"],
        bordercolor=PALETTE["border"],
        relief="flat",
        font=("Segoe UI", 10, "bold"),
    )
    return PALETTE


def accent_button_kwargs(palette: dict | None = None) -> dict:
    palette = palette or PALETTE
    return {"fg_color": palette["accent"], "hover_color": palette["accent_dim"], "text_color": "#ffffff"}
