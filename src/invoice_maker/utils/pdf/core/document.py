"""
Visual description of an invoice page: an ordered list of elements that the
rasterizer stacks top to bottom. Elements flagged `no_print` appear in the
on-screen preview only.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from invoice_maker.core.models.invoice import Invoice

# Element kinds in page order. "hint" is the preview-only toolbar strip.
ELEMENT_KINDS = ("hint", "top_bar", "header", "bill_to", "items", "summary", "notes", "bottom_bar")


@dataclass
class Element:
    kind: str
    no_print: bool = False
    visible: bool = True


@dataclass
class InvoiceDocument:
    invoice: Invoice
    elements: list[Element] = field(default_factory=list)

    def visible_elements(self) -> list[Element]:
        return [el for el in self.elements if el.visible]


def build_document(invoice: Invoice, preview_hint: bool = True) -> InvoiceDocument:
    elements = [Element(kind) for kind in ELEMENT_KINDS if kind != "hint"]
    if preview_hint:
        elements.insert(0, Element("hint", no_print=True))
    return InvoiceDocument(invoice=invoice, elements=elements)


@contextmanager
def printable(document: InvoiceDocument) -> Iterator[InvoiceDocument]:
    """
    Hide `no_print` elements for the duration of the block.
    Previous visibility is restored once on exit, also when the block raises.
    """
    saved = [(el, el.visible) for el in document.elements if el.no_print]
    for el, _ in saved:
        el.visible = False
    try:
        yield document
    finally:
        for el, was_visible in saved:
            el.visible = was_visible
