"""Exceptions raised by invoice_maker services and exports."""


class InvoiceMakerError(Exception):
    """Base class for all invoice_maker errors."""


class CaptureError(InvoiceMakerError):
    """The document could not be captured (nothing to render, zero-size bitmap)."""


class RenderError(InvoiceMakerError):
    """The rasterizer failed to draw the document."""


class ExportError(InvoiceMakerError):
    """Assembling or writing the exported file failed."""


class StoreError(InvoiceMakerError):
    """Record store operation failed."""


class ScanImportError(InvoiceMakerError):
    """Line items could not be extracted from a scanned image."""
