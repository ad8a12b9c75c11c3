from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import List, Optional

STATUSES = ("PAID", "UNPAID", "DRAFT")


@dataclass
class LineItem:
    """Single billable row of an invoice."""

    id: str
    description: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0

    @property
    def line_total(self) -> float:
        return float(self.quantity) * float(self.unit_price)


@dataclass
class CompanyInfo:
    name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    logo: Optional[str] = None  # base64
    website: Optional[str] = None


@dataclass
class ClientInfo:
    name: str = ""
    address: str = ""
    email: str = ""
    phone: Optional[str] = None


@dataclass
class InvoiceSettings:
    currency: str = "IDR"
    tax_rate: float = 11.0  # percent
    brand_color: str = "#2563EB"
    locale: str = "id-ID"
    signature_text: str = "Authorized Signature"
    use_status: bool = True


@dataclass
class Invoice:
    id: str
    user_id: str = ""
    invoice_number: str = ""
    date: str = ""
    due_date: str = ""
    status: str = "UNPAID"
    sender: CompanyInfo = field(default_factory=CompanyInfo)
    receiver: ClientInfo = field(default_factory=ClientInfo)
    items: List[LineItem] = field(default_factory=list)
    notes: str = ""
    settings: InvoiceSettings = field(default_factory=InvoiceSettings)
    created_at: int = 0  # epoch milliseconds

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Invoice":
        """
        Build an invoice from a stored record.
        Unknown keys are ignored; records without `use_status` get True.
        """
        data = dict(data or {})
        settings_raw = dict(data.get("settings") or {})
        settings_raw.setdefault("use_status", True)
        items = [_item_from_dict(raw) for raw in data.get("items") or [] if isinstance(raw, dict)]
        return cls(
            id=str(data.get("id") or ""),
            user_id=str(data.get("user_id") or ""),
            invoice_number=str(data.get("invoice_number") or ""),
            date=str(data.get("date") or ""),
            due_date=str(data.get("due_date") or ""),
            status=str(data.get("status") or "UNPAID"),
            sender=CompanyInfo(**_known(CompanyInfo, data.get("sender"))),
            receiver=ClientInfo(**_known(ClientInfo, data.get("receiver"))),
            items=items,
            notes=str(data.get("notes") or ""),
            settings=InvoiceSettings(**_known(InvoiceSettings, settings_raw)),
            created_at=int(data.get("created_at") or 0),
        )


@dataclass(frozen=True)
class UserProfile:
    uid: str
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        # Admins see every user's invoices.
        return "admin" in (self.email or "")


def _known(model: type, raw) -> dict:
    if not isinstance(raw, dict):
        return {}
    names = model.__dataclass_fields__.keys()
    return {k: v for k, v in raw.items() if k in names}


def _item_from_dict(raw: dict) -> LineItem:
    values = _known(LineItem, raw)
    values.setdefault("id", "")
    values["quantity"] = float(values.get("quantity", 1) or 0)
    values["unit_price"] = float(values.get("unit_price", 0) or 0)
    return LineItem(**values)
