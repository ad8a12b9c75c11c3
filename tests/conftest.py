import sys
from pathlib import Path

import pytest

# Ensure `src` is importable when running tests from repo root.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def sample_items():
    from invoice_maker.core.models.invoice import LineItem

    return [
        LineItem(id="a", description="Website design", quantity=1, unit_price=5_000_000),
        LineItem(id="b", description="Hosting (12 months)", quantity=12, unit_price=100_000),
    ]


@pytest.fixture
def sample_invoice(sample_items):
    from invoice_maker.core.models.invoice import ClientInfo, CompanyInfo, Invoice, InvoiceSettings

    return Invoice(
        id="inv-1",
        user_id="u1",
        invoice_number="INV-2025-042",
        date="2025-03-01",
        due_date="2025-03-08",
        status="UNPAID",
        sender=CompanyInfo(name="Acme Studio", address="Jl. Sudirman 1, Jakarta", email="billing@acme.id", phone="+62 21 555"),
        receiver=ClientInfo(name="PT Maju Jaya", address="Jl. Thamrin 9", email="finance@maju.id"),
        items=list(sample_items),
        notes="Transfer to BCA 1234567890",
        settings=InvoiceSettings(currency="IDR", tax_rate=11, locale="id-ID"),
        created_at=1_700_000_000_000,
    )


@pytest.fixture
def store(tmp_path):
    from invoice_maker.core.services.record_store import RecordStore

    return RecordStore(tmp_path / "invoices.json")


@pytest.fixture
def user():
    from invoice_maker.core.models.invoice import UserProfile

    return UserProfile(uid="u1", email="alice@example.com")


@pytest.fixture
def admin():
    from invoice_maker.core.models.invoice import UserProfile

    return UserProfile(uid="root", email="admin@example.com")
