import base64
import re
from datetime import date

import pytest
from PIL import Image

from invoice_maker.core.services import invoice
from invoice_maker.core.services.settings import DEFAULT_SETTINGS


def test_new_invoice_from_settings(monkeypatch):
    class FakeDate(invoice.date):
        @classmethod
        def today(cls):
            return cls(2025, 3, 1)

    monkeypatch.setattr(invoice, "date", FakeDate)

    inv = invoice.new_invoice(DEFAULT_SETTINGS, user_id="u1")

    assert inv.date == "2025-03-01"
    assert inv.due_date == "2025-03-08"
    assert re.fullmatch(r"INV-2025-\d{3}", inv.invoice_number)
    assert inv.status == "UNPAID"
    assert inv.items == []
    assert inv.user_id == "u1"
    assert inv.sender.name == DEFAULT_SETTINGS["sender"]["name"]
    assert inv.settings.currency == "IDR"
    assert inv.settings.tax_rate == 11
    assert inv.settings.use_status is True


def test_new_invoice_respects_due_days():
    settings = {"invoice": {"due_days": 30, "currency": "USD", "locale": "en-US"}}
    inv = invoice.new_invoice(settings, today=date(2025, 1, 15))
    assert inv.due_date == "2025-02-14"
    assert inv.settings.currency == "USD"


def test_generate_invoice_number_digits():
    assert re.fullmatch(r"INV-2030-\d{4}", invoice.generate_invoice_number(2030, digits=4))


def test_item_operations(sample_invoice):
    item = invoice.add_item(sample_invoice)
    assert item.description == "New Item"
    assert item.quantity == 1
    assert item.unit_price == 0
    assert sample_invoice.items[-1] is item

    updated = invoice.update_item(sample_invoice, item.id, description="Domain", unit_price=150_000, id="hijack", bogus=1)
    assert updated is item
    assert item.id != "hijack"
    assert item.description == "Domain"
    assert item.unit_price == 150_000

    assert invoice.update_item(sample_invoice, "missing", description="x") is None

    before = item.line_total
    assert invoice.update_item(sample_invoice, item.id, line_total=5, quantity=2) is item
    assert item.quantity == 2
    assert item.line_total == before * 2

    invoice.remove_item(sample_invoice, item.id)
    assert item not in sample_invoice.items
    assert len(sample_invoice.items) == 2


def test_set_items_replaces_list(sample_invoice, sample_items):
    invoice.set_items(sample_invoice, sample_items[:1])
    assert [i.id for i in sample_invoice.items] == ["a"]


def test_amount_in_words_for_idr(sample_invoice):
    assert invoice.amount_in_words(sample_invoice) == "Enam Juta Delapan Ratus Delapan Puluh Dua Ribu Rupiah"


def test_amount_in_words_only_for_idr(sample_invoice):
    sample_invoice.settings.currency = "USD"
    assert invoice.amount_in_words(sample_invoice) == ""


def test_amount_in_words_empty_invoice(sample_invoice):
    sample_invoice.items = []
    assert invoice.amount_in_words(sample_invoice) == ""


def test_pdf_filename(sample_invoice):
    assert invoice.pdf_filename(sample_invoice) == "Invoice-INV-2025-042.pdf"


@pytest.mark.parametrize(
    "number, expected",
    [
        ("001/INV/2025", "Invoice-001_INV_2025.pdf"),
        ("../../escaped", "Invoice-.._.._escaped.pdf"),
        ("A\\B:C", "Invoice-A_B_C.pdf"),
        ("", "Invoice-.pdf"),
    ],
)
def test_pdf_filename_replaces_path_characters(sample_invoice, number, expected):
    sample_invoice.invoice_number = number
    assert invoice.pdf_filename(sample_invoice) == expected


def test_logo_data_url_encodes_image_file(tmp_path):
    path = tmp_path / "logo.png"
    Image.new("RGB", (8, 4), "red").save(path)

    url = invoice.logo_data_url(path)

    assert url.startswith("data:image/png;base64,")
    assert base64.b64decode(url.split(",", 1)[1]) == path.read_bytes()


def test_invoice_round_trips_through_dict(sample_invoice):
    restored = type(sample_invoice).from_dict(sample_invoice.to_dict())
    assert restored == sample_invoice
