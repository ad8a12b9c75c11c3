import json
import re
import uuid

import pytest

from invoice_maker.core.models.invoice import UserProfile
from invoice_maker.core.services.record_store import RecordStore
from invoice_maker.errors import StoreError


def test_empty_store_lists_nothing(store, user):
    assert store.list_invoices(user) == []


def test_save_new_invoice_assigns_fresh_id(store, user, sample_invoice):
    saved = store.save_invoice(user, sample_invoice)

    assert saved.id != sample_invoice.id
    assert saved.user_id == "u1"
    assert saved.invoice_number == sample_invoice.invoice_number
    assert [inv.id for inv in store.list_invoices(user)] == [saved.id]


def test_save_does_not_mutate_the_edited_invoice(store, user, sample_invoice):
    store.save_invoice(user, sample_invoice)
    assert sample_invoice.id == "inv-1"
    assert sample_invoice.user_id == "u1"


def test_update_keeps_id(store, user, sample_invoice):
    saved = store.save_invoice(user, sample_invoice)
    saved.status = "PAID"

    updated = store.save_invoice(user, saved, editing_existing=True)

    assert updated.id == saved.id
    invoices = store.list_invoices(user)
    assert len(invoices) == 1
    assert invoices[0].status == "PAID"


def test_save_as_copy_gets_new_id_and_number(store, user, sample_invoice):
    saved = store.save_invoice(user, sample_invoice)

    copied = store.save_invoice(user, saved, editing_existing=True, force_new=True)

    assert copied.id != saved.id
    assert re.fullmatch(r"INV-\d{4}-\d{4}", copied.invoice_number)
    assert copied.created_at >= saved.created_at
    assert len(store.list_invoices(user)) == 2


def test_save_requires_user(store, sample_invoice):
    with pytest.raises(StoreError):
        store.save_invoice(None, sample_invoice)


def test_list_is_newest_first(store, user, sample_invoice):
    sample_invoice.created_at = 1000
    old = store.save_invoice(user, sample_invoice)
    sample_invoice.created_at = 5000
    new = store.save_invoice(user, sample_invoice)

    assert [inv.id for inv in store.list_invoices(user)] == [new.id, old.id]


def test_users_only_see_their_own_invoices_but_admin_sees_all(store, user, admin, sample_invoice):
    other = UserProfile(uid="u2", email="bob@example.com")
    store.save_invoice(user, sample_invoice)
    store.save_invoice(other, sample_invoice)

    assert len(store.list_invoices(user)) == 1
    assert len(store.list_invoices(other)) == 1
    assert len(store.list_invoices(admin)) == 2


def test_load_invoice(store, user, sample_invoice):
    saved = store.save_invoice(user, sample_invoice)
    loaded = store.load_invoice(user, saved.id)
    assert loaded == saved
    with pytest.raises(StoreError):
        store.load_invoice(user, "missing")


def test_subscribe_receives_current_list_and_changes(store, user, sample_invoice):
    received = []
    unsubscribe = store.subscribe(user, received.append)
    assert received == [[]]

    saved = store.save_invoice(user, sample_invoice)
    assert [inv.id for inv in received[-1]] == [saved.id]

    unsubscribe()
    store.delete_invoice(user, saved.id)
    assert len(received) == 2


def test_delete_invoice(store, user, sample_invoice):
    saved = store.save_invoice(user, sample_invoice)
    store.delete_invoice(user, saved.id)
    assert store.list_invoices(user) == []


def test_delete_errors(store, user, sample_invoice):
    saved = store.save_invoice(user, sample_invoice)
    with pytest.raises(StoreError):
        store.delete_invoice(None, saved.id)
    with pytest.raises(StoreError):
        store.delete_invoice(user, "missing")
    with pytest.raises(StoreError):
        store.delete_invoice(UserProfile(uid="u2"), saved.id)


def test_records_without_use_status_show_status(tmp_path, user):
    path = tmp_path / "invoices.json"
    record = {
        "id": "legacy",
        "invoice_number": "INV-2023-001",
        "status": "PAID",
        "items": [{"id": "x", "description": "Old", "quantity": "2", "unit_price": 10, "extra": True}],
        "settings": {"currency": "IDR", "tax_rate": 11},
        "created_at": 1,
    }
    path.write_text(json.dumps({"invoices": {"u1": {"legacy": record}}}), encoding="utf-8")

    invoice = RecordStore(path).load_invoice(user, "legacy")

    assert invoice.settings.use_status is True
    assert invoice.items[0].quantity == 2.0
    assert invoice.items[0].line_total == 20.0


def test_corrupt_file_raises_store_error(tmp_path, user):
    path = tmp_path / "invoices.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        RecordStore(path).list_invoices(user)


def test_new_and_copied_records_share_one_id_format(store, user, sample_invoice):
    saved = store.save_invoice(user, sample_invoice)
    copied = store.save_invoice(user, saved, editing_existing=True, force_new=True)

    for record_id in (saved.id, copied.id):
        assert len(record_id) == 36
        assert str(uuid.UUID(record_id)) == record_id
