"""
Per-user invoice records persisted to a single JSON file.

Layout: {"invoices": {<uid>: {<invoice_id>: <record>}}}
Subscribers receive the visible invoice list right away and after every change.
"""

from __future__ import annotations

import copy
import json
import logging
import time
import uuid
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from invoice_maker.core.models.invoice import Invoice, UserProfile
from invoice_maker.core.services.invoice import generate_invoice_number
from invoice_maker.errors import StoreError

logger = logging.getLogger(__name__)

Listener = Callable[[list[Invoice]], None]


class RecordStore:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._listeners: list[tuple[UserProfile, Listener]] = []

    # --- file access ---
    def _read(self) -> dict:
        if not self.path.exists():
            return {"invoices": {}}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreError(f"Cannot read invoice records from {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            return {"invoices": {}}
        data.setdefault("invoices", {})
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    # --- queries ---
    def list_invoices(self, user: UserProfile) -> list[Invoice]:
        """Own invoices (all users' for admins), newest first."""
        buckets = self._read()["invoices"]
        if user.is_admin:
            records = [rec for per_user in buckets.values() for rec in (per_user or {}).values()]
        else:
            records = list((buckets.get(user.uid) or {}).values())
        invoices = [Invoice.from_dict(rec) for rec in records if isinstance(rec, dict)]
        invoices.sort(key=lambda inv: inv.created_at, reverse=True)
        return invoices

    def load_invoice(self, user: UserProfile, invoice_id: str) -> Invoice:
        for invoice in self.list_invoices(user):
            if invoice.id == invoice_id:
                return invoice
        raise StoreError(f"Invoice {invoice_id} not found")

    # --- subscriptions ---
    def subscribe(self, user: UserProfile, callback: Listener) -> Callable[[], None]:
        entry = (user, callback)
        self._listeners.append(entry)
        callback(self.list_invoices(user))

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def _notify(self) -> None:
        for user, callback in list(self._listeners):
            callback(self.list_invoices(user))

    # --- mutations ---
    def save_invoice(
        self,
        user: Optional[UserProfile],
        invoice: Invoice,
        editing_existing: bool = False,
        force_new: bool = False,
    ) -> Invoice:
        """
        Persist `invoice` for `user` and return the stored copy.

        - new invoice (not editing): gets a fresh id
        - editing: overwrites the record with the same id
        - editing + force_new: saved as a copy with new id, timestamp and number
        """
        if user is None:
            raise StoreError("Please login to save invoices.")
        create_new = force_new or not editing_existing
        saved = copy.deepcopy(invoice)
        saved.user_id = user.uid
        saved.created_at = saved.created_at or int(time.time() * 1000)
        if create_new and editing_existing:
            saved.id = str(uuid.uuid4())
            saved.created_at = int(time.time() * 1000)
            saved.invoice_number = generate_invoice_number(date.today().year, digits=4)
        elif create_new:
            saved.id = str(uuid.uuid4())

        data = self._read()
        data["invoices"].setdefault(user.uid, {})[saved.id] = saved.to_dict()
        self._write(data)
        logger.info("Saved invoice %s (%s) for user %s", saved.invoice_number, saved.id, user.uid)
        self._notify()
        return saved

    def delete_invoice(self, user: Optional[UserProfile], invoice_id: str) -> None:
        if user is None:
            raise StoreError("Please login to delete invoices.")
        data = self._read()
        per_user = data["invoices"].get(user.uid) or {}
        if invoice_id not in per_user:
            raise StoreError(f"Invoice {invoice_id} not found")
        del per_user[invoice_id]
        self._write(data)
        logger.info("Deleted invoice %s for user %s", invoice_id, user.uid)
        self._notify()
