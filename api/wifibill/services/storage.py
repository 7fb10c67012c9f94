# api/wifibill/services/storage.py
"""Snapshot persistence of the ledger into the customer_bills table."""
import logging
from datetime import timezone
from typing import Any, Dict

from sqlalchemy.orm import Session

from ..models import CustomerBill
from ..schemas.bills import BillRecord
from .ledger import LedgerStore

log = logging.getLogger(__name__)


def _row_values(rec: BillRecord, position: int) -> Dict[str, Any]:
    return {
        "id": rec.id,
        "position": position,
        "name": rec.name,
        "amount": rec.amount,
        "status": rec.status.value,
        "due_date": rec.due_date,
        "created_at": rec.created_at,
        "phone_number": rec.phone_number,
        "address": rec.address,
        "package_name": rec.package_name,
        "notes": rec.notes,
        "payment_method": rec.payment_method.value if rec.payment_method else None,
        "latitude": rec.latitude,
        "longitude": rec.longitude,
        "photo_reference": rec.photo_reference,
    }


def row_to_record(row: CustomerBill) -> BillRecord:
    created = row.created_at
    # sqlite drops tzinfo on the way back
    if created is not None and created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return BillRecord(
        id=row.id,
        name=row.name,
        amount=row.amount,
        status=row.status,
        due_date=row.due_date,
        created_at=created,
        phone_number=row.phone_number,
        address=row.address,
        package_name=row.package_name,
        notes=row.notes,
        payment_method=row.payment_method,
        latitude=row.latitude,
        longitude=row.longitude,
        photo_reference=row.photo_reference,
    )


def load_ledger(db: Session, **kwargs) -> LedgerStore:
    rows = db.query(CustomerBill).order_by(CustomerBill.position.asc()).all()
    ledger = LedgerStore.from_records((row_to_record(r) for r in rows), **kwargs)
    log.info("Loaded %s bill(s) from storage", len(ledger))
    return ledger


def save_ledger(db: Session, ledger: LedgerStore) -> None:
    """Upsert every record and drop rows that left the ledger, in one commit."""
    existing = {row.id: row for row in db.query(CustomerBill).all()}
    keep = set()
    for pos, rec in enumerate(ledger.records()):
        values = _row_values(rec, pos)
        row = existing.get(rec.id)
        if row is None:
            db.add(CustomerBill(**values))
        else:
            for k, v in values.items():
                setattr(row, k, v)
        keep.add(rec.id)

    for rid, row in existing.items():
        if rid not in keep:
            db.delete(row)
    db.commit()
