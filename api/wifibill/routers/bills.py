# api/wifibill/routers/bills.py
from typing import List, Optional

from ..shared import APIRouter, Depends, Session, get_ledger, ledger_transaction
from ..database import get_db
from ..schemas.bills import BillIn, BillRecord, BillUpdate, BulkDeleteOut, IdsIn
from ..services.ledger import LedgerStore
from .selection import selection_out

router = APIRouter(prefix="/api/bills", tags=["bills"])

# ---------- Routes ----------

@router.post("", response_model=BillRecord)
def create_bill(
    payload: BillIn,
    db: Session = Depends(get_db),
    ledger: LedgerStore = Depends(get_ledger),
):
    with ledger_transaction(db, ledger):
        rec = ledger.add(payload)
    return rec

@router.get("", response_model=List[BillRecord])
def list_bills(
    q: Optional[str] = None,
    ledger: LedgerStore = Depends(get_ledger),
):
    return ledger.search(q)

# bulk routes are declared before /{bill_id} ones
@router.post("/bulk-delete", response_model=BulkDeleteOut)
def bulk_delete(
    payload: IdsIn,
    db: Session = Depends(get_db),
    ledger: LedgerStore = Depends(get_ledger),
):
    """Delete the given ids, or the current selection when none are given."""
    with ledger_transaction(db, ledger):
        if payload.ids is None:
            removed = ledger.remove_selected()
        else:
            removed = ledger.remove_many(payload.ids)
    return BulkDeleteOut(removed=removed, selection=selection_out(ledger))

@router.get("/{bill_id}", response_model=BillRecord)
def get_bill(
    bill_id: str,
    ledger: LedgerStore = Depends(get_ledger),
):
    return ledger.get(bill_id)

@router.put("/{bill_id}", response_model=BillRecord)
def update_bill(
    bill_id: str,
    payload: BillUpdate,
    db: Session = Depends(get_db),
    ledger: LedgerStore = Depends(get_ledger),
):
    with ledger_transaction(db, ledger):
        rec = ledger.update(bill_id, payload)
    return rec

@router.delete("/{bill_id}")
def delete_bill(
    bill_id: str,
    db: Session = Depends(get_db),
    ledger: LedgerStore = Depends(get_ledger),
):
    with ledger_transaction(db, ledger):
        ledger.remove(bill_id)
    return {"ok": True}

@router.post("/{bill_id}/paid", response_model=BillRecord)
def mark_paid(
    bill_id: str,
    db: Session = Depends(get_db),
    ledger: LedgerStore = Depends(get_ledger),
):
    with ledger_transaction(db, ledger):
        rec = ledger.mark_paid(bill_id)
    return rec

@router.post("/{bill_id}/pending", response_model=BillRecord)
def mark_pending(
    bill_id: str,
    db: Session = Depends(get_db),
    ledger: LedgerStore = Depends(get_ledger),
):
    with ledger_transaction(db, ledger):
        rec = ledger.mark_pending(bill_id)
    return rec
