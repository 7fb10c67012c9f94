# api/wifibill/routers/selection.py
from ..shared import APIRouter, Depends, get_ledger
from ..schemas.bills import SelectAllIn, SelectionOut
from ..services.ledger import LedgerStore

router = APIRouter(prefix="/api/selection", tags=["selection"])


def selection_out(ledger: LedgerStore) -> SelectionOut:
    ids = list(ledger.selected_ids)
    return SelectionOut(ids=ids, count=len(ids))

@router.get("", response_model=SelectionOut)
def get_selection(ledger: LedgerStore = Depends(get_ledger)):
    return selection_out(ledger)

@router.delete("", response_model=SelectionOut)
def clear_selection(ledger: LedgerStore = Depends(get_ledger)):
    ledger.clear_selection()
    return selection_out(ledger)

@router.post("/all", response_model=SelectionOut)
def select_all(
    payload: SelectAllIn,
    ledger: LedgerStore = Depends(get_ledger),
):
    """Select the given ids, or every bill matching the name filter `q`."""
    if payload.ids is not None:
        ledger.select_all(payload.ids)
    else:
        ledger.select_all(r.id for r in ledger.search(payload.q))
    return selection_out(ledger)

@router.post("/{bill_id}", response_model=SelectionOut)
def select_bill(bill_id: str, ledger: LedgerStore = Depends(get_ledger)):
    ledger.select(bill_id)
    return selection_out(ledger)

@router.delete("/{bill_id}", response_model=SelectionOut)
def deselect_bill(bill_id: str, ledger: LedgerStore = Depends(get_ledger)):
    ledger.deselect(bill_id)
    return selection_out(ledger)
