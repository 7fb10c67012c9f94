# api/wifibill/routers/dashboard.py
from fastapi import APIRouter, Depends

from ..schemas.bills import BillingStats
from ..services.ledger import LedgerStore
from ..services.stats import compute_stats
from ..shared import get_ledger

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=BillingStats)
def stats(ledger: LedgerStore = Depends(get_ledger)):
    """
    Dashboard cards:
      - total_customers / total_pending / total_paid : bill counts
      - total_unpaid      : sum of pending amounts
      - total_paid_amount : sum of paid amounts
      - total_revenue     : sum of every amount
    """
    return compute_stats(ledger)
