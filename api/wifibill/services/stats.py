# api/wifibill/services/stats.py
from typing import Iterable

from ..schemas.bills import BillingStats, BillRecord, BillStatus


def compute_stats(records: Iterable[BillRecord]) -> BillingStats:
    """
    Dashboard totals in one pass over the ledger.

    Always recomputed from the records; nothing is cached, so the numbers
    cannot drift from the ledger contents.
    """
    pending = paid = 0
    unpaid_amount = paid_amount = 0
    for rec in records:
        if rec.status == BillStatus.PAID:
            paid += 1
            paid_amount += rec.amount
        else:
            pending += 1
            unpaid_amount += rec.amount

    return BillingStats(
        total_customers=pending + paid,
        total_pending=pending,
        total_paid=paid,
        total_unpaid=unpaid_amount,
        total_paid_amount=paid_amount,
        total_revenue=unpaid_amount + paid_amount,
    )
