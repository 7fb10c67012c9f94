# api/wifibill/services/transitions.py
"""
Payment status policy.

Two states, pending and paid. mark_paid / mark_pending move between them and
are idempotent: asking for the current state is a successful no-op.
"""
from datetime import date
from typing import Any, Optional

from ..errors import InvalidStatus
from ..schemas.bills import BillRecord, BillStatus
from .records import coerce_status


def transition(record: BillRecord, target: Any) -> BillRecord:
    if target is None:
        raise InvalidStatus(target)
    target = coerce_status(target)
    if record.status == target:
        return record
    return record.model_copy(update={"status": target})


def mark_paid(record: BillRecord) -> BillRecord:
    return transition(record, BillStatus.PAID)


def mark_pending(record: BillRecord) -> BillRecord:
    return transition(record, BillStatus.PENDING)


def is_overdue(record: BillRecord, today: Optional[date] = None) -> bool:
    """Display helper only; overdue is not a stored state."""
    today = today or date.today()
    return record.status == BillStatus.PENDING and record.due_date < today
