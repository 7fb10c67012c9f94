from datetime import date, datetime, timedelta
from typing import Optional, Union

from .config import BILL_TERMS_TYPE, BILL_TERMS_DAYS

DateLike = Union[date, datetime]


def end_of_next_month(dt: DateLike) -> date:
    d = dt.date() if isinstance(dt, datetime) else dt
    # First day of next month
    y = d.year + (1 if d.month == 12 else 0)
    m = 1 if d.month == 12 else d.month + 1
    # First day of the month after that, minus one day = last day of next month
    y2 = y + (1 if m == 12 else 0)
    m2 = 1 if m == 12 else m + 1
    return date(y2, m2, 1) - timedelta(days=1)

def compute_due_date(
    issue: DateLike,
    terms_type: Optional[str] = None,
    terms_days: Optional[int] = None,
) -> date:
    """Return the due date of a bill issued on `issue` under the given terms.

    Terms default to the configured BILL_TERMS_TYPE / BILL_TERMS_DAYS.
    """
    if terms_type is None:
        terms_type = BILL_TERMS_TYPE
        terms_days = BILL_TERMS_DAYS if terms_days is None else terms_days
    d = issue.date() if isinstance(issue, datetime) else issue
    if terms_type == "net_30":
        return d + timedelta(days=30)
    if terms_type == "net_60":
        return d + timedelta(days=60)
    if terms_type == "month_following":
        return end_of_next_month(d)
    if terms_type == "custom" and terms_days:
        return d + timedelta(days=int(terms_days))
    # sensible default
    return d + timedelta(days=30)
