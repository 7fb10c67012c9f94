# api/wifibill/schemas/bills.py
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict


class BillStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class PaymentMethod(str, Enum):
    TRANSFER = "transfer"
    CASH = "cash"


class BillRecord(BaseModel):
    """One customer's billing entry. Replaced wholesale on every mutation."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    amount: int
    status: BillStatus = BillStatus.PENDING
    due_date: date
    created_at: datetime

    phone_number: Optional[str] = None
    address: Optional[str] = None
    package_name: Optional[str] = None
    notes: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    photo_reference: Optional[str] = None


# ---------- API payloads ----------

# amount stays loosely typed on input; services.records does the coercion
AmountIn = Union[int, float, str]


class BillIn(BaseModel):
    name: Optional[str] = None
    amount: Optional[AmountIn] = None
    status: Optional[str] = None
    due_date: Optional[date] = None

    phone_number: Optional[str] = None
    address: Optional[str] = None
    package_name: Optional[str] = None
    notes: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    photo_reference: Optional[str] = None


class BillUpdate(BillIn):
    pass


class BillingStats(BaseModel):
    total_customers: int = 0
    total_pending: int = 0
    total_paid: int = 0
    total_unpaid: int = 0
    total_paid_amount: int = 0
    total_revenue: int = 0


class IdsIn(BaseModel):
    ids: Optional[List[str]] = None


class SelectAllIn(BaseModel):
    ids: Optional[List[str]] = None
    q: Optional[str] = None


class SelectionOut(BaseModel):
    ids: List[str]
    count: int


class BulkDeleteOut(BaseModel):
    removed: int
    selection: SelectionOut


class ImportOut(BaseModel):
    ok: bool
    imported: int
    rejected: int


class ReminderOut(BaseModel):
    id: str
    phone: str
    text: str
    url: str
