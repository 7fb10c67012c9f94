# api/wifibill/services/records.py
"""
Validated construction of bill records.

Manual entry, spreadsheet import and edits all end up in validate_candidate,
so the record invariants hold whatever the entry path:

  - name is non-empty after stripping
  - amount is a non-negative whole number (fractions truncated toward zero)
  - latitude/longitude are given together or not at all
  - status is one of pending|paid (pending when absent)
"""
import math
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel

from ..calculate_due_date import compute_due_date
from ..errors import (
    InvalidAmount,
    InvalidCoordinates,
    InvalidName,
    InvalidStatus,
    ValidationFailed,
)
from ..schemas.bills import BillRecord, BillStatus, PaymentMethod

OPTIONAL_TEXT_FIELDS = ("phone_number", "address", "package_name", "notes", "photo_reference")

# fields a caller can never set through a candidate
PROTECTED_FIELDS = ("id", "created_at")

# largest amount the BigInteger column holds
MAX_AMOUNT = 2**63 - 1


def new_record_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean_decimal(s: str) -> Decimal:
    raw = s.strip()
    if raw[:2].lower() == "rp":
        raw = raw[2:].strip()
    raw = raw.replace(",", "").replace(" ", "")
    if not raw:
        raise InvalidAmount("Amount is required", s)
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise InvalidAmount("Amount must be a number", s)


def parse_amount(value: Any) -> Decimal:
    """Parse a loosely typed amount into a finite, bounded Decimal. Sign is not checked."""
    if value is None:
        raise InvalidAmount("Amount is required")
    if isinstance(value, bool):
        raise InvalidAmount("Amount must be a number", value)
    if isinstance(value, int):
        num = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidAmount("Amount must be a finite number", value)
        num = Decimal(repr(value))
    elif isinstance(value, Decimal):
        num = value
    elif isinstance(value, str):
        num = _clean_decimal(value)
    else:
        raise InvalidAmount("Amount must be a number", value)
    if not num.is_finite():
        raise InvalidAmount("Amount must be a finite number", value)
    # checked before any int() so huge exponents stay cheap
    if abs(num) > MAX_AMOUNT:
        raise InvalidAmount("Amount is too large", value)
    return num


def coerce_amount(value: Any) -> int:
    """Whole currency units. Fractional input is truncated toward zero."""
    num = parse_amount(value)
    if num < 0:
        raise InvalidAmount("Amount cannot be negative", value)
    return int(num)


def coerce_status(value: Any) -> BillStatus:
    if value is None:
        return BillStatus.PENDING
    if isinstance(value, BillStatus):
        return value
    try:
        return BillStatus(str(value).strip().lower())
    except ValueError:
        raise InvalidStatus(value)


def _coerce_coordinate(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise InvalidCoordinates("Coordinates must be numeric")
    try:
        f = float(value)
    except (TypeError, ValueError):
        raise InvalidCoordinates("Coordinates must be numeric")
    if not math.isfinite(f):
        raise InvalidCoordinates("Coordinates must be numeric")
    return f


def _coerce_due_date(value: Any, created_at: datetime) -> date:
    if value is None or value == "":
        return compute_due_date(created_at)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationFailed(f"Unrecognised due date '{value}'", {"field": "due_date"})


def _coerce_payment_method(value: Any) -> Optional[PaymentMethod]:
    if value is None or value == "":
        return None
    try:
        return PaymentMethod(value)
    except ValueError:
        raise ValidationFailed(
            f"Unknown payment method '{value}'",
            {"field": "payment_method", "value": str(value)},
        )


def candidate_fields(candidate: Any) -> Dict[str, Any]:
    """Turn a dict-like or pydantic candidate into a plain dict of set fields."""
    if isinstance(candidate, BaseModel):
        return candidate.model_dump(exclude_unset=True)
    if isinstance(candidate, Mapping):
        return dict(candidate)
    raise ValidationFailed("Bill data must be a mapping")


def validate_candidate(
    candidate: Any,
    *,
    record_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> BillRecord:
    data = candidate_fields(candidate)

    name = data.get("name")
    name = "" if name is None else str(name).strip()
    if not name:
        raise InvalidName()

    amount = coerce_amount(data.get("amount"))

    lat = _coerce_coordinate(data.get("latitude"))
    lng = _coerce_coordinate(data.get("longitude"))
    if (lat is None) != (lng is None):
        raise InvalidCoordinates()

    status = coerce_status(data.get("status"))
    created_at = created_at or utcnow()

    extras = {}
    for key in OPTIONAL_TEXT_FIELDS:
        val = data.get(key)
        extras[key] = None if val is None else str(val)

    return BillRecord(
        id=record_id or new_record_id(),
        name=name,
        amount=amount,
        status=status,
        due_date=_coerce_due_date(data.get("due_date"), created_at),
        created_at=created_at,
        payment_method=_coerce_payment_method(data.get("payment_method")),
        latitude=lat,
        longitude=lng,
        **extras,
    )
