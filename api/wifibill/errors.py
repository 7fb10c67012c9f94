# api/wifibill/errors.py
"""
Typed failures raised by the ledger, the import path and the reminder composer.

Every error carries an error_code and the HTTP status the API answers with;
none of them leave the ledger partially mutated.
"""
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class LedgerError(Exception):
    """Base ledger exception."""

    error_code = "ERR_LEDGER"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ---------- validation ----------

class ValidationFailed(LedgerError):
    error_code = "ERR_VALIDATION"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidName(ValidationFailed):
    error_code = "ERR_INVALID_NAME"

    def __init__(self, message: str = "Customer name is required"):
        super().__init__(message, {"field": "name"})


class InvalidAmount(ValidationFailed):
    error_code = "ERR_INVALID_AMOUNT"

    def __init__(self, message: str = "Amount must be a non-negative number", value: Any = None):
        super().__init__(message, {"field": "amount", "value": None if value is None else str(value)})


class InvalidCoordinates(ValidationFailed):
    error_code = "ERR_INVALID_COORDINATES"

    def __init__(self, message: str = "Latitude and longitude must be given together"):
        super().__init__(message, {"fields": ["latitude", "longitude"]})


class InvalidStatus(ValidationFailed):
    error_code = "ERR_INVALID_STATUS"

    def __init__(self, value: Any):
        super().__init__(f"Unknown bill status '{value}'", {"field": "status", "value": str(value)})


# ---------- lookup ----------

class NotFound(LedgerError):
    error_code = "ERR_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, record_id: Any):
        super().__init__(f"Bill {record_id} not found", {"id": record_id})
        self.record_id = record_id


# ---------- import ----------

class ImportRowRejected(LedgerError):
    """One spreadsheet row could not be admitted. Counted, never propagated."""

    error_code = "ERR_IMPORT_ROW"

    def __init__(self, reason: str, row_number: Optional[int] = None):
        super().__init__(reason, {"row": row_number})
        self.row_number = row_number


class ImportBatchEmpty(LedgerError):
    error_code = "ERR_IMPORT_EMPTY"

    def __init__(self, rejected: int = 0):
        super().__init__(
            "No valid rows found. Make sure the file has 'Nama' and 'Nominal' columns.",
            {"rejected": rejected},
        )
        self.rejected = rejected


class UnsupportedImportFile(LedgerError):
    error_code = "ERR_IMPORT_FILE"

    def __init__(self, filename: str):
        super().__init__(f"Unsupported import file '{filename}'. Use .xlsx or .csv.", {"filename": filename})


# ---------- storage ----------

class StorageFailed(LedgerError):
    error_code = "ERR_STORAGE"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, reason: str = ""):
        super().__init__("Could not save the ledger; the change was not applied.", {"reason": reason})


# ---------- reminders ----------

class NotificationUnavailable(LedgerError):
    error_code = "ERR_NO_PHONE"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, record_id: Any):
        super().__init__(
            "This customer has no WhatsApp number yet. Edit the customer first.",
            {"id": record_id},
        )


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )
