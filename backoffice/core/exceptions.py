"""Typed exceptions for bill entry failures.

Every error carries a machine-readable code, a message worded for the bill
entry form, and the form field it belongs to (when there is one) so the
client can show it next to the right input.
"""

from typing import Optional

from fastapi import status


class BillError(Exception):
    """Base class for bill lifecycle and attachment errors."""

    code = "BILL_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bill request failed"
    default_field: Optional[str] = None

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.message = message or self.default_message
        self.field = field or self.default_field
        super().__init__(self.message)


class MissingAttachment(BillError):
    code = "MISSING_ATTACHMENT"
    default_message = "Bill image is required"
    default_field = "billImage"


class InvalidAttachment(BillError):
    """Uploaded file has a disallowed type or exceeds the size limit."""

    code = "INVALID_ATTACHMENT"
    default_message = "Only images (jpeg, jpg, png) and PDF files are allowed!"
    default_field = "billImage"


class MissingField(BillError):
    """A required field is absent (or references an unknown dealer/branch)."""

    code = "MISSING_FIELD"

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"Field '{field}' is required", field=field)


class InvalidDate(BillError):
    code = "INVALID_DATE"
    default_message = "Invalid bill date format"
    default_field = "billDate"


class FutureDate(BillError):
    code = "FUTURE_DATE"
    default_message = "Bill date cannot be in the future"
    default_field = "billDate"


class NegativeAmount(BillError):
    code = "NEGATIVE_AMOUNT"
    default_message = "Amount must be a positive number"
    default_field = "amount"


class InvalidPaidAmount(BillError):
    code = "INVALID_PAID_AMOUNT"
    default_message = "Paid amount must be between 0 and the bill amount"
    default_field = "paid"


class DuplicateBillNumber(BillError):
    code = "DUPLICATE_BILL_NUMBER"
    default_message = "Bill number must be unique"
    default_field = "billNumber"


class NotFound(BillError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Bill not found"


class StorageUnavailable(BillError):
    """Attachment directory cannot be reached (missing mount, permissions)."""

    code = "STORAGE_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Server error: Upload directory not accessible"


class StorageError(BillError):
    """Any other persistence failure; `detail` holds the underlying error."""

    code = "STORAGE_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error while saving bill"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail
