"""Unit tests for bill schemas and error types."""

from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from backoffice.core.exceptions import (
    DuplicateBillNumber,
    MissingField,
    NotFound,
    StorageError,
    StorageUnavailable,
)
from backoffice.models.enums import BillStatus
from backoffice.schemas.bill import BillResponse, BillSubmission, DirectoryRef


def test_bill_submission_defaults():
    data = BillSubmission()
    assert data.bill_number is None
    assert data.paid is None
    assert data.remove_image is False


def test_bill_response_uses_camel_case():
    dealer_id = uuid4()
    now = datetime(2024, 1, 2, 9, 30)
    resp = BillResponse(
        id=uuid4(),
        dealer=DirectoryRef(id=dealer_id, name="Sri Murugan Flour Mills"),
        branch=None,
        bill_number="B-100",
        bill_date=date(2024, 1, 1),
        amount=Decimal("500.00"),
        paid=Decimal("0.00"),
        pending=Decimal("500.00"),
        status=BillStatus.PENDING,
        bill_image="uploads/dealerbills/bill_abc.png",
        created_at=now,
        updated_at=now,
    )
    dumped = resp.model_dump(mode="json", by_alias=True)
    assert dumped["billNumber"] == "B-100"
    assert dumped["billDate"] == "2024-01-01"
    assert dumped["billImage"] == "uploads/dealerbills/bill_abc.png"
    assert dumped["status"] == "Pending"
    assert dumped["dealer"] == {"id": str(dealer_id), "name": "Sri Murugan Flour Mills"}
    assert Decimal(dumped["pending"]) == Decimal("500")


def test_error_codes_and_fields():
    assert MissingField("billDate").field == "billDate"
    assert MissingField("amount").message == "Field 'amount' is required"
    assert DuplicateBillNumber().message == "Bill number must be unique"
    assert DuplicateBillNumber().status_code == 400
    assert NotFound().status_code == 404
    assert StorageUnavailable().status_code == 503
    assert StorageUnavailable().field is None
    err = StorageError(detail="disk full")
    assert err.status_code == 500
    assert err.detail == "disk full"
