"""Integration tests: dealer bill endpoints (multipart create/update, reads)."""

import shutil
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from httpx import AsyncClient

from backoffice.api import deps
from backoffice.config import settings
from backoffice.main import app
from backoffice.services.attachment_service import AttachmentStore, UploadPolicy
from tests.conftest import PDF_BYTES, PNG_BYTES


def _form(dealer, branch, **overrides) -> dict:
    data = {
        "dealer": str(dealer.id),
        "branch": str(branch.id),
        "billNumber": "B-100",
        "billDate": "2024-01-01",
        "amount": "500.00",
    }
    data.update(overrides)
    return data


def _png(name: str = "valid.png") -> dict:
    return {"billImage": (name, PNG_BYTES, "image/png")}


async def _create(async_client: AsyncClient, api_base: str, dealer, branch, **overrides) -> dict:
    resp = await async_client.post(
        f"{api_base}/dealers/bills", data=_form(dealer, branch, **overrides), files=_png()
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.mark.asyncio
async def test_bill_payment_scenario(async_client: AsyncClient, api_base: str, dealer, branch):
    """Create B-100, pay it in full, then reduce the payment."""
    resp = await async_client.post(
        f"{api_base}/dealers/bills", data=_form(dealer, branch), files=_png()
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Bill entry created successfully"
    bill = body["data"]
    assert bill["billNumber"] == "B-100"
    assert bill["billDate"] == "2024-01-01"
    assert Decimal(bill["paid"]) == 0
    assert Decimal(bill["pending"]) == Decimal("500.00")
    assert bill["status"] == "Pending"
    assert bill["dealer"]["name"] == "Sri Murugan Flour Mills"
    assert bill["branch"]["name"] == "Anna Nagar"

    resp = await async_client.put(
        f"{api_base}/dealers/bills/{bill['id']}", data=_form(dealer, branch, paid="500.00")
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["message"] == "Bill updated successfully"
    completed = resp.json()["data"]
    assert Decimal(completed["pending"]) == 0
    assert completed["status"] == "Completed"

    resp = await async_client.put(
        f"{api_base}/dealers/bills/{bill['id']}", data=_form(dealer, branch, paid="100.00")
    )
    assert resp.status_code == 200, resp.text
    reopened = resp.json()["data"]
    assert Decimal(reopened["pending"]) == Decimal("400.00")
    assert reopened["status"] == "Pending"


@pytest.mark.asyncio
async def test_create_bill_requires_image(async_client: AsyncClient, api_base: str, dealer, branch):
    resp = await async_client.post(f"{api_base}/dealers/bills", data=_form(dealer, branch))
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "MISSING_ATTACHMENT"
    assert error["field"] == "billImage"
    assert error["message"] == "Bill image is required"


@pytest.mark.asyncio
async def test_create_bill_rejects_file_type(async_client: AsyncClient, api_base: str, dealer, branch, stored_files):
    resp = await async_client.post(
        f"{api_base}/dealers/bills",
        data=_form(dealer, branch),
        files={"billImage": ("notes.txt", b"hello", "text/plain")},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_ATTACHMENT"
    assert stored_files() == []


@pytest.mark.asyncio
async def test_create_bill_rejects_oversized_file(
    async_client: AsyncClient, api_base: str, dealer, branch, upload_dir: Path
):
    small_store = AttachmentStore(UploadPolicy(directory=upload_dir.as_posix(), max_bytes=1024))
    app.dependency_overrides[deps.get_attachment_store] = lambda: small_store

    resp = await async_client.post(
        f"{api_base}/dealers/bills",
        data=_form(dealer, branch),
        files={"billImage": ("scan.pdf", PDF_BYTES + b"0" * 2048, "application/pdf")},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_ATTACHMENT"
    assert "too large" in resp.json()["error"]["message"]


@pytest.mark.asyncio
async def test_create_bill_missing_field(async_client: AsyncClient, api_base: str, dealer, branch):
    form = _form(dealer, branch)
    del form["billNumber"]
    resp = await async_client.post(f"{api_base}/dealers/bills", data=form, files=_png())
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "MISSING_FIELD"
    assert error["field"] == "billNumber"
    assert error["message"] == "Bill number is required"


@pytest.mark.asyncio
async def test_create_bill_future_date(async_client: AsyncClient, api_base: str, dealer, branch):
    future = (datetime.now(timezone.utc).date() + timedelta(days=3)).isoformat()
    resp = await async_client.post(
        f"{api_base}/dealers/bills", data=_form(dealer, branch, billDate=future), files=_png()
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "FUTURE_DATE"
    assert resp.json()["error"]["field"] == "billDate"


@pytest.mark.asyncio
async def test_create_bill_negative_amount(async_client: AsyncClient, api_base: str, dealer, branch):
    resp = await async_client.post(
        f"{api_base}/dealers/bills", data=_form(dealer, branch, amount="-10"), files=_png()
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "NEGATIVE_AMOUNT"


@pytest.mark.asyncio
async def test_create_bill_amount_too_large(async_client: AsyncClient, api_base: str, dealer, branch, stored_files):
    resp = await async_client.post(
        f"{api_base}/dealers/bills", data=_form(dealer, branch, amount="12345678901234567.89"), files=_png()
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "NEGATIVE_AMOUNT"
    assert resp.json()["error"]["field"] == "amount"
    assert stored_files() == []


@pytest.mark.asyncio
async def test_create_bill_duplicate_number(async_client: AsyncClient, api_base: str, dealer, branch):
    first = await _create(async_client, api_base, dealer, branch)

    resp = await async_client.post(
        f"{api_base}/dealers/bills", data=_form(dealer, branch, amount="20"), files=_png()
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "DUPLICATE_BILL_NUMBER"
    assert resp.json()["error"]["message"] == "Bill number must be unique"

    resp = await async_client.get(f"{api_base}/dealers/bills/{first['id']}")
    assert resp.status_code == 200
    assert Decimal(resp.json()["data"]["amount"]) == Decimal("500.00")


@pytest.mark.asyncio
async def test_update_invalid_paid(async_client: AsyncClient, api_base: str, dealer, branch):
    bill = await _create(async_client, api_base, dealer, branch)

    resp = await async_client.put(
        f"{api_base}/dealers/bills/{bill['id']}", data=_form(dealer, branch, paid="600")
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_PAID_AMOUNT"
    assert resp.json()["error"]["field"] == "paid"

    resp = await async_client.get(f"{api_base}/dealers/bills/{bill['id']}")
    assert Decimal(resp.json()["data"]["paid"]) == 0


@pytest.mark.asyncio
async def test_update_unknown_bill(async_client: AsyncClient, api_base: str, dealer, branch):
    resp = await async_client.put(
        f"{api_base}/dealers/bills/{uuid.uuid4()}", data=_form(dealer, branch)
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_update_remove_image(async_client: AsyncClient, api_base: str, dealer, branch, stored_files):
    bill = await _create(async_client, api_base, dealer, branch)
    assert stored_files() == [Path(bill["billImage"]).name]

    resp = await async_client.put(
        f"{api_base}/dealers/bills/{bill['id']}", data=_form(dealer, branch, removeImage="true")
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["billImage"] is None
    assert stored_files() == []

    resp = await async_client.get(f"{api_base}/dealers/bills/{bill['id']}")
    assert resp.json()["data"]["billImage"] is None


@pytest.mark.asyncio
async def test_update_replace_image(async_client: AsyncClient, api_base: str, dealer, branch, stored_files):
    bill = await _create(async_client, api_base, dealer, branch)

    resp = await async_client.put(
        f"{api_base}/dealers/bills/{bill['id']}",
        data=_form(dealer, branch),
        files={"billImage": ("scan.pdf", PDF_BYTES, "application/pdf")},
    )
    assert resp.status_code == 200, resp.text
    new_image = resp.json()["data"]["billImage"]
    assert new_image != bill["billImage"]
    assert stored_files() == [Path(new_image).name]


@pytest.mark.asyncio
async def test_update_storage_unavailable(
    async_client: AsyncClient, api_base: str, dealer, branch, upload_dir: Path
):
    bill = await _create(async_client, api_base, dealer, branch)
    shutil.rmtree(upload_dir)

    resp = await async_client.put(
        f"{api_base}/dealers/bills/{bill['id']}",
        data=_form(dealer, branch, paid="500", removeImage="true"),
    )
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "STORAGE_UNAVAILABLE"

    resp = await async_client.get(f"{api_base}/dealers/bills/{bill['id']}")
    data = resp.json()["data"]
    assert data["billImage"] == bill["billImage"]
    assert Decimal(data["paid"]) == 0
    assert data["status"] == "Pending"


@pytest.mark.asyncio
async def test_get_bill_not_found(async_client: AsyncClient, api_base: str):
    resp = await async_client.get(f"{api_base}/dealers/bills/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"

    resp = await async_client.get(f"{api_base}/dealers/bills/not-a-uuid")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_bills(async_client: AsyncClient, api_base: str, dealer, branch):
    first = await _create(async_client, api_base, dealer, branch, billNumber="B-1")
    await _create(async_client, api_base, dealer, branch, billNumber="B-2")
    await async_client.put(
        f"{api_base}/dealers/bills/{first['id']}", data=_form(dealer, branch, billNumber="B-1", paid="500")
    )

    resp = await async_client.get(f"{api_base}/dealers/bills")
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"]["total"] == 2
    assert {b["billNumber"] for b in body["data"]} == {"B-1", "B-2"}
    assert all(b["dealer"]["name"] == "Sri Murugan Flour Mills" for b in body["data"])

    resp = await async_client.get(f"{api_base}/dealers/bills", params={"status": "Completed"})
    assert [b["billNumber"] for b in resp.json()["data"]] == ["B-1"]

    resp = await async_client.get(f"{api_base}/dealers/bills", params={"page": 2, "page_size": 1})
    body = resp.json()
    assert body["meta"]["total_pages"] == 2
    assert len(body["data"]) == 1


@pytest.mark.asyncio
async def test_stored_image_urls(async_client: AsyncClient):
    base = f"http://test{settings.UPLOAD_URL_PATH}"

    resp = await async_client.get(f"{base}/bill_missing.png")
    assert resp.status_code == 404

    served = Path(settings.UPLOAD_DIR) / "bill_served.png"
    served.write_bytes(PNG_BYTES)
    try:
        resp = await async_client.get(f"{base}/bill_served.png")
        assert resp.status_code == 200
        assert resp.content == PNG_BYTES
    finally:
        served.unlink()
