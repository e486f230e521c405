from typing import Any, Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from backoffice.api import deps
from backoffice.core.exceptions import NotFound
from backoffice.models.bill import DealerBill
from backoffice.models.enums import BillStatus
from backoffice.services.attachment_service import AttachmentStore
from backoffice.services.bill_service import BillService
from backoffice.schemas.bill import (
    AttachmentUpload, BillListFilters, BillResponse, BillSubmission, DirectoryRef
)
from backoffice.schemas.responses import SuccessResponse, PaginatedResponse

router = APIRouter()


def _bill_response(bill: DealerBill) -> BillResponse:
    return BillResponse(
        id=bill.id,
        dealer=DirectoryRef(id=bill.dealer.id, name=bill.dealer.dealer_name) if bill.dealer else None,
        branch=DirectoryRef(id=bill.branch.id, name=bill.branch.name) if bill.branch else None,
        bill_number=bill.bill_number,
        bill_date=bill.bill_date,
        amount=bill.amount,
        paid=bill.paid,
        pending=bill.pending,
        status=bill.status,
        bill_image=bill.bill_image,
        created_at=bill.created_at,
        updated_at=bill.updated_at,
    )


async def _read_upload(file: Optional[UploadFile], store: AttachmentStore) -> Optional[AttachmentUpload]:
    """Read at most one byte past the size limit so oversized files are caught without buffering them."""
    if file is None or not file.filename:
        return None
    content = await file.read(store.policy.max_bytes + 1)
    return AttachmentUpload(filename=file.filename, content_type=file.content_type, content=content)


@router.get("", response_model=PaginatedResponse[BillResponse])
async def list_bills(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    dealer_id: Optional[UUID] = Query(None),
    branch_id: Optional[UUID] = Query(None),
    status: Optional[BillStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    List bills, newest first, with dealer and branch names resolved.
    """
    filters = BillListFilters(dealer_id=dealer_id, branch_id=branch_id, status=status, search=search)
    skip = (page - 1) * page_size
    bills, total = await BillService.list_bills(db, filters, skip=skip, limit=page_size)
    total_pages = (total + page_size - 1) // page_size
    
    return PaginatedResponse(
        data=[_bill_response(b) for b in bills],
        meta={
            "page": page,
            "page_size": page_size,
            "total": total,
            "total_pages": total_pages
        }
    )


@router.get("/{bill_id}", response_model=SuccessResponse[BillResponse])
async def get_bill(
    bill_id: UUID,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    bill = await BillService.get_bill_by_id(db, bill_id)
    if not bill:
        raise NotFound()
    return SuccessResponse(data=_bill_response(bill), message="Bill retrieved successfully")


@router.post("", response_model=SuccessResponse[BillResponse], status_code=201)
async def create_bill(
    dealer: Optional[str] = Form(None),
    branch: Optional[str] = Form(None),
    billNumber: Optional[str] = Form(None),
    billDate: Optional[str] = Form(None),
    amount: Optional[str] = Form(None),
    billImage: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(deps.get_db),
    store: AttachmentStore = Depends(deps.get_attachment_store),
) -> Any:
    """
    Create a bill entry from the multipart bill form. The image is required.
    """
    submission = BillSubmission(
        dealer=dealer,
        branch=branch,
        bill_number=billNumber,
        bill_date=billDate,
        amount=amount,
    )
    upload = await _read_upload(billImage, store)
    bill = await BillService.create_bill(db, store, submission, upload)
    return SuccessResponse(data=_bill_response(bill), message="Bill entry created successfully")


@router.put("/{bill_id}", response_model=SuccessResponse[BillResponse])
async def update_bill(
    bill_id: UUID,
    billNumber: Optional[str] = Form(None),
    billDate: Optional[str] = Form(None),
    amount: Optional[str] = Form(None),
    dealer: Optional[str] = Form(None),
    branch: Optional[str] = Form(None),
    paid: Optional[str] = Form(None),
    removeImage: Optional[str] = Form(None),
    billImage: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(deps.get_db),
    store: AttachmentStore = Depends(deps.get_attachment_store),
) -> Any:
    """
    Update a bill. `paid` records a payment; removeImage="true" drops the
    attachment, otherwise a new billImage replaces it.
    """
    submission = BillSubmission(
        dealer=dealer,
        branch=branch,
        bill_number=billNumber,
        bill_date=billDate,
        amount=amount,
        paid=paid,
        remove_image=(removeImage or "").strip().lower() == "true",
    )
    upload = await _read_upload(billImage, store)
    bill = await BillService.update_bill(db, store, bill_id, submission, upload)
    return SuccessResponse(data=_bill_response(bill), message="Bill updated successfully")
