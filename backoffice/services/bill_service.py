"""Bill Service - dealer bill entry, payment tracking and attachment bookkeeping"""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, List, Tuple
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backoffice.core.exceptions import (
    BillError,
    DuplicateBillNumber,
    FutureDate,
    InvalidDate,
    InvalidPaidAmount,
    MissingAttachment,
    MissingField,
    NegativeAmount,
    NotFound,
    StorageError,
)
from backoffice.models.bill import DealerBill
from backoffice.models.enums import BillStatus
from backoffice.schemas.bill import AttachmentUpload, BillListFilters, BillSubmission
from backoffice.services.attachment_service import AttachmentStore
from backoffice.services.directory_service import DirectoryService
from backoffice.utils.time import as_utc, utc_now

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
# Largest value a Numeric(12, 2) column holds
MAX_MONEY = Decimal("9999999999.99")

# (submission attribute, form field, label), in checking order
CREATE_REQUIRED_FIELDS = (
    ("dealer", "dealer", "Dealer"),
    ("branch", "branch", "Branch"),
    ("bill_number", "billNumber", "Bill number"),
    ("bill_date", "billDate", "Bill date"),
    ("amount", "amount", "Amount"),
)
UPDATE_REQUIRED_FIELDS = (
    ("bill_number", "billNumber", "Bill number"),
    ("bill_date", "billDate", "Bill date"),
    ("amount", "amount", "Amount"),
    ("dealer", "dealer", "Dealer"),
    ("branch", "branch", "Branch"),
)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def require_fields(submission: BillSubmission, fields) -> None:
    for attr, field, label in fields:
        if _is_blank(getattr(submission, attr)):
            raise MissingField(field, f"{label} is required")


def parse_bill_date(raw: str) -> date:
    """
    Parse an ISO date or datetime and reject anything after the current moment.

    Values without an offset are read as UTC, so a bare date means midnight UTC.
    """
    try:
        parsed = datetime.fromisoformat(raw.strip())
    except ValueError:
        raise InvalidDate()
    if as_utc(parsed) > utc_now():
        raise FutureDate()
    return parsed.date()


def _parse_money(raw: str) -> Optional[Decimal]:
    try:
        value = Decimal(raw.strip())
        if not value.is_finite():
            return None
        value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None
    if abs(value) > MAX_MONEY:
        return None
    return value


def parse_amount(raw: str) -> Decimal:
    amount = _parse_money(raw)
    if amount is None or amount < 0:
        raise NegativeAmount()
    return amount


def parse_paid(raw: str, amount: Decimal) -> Decimal:
    paid = _parse_money(raw)
    if paid is None or paid < 0 or paid > amount:
        raise InvalidPaidAmount()
    return paid


def parse_reference(raw: str, field: str, label: str) -> UUID:
    try:
        return UUID(raw.strip())
    except ValueError:
        raise MissingField(field, f"{label} not found")


def apply_payment(bill: DealerBill, paid: Decimal) -> None:
    """Set paid and derive pending and status from the bill's amount."""
    bill.paid = paid
    bill.pending = bill.amount - paid
    bill.status = BillStatus.COMPLETED if bill.pending == 0 else BillStatus.PENDING


class BillService:
    @staticmethod
    async def get_bill_by_id(db: AsyncSession, bill_id: UUID) -> Optional[DealerBill]:
        result = await db.execute(
            select(DealerBill)
            .options(selectinload(DealerBill.dealer), selectinload(DealerBill.branch))
            .where(DealerBill.id == bill_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_bills(
        db: AsyncSession,
        filters: Optional[BillListFilters] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[DealerBill], int]:
        conditions = []
        if filters is not None:
            if filters.dealer_id:
                conditions.append(DealerBill.dealer_id == filters.dealer_id)
            if filters.branch_id:
                conditions.append(DealerBill.branch_id == filters.branch_id)
            if filters.status:
                conditions.append(DealerBill.status == filters.status)
            if filters.search:
                conditions.append(DealerBill.bill_number.icontains(filters.search.strip(), autoescape=True))

        total = await db.scalar(
            select(func.count()).select_from(DealerBill).where(*conditions)
        )
        result = await db.execute(
            select(DealerBill)
            .options(selectinload(DealerBill.dealer), selectinload(DealerBill.branch))
            .where(*conditions)
            .order_by(DealerBill.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    @staticmethod
    async def _ensure_references(db: AsyncSession, dealer_id: UUID, branch_id: UUID) -> None:
        if await DirectoryService.get_dealer(db, dealer_id) is None:
            raise MissingField("dealer", "Dealer not found")
        if await DirectoryService.get_branch(db, branch_id) is None:
            raise MissingField("branch", "Branch not found")

    @staticmethod
    async def _commit(db: AsyncSession, bill_number: str) -> None:
        """Commit the session, translating database failures into bill errors."""
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if "bill_number" in str(e.orig):
                logger.warning("Duplicate bill number", extra={"bill_number": bill_number})
                raise DuplicateBillNumber() from e
            logger.error("Bill rejected by database", extra={"bill_number": bill_number, "error": str(e.orig)})
            raise StorageError(detail=str(e.orig)) from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("Failed to save bill", extra={"bill_number": bill_number})
            raise StorageError(detail=str(e)) from e

    @staticmethod
    async def _discard_upload(attachments: AttachmentStore, path: Optional[str]) -> None:
        """Remove a freshly stored upload whose record was never committed."""
        if not path:
            return
        try:
            await attachments.discard(path)
        except BillError as e:
            logger.warning("Could not remove orphaned attachment", extra={"path": path, "error": e.message})

    @staticmethod
    async def create_bill(
        db: AsyncSession,
        attachments: AttachmentStore,
        submission: BillSubmission,
        upload: Optional[AttachmentUpload],
    ) -> DealerBill:
        """
        Validate a bill entry, store its attachment and persist it.

        New bills start unpaid: paid=0, pending=amount, status=Pending.
        """
        if upload is None or not upload.filename:
            raise MissingAttachment()
        attachments.validate(upload.filename, upload.content_type, len(upload.content))

        require_fields(submission, CREATE_REQUIRED_FIELDS)
        bill_date = parse_bill_date(submission.bill_date)
        amount = parse_amount(submission.amount)
        dealer_id = parse_reference(submission.dealer, "dealer", "Dealer")
        branch_id = parse_reference(submission.branch, "branch", "Branch")
        await BillService._ensure_references(db, dealer_id, branch_id)

        bill_number = submission.bill_number.strip()
        image_path = await attachments.store(upload.filename, upload.content, upload.content_type)

        bill = DealerBill(
            dealer_id=dealer_id,
            branch_id=branch_id,
            bill_number=bill_number,
            bill_date=bill_date,
            amount=amount,
            paid=Decimal("0.00"),
            pending=amount,
            status=BillStatus.PENDING,
            bill_image=image_path,
        )
        db.add(bill)
        try:
            await BillService._commit(db, bill_number)
        except BillError:
            await BillService._discard_upload(attachments, image_path)
            raise

        logger.info("Bill created", extra={"bill_id": str(bill.id), "bill_number": bill_number})
        return await BillService.get_bill_by_id(db, bill.id)

    @staticmethod
    async def update_bill(
        db: AsyncSession,
        attachments: AttachmentStore,
        bill_id: UUID,
        submission: BillSubmission,
        upload: Optional[AttachmentUpload] = None,
    ) -> DealerBill:
        """
        Overwrite a bill's fields, optionally record a payment and swap its attachment.

        All validation happens before anything is written. When the image is
        removed or replaced, the old file is moved aside before the commit and
        only deleted once the commit succeeds; a failed commit puts it back.
        removeImage wins over an uploaded file.

        Concurrent updates to one bill are last-write-wins.
        """
        require_fields(submission, UPDATE_REQUIRED_FIELDS)
        bill_date = parse_bill_date(submission.bill_date)
        amount = parse_amount(submission.amount)
        dealer_id = parse_reference(submission.dealer, "dealer", "Dealer")
        branch_id = parse_reference(submission.branch, "branch", "Branch")

        replacing = upload is not None and bool(upload.filename) and not submission.remove_image
        if replacing:
            attachments.validate(upload.filename, upload.content_type, len(upload.content))

        bill = await BillService.get_bill_by_id(db, bill_id)
        if bill is None:
            raise NotFound()
        await BillService._ensure_references(db, dealer_id, branch_id)

        if _is_blank(submission.paid):
            paid = bill.paid
            if paid > amount:
                raise InvalidPaidAmount()
        else:
            paid = parse_paid(submission.paid, amount)

        new_path = None
        staged = None
        image_path = bill.bill_image
        if submission.remove_image:
            staged = await attachments.stage_removal(bill.bill_image)
            image_path = None
        elif replacing:
            new_path = await attachments.store(upload.filename, upload.content, upload.content_type)
            try:
                staged = await attachments.stage_removal(bill.bill_image)
            except BillError:
                await BillService._discard_upload(attachments, new_path)
                raise
            image_path = new_path

        bill_number = submission.bill_number.strip()
        bill.bill_number = bill_number
        bill.bill_date = bill_date
        bill.amount = amount
        bill.dealer_id = dealer_id
        bill.branch_id = branch_id
        apply_payment(bill, paid)
        bill.bill_image = image_path

        try:
            await BillService._commit(db, bill_number)
        except BillError:
            if staged is not None:
                await staged.rollback()
            await BillService._discard_upload(attachments, new_path)
            raise
        if staged is not None:
            await staged.commit()

        logger.info(
            "Bill updated",
            extra={"bill_id": str(bill_id), "bill_number": bill_number, "status": bill.status.value},
        )
        return await BillService.get_bill_by_id(db, bill_id)
