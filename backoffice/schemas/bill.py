from dataclasses import dataclass
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from uuid import UUID
from datetime import datetime, date
from decimal import Decimal

from backoffice.models.enums import BillStatus


class BillSubmission(BaseModel):
    """
    Raw bill form fields as submitted (multipart strings).

    Nothing is coerced here; BillService owns validation so that each
    failure maps to a specific form field.
    """
    dealer: Optional[str] = None
    branch: Optional[str] = None
    bill_number: Optional[str] = None
    bill_date: Optional[str] = None
    amount: Optional[str] = None
    paid: Optional[str] = None
    remove_image: bool = False


@dataclass(frozen=True)
class AttachmentUpload:
    """One uploaded file, already read into memory."""
    filename: Optional[str]
    content_type: Optional[str]
    content: bytes


class DirectoryRef(BaseModel):
    id: UUID
    name: str


class BillResponse(BaseModel):
    id: UUID
    dealer: Optional[DirectoryRef] = None
    branch: Optional[DirectoryRef] = None
    bill_number: str
    bill_date: date
    amount: Decimal
    paid: Decimal
    pending: Decimal
    status: BillStatus
    bill_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BillListFilters(BaseModel):
    dealer_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None
    status: Optional[BillStatus] = None
    search: Optional[str] = Field(None, max_length=100)
