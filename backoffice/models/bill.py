"""Dealer Bill Model"""

from sqlalchemy import Column, Date, Enum, Numeric, String, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from backoffice.models.base import BaseModel
from backoffice.models.enums import BillStatus


class DealerBill(BaseModel):
    """
    Dealer invoice tracked for payment.

    pending = amount - paid, and status is COMPLETED exactly when pending is
    zero. bill_image is the stored attachment path, or NULL once removed.
    """
    __tablename__ = "dealer_bills"
    
    dealer_id = Column(UUID(as_uuid=True), ForeignKey("dealers.id"), nullable=False, index=True)
    branch_id = Column(UUID(as_uuid=True), ForeignKey("branches.id"), nullable=False, index=True)
    bill_number = Column(String(100), nullable=False, unique=True, index=True)
    bill_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    paid = Column(Numeric(12, 2), nullable=False, default=0)
    pending = Column(Numeric(12, 2), nullable=False)
    status = Column(
        Enum(BillStatus, name="bill_status", values_callable=lambda e: [m.value for m in e]),
        default=BillStatus.PENDING,
        nullable=False,
        index=True,
    )
    bill_image = Column(String(500), nullable=True)
    
    # Relationships (display-name joins only)
    dealer = relationship("Dealer", back_populates="bills")
    branch = relationship("Branch", back_populates="bills")
    
    def __repr__(self) -> str:
        return f"<DealerBill {self.bill_number} - {self.status}>"
