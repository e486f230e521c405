"""Dealer and branch directory entries referenced by bills"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from backoffice.models.base import BaseModel


class Dealer(BaseModel):
    __tablename__ = "dealers"
    
    dealer_name = Column(String(255), nullable=False, index=True)
    
    bills = relationship("DealerBill", back_populates="dealer")
    
    def __repr__(self) -> str:
        return f"<Dealer {self.dealer_name}>"


class Branch(BaseModel):
    __tablename__ = "branches"
    
    name = Column(String(255), nullable=False, index=True)
    
    bills = relationship("DealerBill", back_populates="branch")
    
    def __repr__(self) -> str:
        return f"<Branch {self.name}>"
