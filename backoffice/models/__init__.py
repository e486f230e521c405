"""Models Package - Export all models for easy imports"""

from backoffice.models.base import BaseModel
from backoffice.models.enums import BillStatus
from backoffice.models.directory import Dealer, Branch
from backoffice.models.bill import DealerBill


__all__ = [
    # Base classes
    "BaseModel",
    
    # Enums
    "BillStatus",
    
    # Directory
    "Dealer",
    "Branch",
    
    # Bills
    "DealerBill",
]
