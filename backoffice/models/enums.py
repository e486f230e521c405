"""Centralized Enum Definitions"""

import enum


class BillStatus(str, enum.Enum):
    """Payment status of a dealer bill, derived from its pending balance"""
    PENDING = "Pending"
    COMPLETED = "Completed"
