"""Models Package - Export all models for easy imports"""

from smartcart.models.base import CamelModel, RecordModel
from smartcart.models.enums import SessionStatus, BillStatus, StorageBackend
from smartcart.models.session import LineItem, Session
from smartcart.models.bill import Bill

__all__ = [
    "CamelModel",
    "RecordModel",
    "SessionStatus",
    "BillStatus",
    "StorageBackend",
    "LineItem",
    "Session",
    "Bill",
]
