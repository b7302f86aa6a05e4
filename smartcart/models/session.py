"""Checkout Session Model"""

from datetime import datetime
from typing import List, Optional
from pydantic import Field

from smartcart.models.base import RecordModel
from smartcart.models.enums import SessionStatus
from smartcart.utils.time import get_utc_now


class LineItem(RecordModel):
    """One cart line as scanned by the device"""
    name: str
    quantity: int = Field(..., ge=0)
    unit_price: float = Field(..., ge=0)
    
    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


class Session(RecordModel):
    """
    One checkout attempt.
    Created pending, moved to paid exactly once by payment verification,
    never deleted.
    """
    session_id: str
    items: List[LineItem]
    total: float = Field(..., ge=0)
    status: SessionStatus = SessionStatus.PENDING
    device_address: Optional[str] = None
    created_at: datetime = Field(default_factory=get_utc_now)
    bill_id: Optional[str] = None
    
    @property
    def is_paid(self) -> bool:
        return self.status == SessionStatus.PAID
    
    def __repr__(self) -> str:
        return f"<Session {self.session_id} - {self.status.value}>"
