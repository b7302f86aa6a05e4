"""Bill Model"""

from datetime import datetime
from typing import List
from pydantic import ConfigDict, Field

from smartcart.models.base import RecordModel
from smartcart.models.enums import BillStatus
from smartcart.models.session import LineItem
from smartcart.utils.time import get_utc_now


class Bill(RecordModel):
    """
    Immutable record of one verified payment.
    Items and total are a snapshot of the session at commit time.
    """
    model_config = ConfigDict(frozen=True)
    
    bill_id: str
    session_id: str
    items: List[LineItem]
    total: float
    gateway_order_id: str
    gateway_payment_id: str
    timestamp: datetime = Field(default_factory=get_utc_now)
    status: BillStatus = BillStatus.PAID
    
    def __repr__(self) -> str:
        return f"<Bill {self.bill_id} - {self.total}>"
