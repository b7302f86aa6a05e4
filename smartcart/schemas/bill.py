from typing import List
from datetime import datetime

from smartcart.models import Bill, CamelModel


class BillSummary(CamelModel):
    bill_id: str
    total: float
    timestamp: datetime
    item_count: int

    @classmethod
    def from_bill(cls, bill: Bill) -> "BillSummary":
        return cls(
            bill_id=bill.bill_id,
            total=bill.total,
            timestamp=bill.timestamp,
            item_count=len(bill.items),
        )


class BillListResponse(CamelModel):
    total: int
    bills: List[BillSummary]
