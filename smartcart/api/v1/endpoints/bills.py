from typing import Any
from fastapi import APIRouter, Depends

from smartcart.api import deps
from smartcart.core.exceptions import BillNotFound
from smartcart.models import Bill
from smartcart.schemas.bill import BillListResponse, BillSummary
from smartcart.schemas.responses import SuccessResponse
from smartcart.store import BaseStore

router = APIRouter()


@router.get("/bill/{bill_id}", response_model=SuccessResponse[Bill])
async def get_bill(
    bill_id: str,
    store: BaseStore = Depends(deps.get_store),
) -> Any:
    """
    Receipt for one bill.
    """
    bill = await store.get_bill(bill_id)
    if bill is None:
        raise BillNotFound()
    return SuccessResponse(data=bill)


@router.get("/bills", response_model=SuccessResponse[BillListResponse])
async def list_bills(
    store: BaseStore = Depends(deps.get_store),
) -> Any:
    """
    All bills, oldest first.
    """
    bills = await store.list_bills()
    return SuccessResponse(
        data=BillListResponse(
            total=len(bills),
            bills=[BillSummary.from_bill(b) for b in bills],
        )
    )
