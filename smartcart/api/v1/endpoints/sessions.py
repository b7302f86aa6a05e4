from typing import Any
from fastapi import APIRouter, Depends, Request

from smartcart.api import deps
from smartcart.config import Settings
from smartcart.core.limiter import limiter, create_order_limit
from smartcart.schemas.responses import SuccessResponse
from smartcart.schemas.session import (
    CreateOrderRequest,
    CreateOrderResponse,
    SessionStatusResponse,
)
from smartcart.services.session_service import SessionService

router = APIRouter()


@router.post("/create-order", response_model=SuccessResponse[CreateOrderResponse])
@limiter.limit(create_order_limit)
async def create_order(
    request: Request,
    order_in: CreateOrderRequest,
    service: SessionService = Depends(deps.get_session_service),
    settings: Settings = Depends(deps.get_settings),
) -> Any:
    """
    Open a checkout session for a cart device.
    """
    session = await service.create_session(
        order_in.items,
        order_in.total,
        device_address=order_in.device_address,
    )
    payment_url = f"{settings.PAYMENT_PAGE_BASE_URL.rstrip('/')}/pay/{session.session_id}"
    return SuccessResponse(
        data=CreateOrderResponse(session_id=session.session_id, payment_url=payment_url),
        message="Order created",
    )


@router.get("/session/{session_id}", response_model=SuccessResponse[SessionStatusResponse])
async def get_session_status(
    session_id: str,
    service: SessionService = Depends(deps.get_session_service),
) -> Any:
    """
    Session status for device polling.
    """
    session = await service.get_session(session_id)
    return SuccessResponse(
        data=SessionStatusResponse(
            session_id=session.session_id,
            status=session.status,
            bill_id=session.bill_id,
            total=session.total,
            items=session.items,
        )
    )
