from typing import Any
from fastapi import APIRouter, Depends

from smartcart.api import deps
from smartcart.schemas.payment import (
    GatewayOrderRequest,
    GatewayOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from smartcart.schemas.responses import SuccessResponse
from smartcart.services.gateway_service import RazorpayGateway, issue_gateway_order
from smartcart.services.payment_service import PaymentVerifier
from smartcart.store import BaseStore

router = APIRouter()


@router.post("/create-razorpay-order", response_model=SuccessResponse[GatewayOrderResponse])
async def create_razorpay_order(
    order_in: GatewayOrderRequest,
    store: BaseStore = Depends(deps.get_store),
    gateway: RazorpayGateway = Depends(deps.get_gateway),
) -> Any:
    """
    Create the Razorpay order the payment page opens checkout with.
    """
    order = await issue_gateway_order(store, gateway, order_in.session_id, order_in.amount)
    return SuccessResponse(
        data=GatewayOrderResponse(
            order_id=order.order_id,
            amount=order.amount,
            currency=order.currency,
            key_id=gateway.key_id,
        )
    )


@router.post("/verify-payment", response_model=SuccessResponse[VerifyPaymentResponse])
async def verify_payment(
    payment_in: VerifyPaymentRequest,
    verifier: PaymentVerifier = Depends(deps.get_payment_verifier),
) -> Any:
    """
    Verify the Razorpay callback signature and issue the bill.
    """
    result = await verifier.verify(
        payment_in.session_id,
        payment_in.gateway_order_id,
        payment_in.gateway_payment_id,
        payment_in.signature,
    )
    return SuccessResponse(
        data=VerifyPaymentResponse(bill_id=result.bill_id),
        message="Payment verified",
    )
