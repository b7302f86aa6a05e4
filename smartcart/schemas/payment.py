from typing import Optional
from pydantic import AliasChoices, Field

from smartcart.models import CamelModel


class GatewayOrderRequest(CamelModel):
    session_id: str = Field(validation_alias=AliasChoices("sessionId", "session_id"))
    # Rupees; defaults to the session total
    amount: Optional[float] = None


class GatewayOrderResponse(CamelModel):
    order_id: str
    amount: int
    currency: str
    key_id: str


class VerifyPaymentRequest(CamelModel):
    """Accepts both our field names and the raw Razorpay checkout handler fields"""
    session_id: str = Field(validation_alias=AliasChoices("sessionId", "session_id"))
    gateway_order_id: str = Field(
        validation_alias=AliasChoices("gatewayOrderId", "gateway_order_id", "razorpay_order_id")
    )
    gateway_payment_id: str = Field(
        validation_alias=AliasChoices("gatewayPaymentId", "gateway_payment_id", "razorpay_payment_id")
    )
    signature: str = Field(
        validation_alias=AliasChoices("signature", "razorpay_signature")
    )


class VerifyPaymentResponse(CamelModel):
    bill_id: str
