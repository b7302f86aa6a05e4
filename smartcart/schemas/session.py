from typing import List, Optional
from pydantic import AliasChoices, Field

from smartcart.models import CamelModel, LineItem, SessionStatus


class CreateOrderRequest(CamelModel):
    # Presence is checked by SessionService so that missing fields map to 400
    items: Optional[List[LineItem]] = None
    total: Optional[float] = None
    device_address: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("deviceAddress", "device_address", "esp32_ip"),
    )


class CreateOrderResponse(CamelModel):
    session_id: str
    payment_url: str


class SessionStatusResponse(CamelModel):
    """What a polling cart device sees"""
    session_id: str
    status: SessionStatus
    bill_id: Optional[str] = None
    total: float
    items: List[LineItem]
