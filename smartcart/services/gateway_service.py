"""
Razorpay Orders API client. Only order creation is used here; the hosted
checkout collects the payment and signs the callback we verify later.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from smartcart.core.exceptions import GatewayFailure, InvalidRequest, SessionNotFound
from smartcart.core.logging import get_logger
from smartcart.store import BaseStore

logger = get_logger(__name__)


class GatewayOrder(BaseModel):
    order_id: str
    amount: int
    currency: str


def to_minor_units(amount: Any) -> int:
    """Rupees to paise, rounded half-up. ``12.345`` -> ``1235``."""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as e:
        raise InvalidRequest(f"Invalid amount: {amount!r}") from e
    if not value.is_finite() or value <= 0:
        raise InvalidRequest(f"Invalid amount: {amount!r}")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class RazorpayGateway:
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        currency: str = "INR",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.key_id = key_id
        self.currency = currency
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            auth=(key_id, key_secret),
            timeout=timeout,
        )
        self._owns_client = client is None

    async def create_order(self, amount: int, receipt: str) -> GatewayOrder:
        """
        Create a gateway order for ``amount`` minor units.

        Raises:
            GatewayFailure: On transport errors, non-2xx responses or an
                unexpected response body
        """
        try:
            response = await self._client.post(
                "/orders",
                json={"amount": amount, "currency": self.currency, "receipt": receipt},
            )
            response.raise_for_status()
            body = response.json()
            return GatewayOrder(
                order_id=body["id"],
                amount=body["amount"],
                currency=body.get("currency", self.currency),
            )
        except httpx.HTTPStatusError as e:
            logger.error(
                "Razorpay order error",
                extra={"status_code": e.response.status_code, "receipt": receipt},
            )
            raise GatewayFailure() from e
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error("Razorpay order error", extra={"receipt": receipt, "error": str(e)})
            raise GatewayFailure() from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


async def issue_gateway_order(
    store: BaseStore,
    gateway: RazorpayGateway,
    session_id: str,
    amount: Optional[Any] = None,
) -> GatewayOrder:
    """
    Create a gateway order for a session, charging its total unless an
    explicit amount is given. The session id is the gateway receipt.

    Raises:
        SessionNotFound: If the session does not exist
        InvalidRequest: If the amount is not a positive number
        GatewayFailure: If the gateway call fails
    """
    session = await store.get_session(session_id)
    if session is None:
        raise SessionNotFound()

    minor = to_minor_units(session.total if amount is None else amount)
    order = await gateway.create_order(minor, receipt=session_id)
    logger.info(
        "Razorpay order created",
        extra={"order_id": order.order_id, "session_id": session_id, "amount": order.amount},
    )
    return order
