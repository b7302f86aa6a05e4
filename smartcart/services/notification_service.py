"""
Cart device notification. Best effort: one bounded attempt, failures are
logged and dropped, and the caller never waits for delivery.
"""

import asyncio
from typing import Optional, Set

import httpx

from smartcart.core.exceptions import NotificationFailure
from smartcart.core.logging import get_logger

logger = get_logger(__name__)


def device_url(address: str, path: str) -> str:
    """Build the device callback URL; bare hosts/IPs get ``http://``."""
    address = address.strip().rstrip("/")
    if "://" not in address:
        address = f"http://{address}"
    return f"{address}/{path.lstrip('/')}"


class NotificationDispatcher:
    def __init__(
        self,
        timeout: float = 5.0,
        path: str = "/payment-status",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = timeout
        self.path = path
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, address: Optional[str], bill_id: str) -> Optional[asyncio.Task]:
        """
        Schedule a notification without waiting for it.
        Returns the background task, or None when there is no address.
        """
        if not address or not address.strip():
            return None
        task = asyncio.create_task(self._notify_quietly(address, bill_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def notify(self, address: str, bill_id: str) -> None:
        """
        Tell the device its payment went through.

        Raises:
            NotificationFailure: On timeout, connection error, bad address or
                non-2xx response
        """
        try:
            url = device_url(address, self.path)
            response = await self._client.post(
                url,
                json={"status": "success", "billId": bill_id},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise NotificationFailure(f"Could not notify device at {address}: {e}") from e
        logger.info("Device notified", extra={"address": address, "bill_id": bill_id})

    async def _notify_quietly(self, address: str, bill_id: str) -> None:
        try:
            await self.notify(address, bill_id)
        except NotificationFailure as e:
            logger.warning(e.message, extra={"address": address, "bill_id": bill_id})

    async def aclose(self) -> None:
        """Wait for in-flight notifications, then close the HTTP client."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        if self._owns_client:
            await self._client.aclose()
