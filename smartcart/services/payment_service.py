"""Payment Verification - turns a signed gateway callback into a bill"""

from typing import Optional

from pydantic import BaseModel

from smartcart.core.exceptions import (
    AlreadyPaid,
    ConfigurationError,
    InvalidSignature,
    SessionNotFound,
)
from smartcart.core.logging import get_logger
from smartcart.core.security import verify_signature
from smartcart.models import Bill, BillStatus, SessionStatus
from smartcart.services.bill_ids import DEFAULT_PREFIX, DEFAULT_START, check_prefix, next_bill_id
from smartcart.services.notification_service import NotificationDispatcher
from smartcart.store import BaseStore
from smartcart.utils.time import get_utc_now

logger = get_logger(__name__)


class VerificationResult(BaseModel):
    bill_id: str
    session_id: str


class PaymentVerifier:
    """
    Verifies gateway callbacks and commits bills.

    Bill-id allocation and the bill/session writes happen under the store's
    commit lock, so concurrent verifications never mint the same id.
    """

    def __init__(
        self,
        store: BaseStore,
        secret: str,
        notifier: Optional[NotificationDispatcher] = None,
        bill_id_prefix: str = DEFAULT_PREFIX,
        bill_id_start: int = DEFAULT_START,
        allow_paid_reverification: bool = True,
    ):
        if not secret:
            raise ConfigurationError("Gateway signing secret is not configured")
        self.store = store
        self._secret = secret
        self.notifier = notifier
        self.bill_id_prefix = check_prefix(bill_id_prefix)
        self.bill_id_start = bill_id_start
        self.allow_paid_reverification = allow_paid_reverification

    async def verify(
        self,
        session_id: str,
        gateway_order_id: str,
        gateway_payment_id: str,
        supplied_signature: str,
    ) -> VerificationResult:
        """
        Check the callback signature and, if it matches, mint a bill and mark
        the session paid.

        A paid session is verified again (and billed again) unless
        ``allow_paid_reverification`` is off.

        Raises:
            SessionNotFound: If the session does not exist
            InvalidSignature: If the signature does not match; nothing is written
            AlreadyPaid: If the session is paid and re-verification is disabled
            PersistenceFailure: If a snapshot write fails; nothing is committed
        """
        if await self.store.get_session(session_id) is None:
            raise SessionNotFound()

        if not verify_signature(self._secret, gateway_order_id, gateway_payment_id, supplied_signature):
            logger.warning(
                "Invalid payment signature",
                extra={"session_id": session_id, "order_id": gateway_order_id},
            )
            raise InvalidSignature()

        async with self.store.lock:
            # Re-read under the lock; the session may have been paid meanwhile
            session = await self.store.get_session(session_id)
            if session is None:
                raise SessionNotFound()
            if session.is_paid:
                if not self.allow_paid_reverification:
                    raise AlreadyPaid(f"Session already paid as {session.bill_id}")
                logger.warning(
                    "Re-verifying paid session",
                    extra={"session_id": session_id, "previous_bill_id": session.bill_id},
                )

            bill_id = next_bill_id(
                await self.store.list_bills(),
                prefix=self.bill_id_prefix,
                start=self.bill_id_start,
            )
            bill = Bill(
                bill_id=bill_id,
                session_id=session_id,
                items=session.items,
                total=session.total,
                gateway_order_id=gateway_order_id,
                gateway_payment_id=gateway_payment_id,
                timestamp=get_utc_now(),
                status=BillStatus.PAID,
            )
            paid = session.model_copy(update={"status": SessionStatus.PAID, "bill_id": bill_id})
            await self.store.commit(bill, paid)

        logger.info("Payment verified", extra={"bill_id": bill_id, "session_id": session_id})

        if self.notifier is not None and session.device_address:
            self.notifier.dispatch(session.device_address, bill_id)

        return VerificationResult(bill_id=bill_id, session_id=session_id)
