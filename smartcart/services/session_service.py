"""Session Service - checkout sessions created by cart devices"""

import uuid
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from smartcart.core.exceptions import InvalidRequest, SessionNotFound
from smartcart.core.logging import get_logger
from smartcart.models import LineItem, Session, SessionStatus
from smartcart.store import BaseStore

logger = get_logger(__name__)


class SessionService:
    """Creates and looks up sessions. Status changes belong to PaymentVerifier."""

    def __init__(self, store: BaseStore):
        self.store = store

    async def create_session(
        self,
        items: Optional[Iterable[Union[LineItem, dict]]],
        total: Optional[Any],
        device_address: Optional[str] = None,
    ) -> Session:
        """
        Store a new pending session.

        The declared total is kept as given; a mismatch with the item lines
        is logged but accepted since the device may apply discounts or tax.

        Raises:
            InvalidRequest: If items are missing/empty, total is missing, or
                a line or the total fails validation
            PersistenceFailure: If the sessions snapshot cannot be written
        """
        items = list(items or [])
        if not items or total is None:
            raise InvalidRequest("Missing items or total")

        try:
            session = Session(
                session_id=str(uuid.uuid4()),
                items=[LineItem.model_validate(item) for item in items],
                total=total,
                status=SessionStatus.PENDING,
                device_address=(device_address or "").strip() or None,
            )
        except ValidationError as e:
            raise InvalidRequest(f"Invalid order: {e.errors()[0]['msg']}") from e

        computed = round(sum(item.line_total for item in session.items), 2)
        if abs(computed - session.total) >= 0.01:
            logger.warning(
                "Declared total differs from item lines",
                extra={
                    "session_id": session.session_id,
                    "declared_total": session.total,
                    "computed_total": computed,
                },
            )

        await self.store.put_session(session)
        logger.info(
            "Order created",
            extra={"session_id": session.session_id, "total": session.total},
        )
        return session

    async def get_session(self, session_id: str) -> Session:
        """
        Raises:
            SessionNotFound: If no session has this id
        """
        session = await self.store.get_session(session_id)
        if session is None:
            raise SessionNotFound()
        return session
