"""Rate limiting (slowapi), keyed by client address"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from smartcart.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def create_order_limit() -> str:
    return f"{settings.RATE_LIMIT_PER_MINUTE}/minute"
