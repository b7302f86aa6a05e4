"""Time Utilities for UTC management"""

from datetime import datetime, timezone


def get_utc_now() -> datetime:
    """Timezone-aware UTC now"""
    return datetime.now(timezone.utc)
