"""Centralized Enum Definitions"""

import enum


class SessionStatus(str, enum.Enum):
    """Checkout session lifecycle; ``paid`` is terminal"""
    PENDING = "pending"
    PAID = "paid"


class BillStatus(str, enum.Enum):
    """Bills only exist once paid"""
    PAID = "paid"


class StorageBackend(str, enum.Enum):
    JSON = "json"
    MEMORY = "memory"
