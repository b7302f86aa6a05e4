"""Shared pytest fixtures for unit and integration tests."""

import os

# Settings are read at import time; give the suite a self-contained environment
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test_signing_secret")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from smartcart.config import settings
from smartcart.core.security import compute_signature
from smartcart.main import close_components, create_app, init_components
from smartcart.services.gateway_service import GatewayOrder, RazorpayGateway
from smartcart.services.notification_service import NotificationDispatcher
from smartcart.services.payment_service import PaymentVerifier
from smartcart.services.session_service import SessionService
from smartcart.store import MemoryStore

TEST_SECRET = settings.RAZORPAY_KEY_SECRET

MILK = [{"name": "Milk", "quantity": 2, "unitPrice": 50}]


def sign(order_id: str, payment_id: str, secret: str = TEST_SECRET) -> str:
    """Signature the gateway would attach to this callback."""
    return compute_signature(secret, order_id, payment_id)


@pytest.fixture
async def store() -> MemoryStore:
    store = MemoryStore()
    await store.load()
    return store


@pytest.fixture
def mock_notifier() -> MagicMock:
    notifier = MagicMock(spec=NotificationDispatcher)
    notifier.aclose = AsyncMock()
    return notifier


@pytest.fixture
def mock_gateway() -> MagicMock:
    gateway = MagicMock(spec=RazorpayGateway)
    gateway.key_id = settings.RAZORPAY_KEY_ID
    gateway.create_order = AsyncMock(
        return_value=GatewayOrder(order_id="order_TEST123", amount=10000, currency="INR")
    )
    gateway.aclose = AsyncMock()
    return gateway


@pytest.fixture
def session_service(store: MemoryStore) -> SessionService:
    return SessionService(store)


@pytest.fixture
def verifier(store: MemoryStore, mock_notifier: MagicMock) -> PaymentVerifier:
    return PaymentVerifier(store, TEST_SECRET, notifier=mock_notifier)


@pytest.fixture
async def test_app(store: MemoryStore, mock_gateway: MagicMock, mock_notifier: MagicMock):
    """App wired to the in-memory store and mocked outbound collaborators."""
    app = create_app()
    await init_components(app, store=store, gateway=mock_gateway, notifier=mock_notifier)
    yield app
    await close_components(app)


@pytest.fixture
def api_base() -> str:
    return f"http://test{settings.API_PREFIX}"


@pytest.fixture
async def async_client(test_app, api_base: str):
    transport = ASGITransport(app=test_app)
    client = AsyncClient(transport=transport, base_url=api_base, timeout=30.0)
    yield client
    await client.aclose()
