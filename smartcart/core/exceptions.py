"""Checkout error taxonomy.

Every error the core raises derives from ``CheckoutError`` and carries the
machine-readable ``code`` and HTTP ``status_code`` used by the API layer to
render the standard error envelope. Nothing here is retried by the server.
"""

from typing import Optional


class CheckoutError(Exception):
    """Base class for all checkout/payment errors"""

    code = "CHECKOUT_ERROR"
    status_code = 500
    default_message = "Checkout error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(CheckoutError):
    """Malformed or missing caller input"""

    code = "INVALID_REQUEST"
    status_code = 400
    default_message = "Invalid request"


class NotFound(CheckoutError):
    code = "RESOURCE_NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class SessionNotFound(NotFound):
    code = "SESSION_NOT_FOUND"
    default_message = "Session not found"


class BillNotFound(NotFound):
    code = "BILL_NOT_FOUND"
    default_message = "Bill not found"


class InvalidSignature(CheckoutError):
    """Gateway callback signature did not match; the payment flow must restart"""

    code = "INVALID_SIGNATURE"
    status_code = 400
    default_message = "Invalid signature"


class AlreadyPaid(CheckoutError):
    code = "SESSION_ALREADY_PAID"
    status_code = 409
    default_message = "Session already paid"


class GatewayFailure(CheckoutError):
    """Upstream payment gateway call failed"""

    code = "GATEWAY_FAILURE"
    status_code = 502
    default_message = "Failed to create order"


class PersistenceFailure(CheckoutError):
    """A durable write failed; the in-flight request is aborted"""

    code = "PERSISTENCE_FAILURE"
    status_code = 500
    default_message = "Failed to persist state"


class NotificationFailure(CheckoutError):
    """Best-effort device callback failed. Logged and swallowed by the dispatcher."""

    code = "NOTIFICATION_FAILURE"
    default_message = "Could not notify device"


class ConfigurationError(CheckoutError):
    code = "CONFIGURATION_ERROR"
    default_message = "Service misconfigured"
