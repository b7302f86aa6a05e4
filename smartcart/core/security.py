"""Payment Callback Signature Utilities"""

import hashlib
import hmac

from smartcart.core.exceptions import ConfigurationError


def signature_payload(gateway_order_id: str, gateway_payment_id: str) -> str:
    """Message the gateway signs: ``<order_id>|<payment_id>``"""
    return f"{gateway_order_id}|{gateway_payment_id}"


def compute_signature(secret: str, gateway_order_id: str, gateway_payment_id: str) -> str:
    """
    Compute the hex-encoded HMAC-SHA256 the gateway attaches to a payment callback.
    
    Args:
        secret: Gateway shared signing secret
        gateway_order_id: Order id issued by the gateway
        gateway_payment_id: Payment id issued by the gateway
        
    Returns:
        Lowercase hex digest
        
    Raises:
        ConfigurationError: If the secret is empty
    """
    if not secret:
        raise ConfigurationError("Gateway signing secret is not configured")
    message = signature_payload(gateway_order_id, gateway_payment_id)
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(
    secret: str,
    gateway_order_id: str,
    gateway_payment_id: str,
    supplied_signature: str,
) -> bool:
    """Constant-time comparison of the supplied signature against the expected one"""
    expected = compute_signature(secret, gateway_order_id, gateway_payment_id)
    return hmac.compare_digest(expected.encode("utf-8"), (supplied_signature or "").encode("utf-8"))
