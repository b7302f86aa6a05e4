"""API Dependencies

Components are built once in the application lifespan and kept on
``app.state``; these getters hand them to route handlers.
"""

from fastapi import Request

from smartcart.config import Settings
from smartcart.services.gateway_service import RazorpayGateway
from smartcart.services.payment_service import PaymentVerifier
from smartcart.services.session_service import SessionService
from smartcart.store import BaseStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> BaseStore:
    return request.app.state.store


def get_session_service(request: Request) -> SessionService:
    return request.app.state.session_service


def get_payment_verifier(request: Request) -> PaymentVerifier:
    return request.app.state.payment_verifier


def get_gateway(request: Request) -> RazorpayGateway:
    return request.app.state.gateway
