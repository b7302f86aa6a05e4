"""API Router"""

from fastapi import APIRouter

from smartcart.api.v1.endpoints import bills, payments, sessions

api_router = APIRouter()

# Paths are the ones flashed into cart firmware and the payment page; keep them stable
api_router.include_router(sessions.router, tags=["Checkout Sessions"])
api_router.include_router(payments.router, tags=["Payments"])
api_router.include_router(bills.router, tags=["Bills"])
