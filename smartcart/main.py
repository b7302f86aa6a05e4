"""FastAPI Application Entry Point"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from smartcart.config import settings
from smartcart.store import BaseStore, create_store
from smartcart.core.exceptions import CheckoutError
from smartcart.core.limiter import limiter
from smartcart.core.logging import setup_logging, get_logger
from smartcart.core.middleware import (
    RequestIDMiddleware,
    RequestTimingMiddleware,
    SecurityHeadersMiddleware
)
from smartcart.schemas.responses import ErrorDetail, ErrorResponse
from smartcart.services.gateway_service import RazorpayGateway
from smartcart.services.notification_service import NotificationDispatcher
from smartcart.services.payment_service import PaymentVerifier
from smartcart.services.session_service import SessionService
from smartcart.api.v1.router import api_router

# Setup logging
setup_logging()
logger = get_logger(__name__)


async def init_components(
    app: FastAPI,
    store: Optional[BaseStore] = None,
    gateway: Optional[RazorpayGateway] = None,
    notifier: Optional[NotificationDispatcher] = None,
) -> None:
    """Build the store and services once and share them through app.state"""
    store = store or create_store(settings)
    await store.load()

    gateway = gateway or RazorpayGateway(
        key_id=settings.RAZORPAY_KEY_ID,
        key_secret=settings.RAZORPAY_KEY_SECRET,
        base_url=settings.RAZORPAY_API_URL,
        currency=settings.CURRENCY,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
    )
    notifier = notifier or NotificationDispatcher(
        timeout=settings.NOTIFY_TIMEOUT_SECONDS,
        path=settings.NOTIFY_PATH,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.gateway = gateway
    app.state.notifier = notifier
    app.state.session_service = SessionService(store)
    app.state.payment_verifier = PaymentVerifier(
        store,
        settings.RAZORPAY_KEY_SECRET,
        notifier=notifier,
        bill_id_prefix=settings.BILL_ID_PREFIX,
        bill_id_start=settings.BILL_ID_START,
        allow_paid_reverification=settings.ALLOW_PAID_REVERIFICATION,
    )


async def close_components(app: FastAPI) -> None:
    """Drain pending notifications and close outbound clients"""
    await app.state.notifier.aclose()
    await app.state.gateway.aclose()
    await app.state.store.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(
        "Starting application",
        extra={"environment": settings.ENVIRONMENT, "storage": settings.STORAGE_BACKEND},
    )
    await init_components(app)

    yield

    logger.info("Shutting down application")
    await close_components(app)


async def checkout_exception_handler(request: Request, exc: CheckoutError):
    """Render domain errors in the standard error envelope"""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        exc.message,
        extra={
            "code": exc.code,
            "path": request.url.path,
            "correlation_id": getattr(request.state, "request_id", None),
        },
    )
    body = ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors"""
    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "errors": exc.errors(),
            "correlation_id": getattr(request.state, "request_id", None),
        }
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the raw input/ctx objects, which may not serialize"""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "correlation_id": getattr(request.state, "request_id", None),
        },
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error=ErrorDetail(code="INTERNAL_ERROR", message="Internal server error")
        ).model_dump(),
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Smart cart checkout, Razorpay payment verification and bills",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(CheckoutError, checkout_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=settings.ALLOWED_METHODS,
        allow_headers=settings.ALLOWED_HEADERS,
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Basic health check endpoint"""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Service description for device setup"""
        prefix = settings.API_PREFIX
        return {
            "status": "online",
            "service": settings.APP_NAME,
            "endpoints": {
                "createOrder": f"POST {prefix}/create-order",
                "getSession": f"GET {prefix}/session/:sessionId",
                "createRazorpayOrder": f"POST {prefix}/create-razorpay-order",
                "verifyPayment": f"POST {prefix}/verify-payment",
                "getBill": f"GET {prefix}/bill/:billId",
                "getAllBills": f"GET {prefix}/bills",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "smartcart.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
