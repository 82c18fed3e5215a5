import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, configure_logging
from .errors import InvalidInput, SubmissionError
from .payment_routes import router as payment_router
from .razorpay_gateway import RazorpayGateway
from .store import RecordStore
from .submission_routes import router as submission_router

logger = logging.getLogger(__name__)

# what the browser sees when a body fails validation, per endpoint
VALIDATION_MESSAGES = {
    '/api/newsletter': 'Email required',
    '/api/volunteers': 'Volunteer details must be a JSON object',
    '/api/donations': 'Name, email, amount required',
    '/api/create-order': 'Invalid amount',
    '/api/verify-payment': 'Invalid payment details',
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def submission_error_handler(request: Request, exc: SubmissionError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc.__cause__ or exc)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return _error(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    err = InvalidInput(VALIDATION_MESSAGES.get(request.url.path), detail=str(exc.errors()))
    return await submission_error_handler(request, err)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=getattr(exc, 'headers', None))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, 'Internal server error')


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None,
               gateway: Optional[RazorpayGateway] = None) -> FastAPI:
    """
    Build the API. The store and gateway are created once here and shared by
    every request through app.state.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)
    store = store or RecordStore.from_url(settings.database_url)
    gateway = gateway or RazorpayGateway(
        settings.razorpay_key_id,
        settings.razorpay_key_secret,
        base_url=settings.razorpay_base_url,
        timeout=settings.gateway_timeout,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # no requests are served against a missing store
        try:
            store.check()
        except SQLAlchemyError as e:
            logger.critical("Database connection failed: %s", e)
            raise SystemExit(1) from e
        store.create_tables()
        logger.info("Connected to database")
        if gateway.configured:
            logger.info("Razorpay initialized")
        else:
            logger.warning("Razorpay keys missing; /api/create-order will fail")
        yield

    app = FastAPI(title="Chavi Website API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.gateway = gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SubmissionError, submission_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get('/api/health')
    def health():
        return {"status": "ok", "store": store.is_available(), "gateway": gateway.configured}

    app.include_router(submission_router)
    app.include_router(payment_router)
    return app


app = create_app()


def serve():
    """Entry point for `chavi-server`."""
    import uvicorn

    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == '__main__':
    serve()
