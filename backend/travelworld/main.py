"""Travel World API — FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from travelworld.api.v1.auth import router as auth_router
from travelworld.api.v1.bookings import router as bookings_router
from travelworld.api.v1.experiences import router as experiences_router
from travelworld.api.v1.payment import router as payment_router
from travelworld.api.v1.reviews import router as reviews_router
from travelworld.api.v1.tours import router as tours_router
from travelworld.api.v1.users import router as users_router
from travelworld.config import settings
from travelworld.database import database
from travelworld.errors import AppError, ServiceUnavailable, ValidationError

# Configure root logger so all travelworld.* loggers output to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("%s %s starting (%s)", settings.app_name, settings.app_version, settings.environment)
    yield
    # Shutdown: dispose engine connections
    await database.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Tours, bookings, reviews, payments and traveller experiences.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error handlers: every failure is rendered as {"success": false, ...}
# ---------------------------------------------------------------------------


def _render(exc: AppError) -> JSONResponse:
    body = exc.to_dict()
    if exc.status_code >= 500 and not settings.is_development:
        body.pop("error", None)
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _render(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report every invalid field with 400 instead of FastAPI's default 422."""
    return _render(ValidationError.from_pydantic(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _store_unavailable(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Database unavailable during %s %s: %r", request.method, request.url.path, exc)
    return _render(ServiceUnavailable(error=str(exc)))


for _exc_type in (OperationalError, InterfaceError, PoolTimeoutError, TimeoutError, ConnectionError):
    app.add_exception_handler(_exc_type, _store_unavailable)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error during %s %s", request.method, request.url.path)
    body = {"success": False, "message": "Internal server error"}
    if settings.is_development:
        body["error"] = str(exc)
    return JSONResponse(status_code=500, content=body)


# Routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(tours_router)
app.include_router(reviews_router)
app.include_router(bookings_router)
app.include_router(payment_router)
app.include_router(experiences_router)

# Locally stored experience images
Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
