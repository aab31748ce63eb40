"""
Application FastAPI / FastAPI application.
FleetFuel Manager - cuves, pleins, rapports vehicule et tableau de bord flotte.
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from fleetfuel.api import api_router
from fleetfuel.config import settings
from fleetfuel.database import async_session, init_db
from fleetfuel.exceptions import FleetError, fleet_error_handler
from fleetfuel.rate_limit import limiter
from fleetfuel.utils.seed import seed_roles, seed_superadmin

logger = logging.getLogger("fleetfuel")
access_log = logging.getLogger("fleetfuel.access")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class JSONFormatter(logging.Formatter):
    """Une ligne JSON par evenement / One JSON line per log record."""

    def format(self, record):
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging() -> None:
    """JSON en production, format texte en DEBUG / JSON in production, plain text in DEBUG."""
    if settings.DEBUG:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        return
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logging.root.handlers = [handler]
    logging.root.setLevel(logging.INFO)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """X-Request-ID, headers de securite et ligne d'acces / request id, security headers, access line."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers.update(SECURITY_HEADERS)
        access_log.info(
            "%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms,
            extra={"request_id": request_id},
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Demarrage : verification du secret, tables, roles et superadmin / Startup checks and seeding."""
    if not settings.DEBUG and settings.SECRET_KEY == "change-me-in-production":
        raise RuntimeError("SECRET_KEY must be set outside DEBUG mode")

    await init_db()
    async with async_session() as session:
        await seed_roles(session)
        await seed_superadmin(session)
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    logger.info("%s stopped", settings.APP_NAME)


def create_app() -> FastAPI:
    configure_logging()
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Gestion carburant de flotte / Fleet fuel management: tanks, fueling records, reports",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
    )

    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    application.add_exception_handler(FleetError, fleet_error_handler)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    application.add_middleware(RequestContextMiddleware)
    application.include_router(api_router)

    @application.get("/")
    @application.get("/api/")
    async def health():
        return {"app": settings.APP_NAME, "version": settings.APP_VERSION, "status": "running"}

    return application


app = create_app()
