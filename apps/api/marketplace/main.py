from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketplace.core.config import settings
from marketplace.core.errors import AppError, ErrorKind, TooManyRequestsError
from marketplace.db import SessionLocal, engine
from marketplace.db.seed import seed_all
from marketplace.models import Base
from marketplace.schemas.common import ErrorBody, ErrorDetail

from marketplace.routes.auth import router as auth_router
from marketplace.routes.categories import router as categories_router
from marketplace.routes.documents import router as documents_router
from marketplace.routes.images import router as images_router
from marketplace.routes.inquiries import router as inquiries_router
from marketplace.routes.pages import router as pages_router
from marketplace.routes.vehicles import router as vehicles_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ============================================================
# DB table creation + seed (DEV ONLY)
# - In production, prefer Alembic migrations.
# - Guarded so a transient DB outage doesn't prevent app startup.
# ============================================================
@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.RUN_CREATE_ALL:
        try:
            Base.metadata.create_all(bind=engine)
            with SessionLocal() as db:
                seed_all(db)
            logger.info("DB tables ensured via create_all (RUN_CREATE_ALL=true).")
        except Exception:
            logger.exception("create_all / seed failed; continuing startup without it.")
    yield


# FastAPI app
app = FastAPI(
    title="Vehicle Marketplace API",
    version="1.0.0",
    lifespan=lifespan,
)

# ============================================================
# CORS
# - Include localhost for dev and FRONTEND_URL for production.
# ============================================================
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
]

frontend_url = settings.FRONTEND_URL
if isinstance(frontend_url, str) and frontend_url.strip():
    origins.append(frontend_url.strip())

# Deduplicate + drop empties
allow_origins = sorted({o for o in origins if o})

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================
# Security headers (全レスポンスに付与)
# ============================================================
SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


API_PREFIX = "/api"


# ========================================
# Error handlers
# 全エラーを {"error": {code, message, details}} に揃える
# ========================================
def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers=None,  # noqa: ANN001
) -> JSONResponse:
    body = ErrorBody(error=ErrorDetail(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True), headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.kind == ErrorKind.INTERNAL:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code)

    headers = None
    if exc.kind == ErrorKind.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, TooManyRequestsError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


def _field_name(loc) -> str:  # noqa: ANN001
    # ("body", "customerEmail") -> "customerEmail"
    parts: List[str] = [str(p) for p in loc if p not in ("body", "query", "path", "header", "form")]
    return ".".join(parts) or "body"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [{"field": _field_name(e.get("loc", ())), "message": e.get("msg", "Invalid value")} for e in exc.errors()]
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Validation failed",
        {"errors": errors},
    )


HTTP_ERROR_CODES = {
    401: "UNAUTHORIZED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error_response(exc.status_code, code, message, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Internal server error")


# ========================================
# Health Endpoint
# ========================================
@app.api_route("/health", methods=["GET", "HEAD"], status_code=status.HTTP_200_OK)
def health_check():
    """Health check endpoint for uptime monitoring."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        return {
            "status": "ok",
            "service": "marketplace-api",
            "version": "1.0.0",
            "database": "connected",
        }

    except SQLAlchemyError:
        return {
            "status": "error",
            "service": "marketplace-api",
            "database": "disconnected",
        }


# Routers
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(categories_router, prefix=API_PREFIX)
app.include_router(vehicles_router, prefix=API_PREFIX)
app.include_router(images_router, prefix=API_PREFIX)
app.include_router(inquiries_router, prefix=API_PREFIX)
app.include_router(pages_router, prefix=API_PREFIX)
app.include_router(documents_router, prefix=API_PREFIX)
