"""Warden FastAPI application."""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError
from starlette.exceptions import HTTPException as StarletteHTTPException

from warden.api import admin, auth, comments, health, notifications, posts, ws
from warden.core.config import settings
from warden.core.errors import STATUS_BY_KIND, AppError, ErrorSource, classify_db_error
from warden.schemas.common import ErrorResponse

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    responses={code: {"model": ErrorResponse} for code in sorted(set(STATUS_BY_KIND.values()))},
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_body(message: str, sources: list[ErrorSource], exc: Exception | None = None) -> dict:
    """Build the {success, message, errorSources} body shared by every error response."""
    body: dict = {
        "success": False,
        "message": message,
        "errorSources": [{"path": s.path, "message": s.message} for s in sources],
    }
    if exc is not None and settings.is_development:
        body["error"] = repr(exc)
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.sources, exc))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, [ErrorSource(path="", message=message)]),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    sources = [
        ErrorSource(
            path=".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            message=err.get("msg", "Invalid value"),
        )
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=error_body("Validation Error", sources))


@app.exception_handler(DBAPIError)
async def db_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    mapped = classify_db_error(exc)
    if mapped.status_code >= 500:
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    elif settings.is_development:
        logger.warning("Database error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=mapped.status_code, content=error_body(mapped.message, mapped.sources, exc))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body("Something went wrong!", [ErrorSource(path="", message=str(exc))], exc),
    )


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(posts.router)
app.include_router(comments.router)
app.include_router(admin.router)
app.include_router(notifications.router)
app.include_router(ws.router)
