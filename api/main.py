from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from api.observability import (
    configure_logging,
    monotonic_ms,
    new_request_id,
    request_log_fields,
    reset_request_id,
    set_request_id,
)
from api.ratelimit import limiter, limiter_enabled, rate_limit_exceeded_handler
from api.routes import router
from core.config import get_settings
from core.errors import DomainError, InternalError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": {"code": code, "message": message}})


def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("domain_error", extra={"code": exc.code, "path": request.url.path, "error": exc.message})
    else:
        logger.info("domain_error", extra={"code": exc.code, "path": request.url.path, "error": exc.message})
    return _error_response(exc.status_code, exc.code, exc.message)


def database_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("database_error", extra={"path": request.url.path}, exc_info=exc)
    return _error_response(InternalError.status_code, InternalError.code, "The request could not be saved. No changes were made.")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Coachboard Assignment API", version="1.0.0")
    limiter.enabled = limiter_enabled()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.include_router(router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_and_logging(request: Request, call_next: Callable) -> Response:
        header_name = settings.request_id_header_name or "X-Request-ID"
        request_id = (request.headers.get(header_name) or "").strip() or new_request_id()
        token = set_request_id(request_id)
        started_ms = monotonic_ms()
        client_ip = getattr(request.client, "host", None)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "http_request_error",
                extra=request_log_fields(
                    method=request.method,
                    path=request.url.path,
                    status_code=500,
                    duration_ms=monotonic_ms() - started_ms,
                    client_ip=client_ip,
                ),
            )
            raise
        else:
            response.headers[header_name] = request_id
            route = request.scope.get("route")
            logger.info(
                "http_request",
                extra=request_log_fields(
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=monotonic_ms() - started_ms,
                    client_ip=client_ip,
                    route=getattr(route, "path", None),
                ),
            )
            return response
        finally:
            reset_request_id(token)

    return app


app = create_app()
