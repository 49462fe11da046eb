from __future__ import annotations

import logging
import time
import traceback

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from audit_relay.api.rate_limit import configure_rate_limits, limiter
from audit_relay.api.routes import api_router, health
from audit_relay.core.config import Settings, settings as default_settings
from audit_relay.core.errors import RelayError
from audit_relay.core.logging import configure_logging
from audit_relay.services.pagespeed_service import PageSpeedService
from audit_relay.services.quota_service import AuditQuotaTracker
from audit_relay.services.report_dispatch_service import ReportDispatchService
from audit_relay.services.whatsapp_service import WhatsAppClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(title=settings.app_name, version="0.1.0")
    app.state.settings = settings
    app.state.limiter = limiter
    configure_rate_limits(settings)
    expose_details = not settings.is_production

    @app.on_event("startup")
    async def _startup() -> None:
        configure_logging(settings.log_level)
        for name in settings.missing_credentials():
            logger.warning("%s is not set", name)

        http_client = httpx.AsyncClient(transport=http_transport)
        quota_tracker = AuditQuotaTracker(
            limit=settings.audit_limit,
            reset_interval_hours=settings.audit_reset_interval_hours,
        )
        quota_tracker.start()

        app.state.http_client = http_client
        app.state.quota_tracker = quota_tracker
        app.state.pagespeed_service = PageSpeedService(settings, http_client)
        app.state.report_dispatch_service = ReportDispatchService(
            settings,
            quota_tracker,
            WhatsAppClient(settings, http_client),
        )
        logger.info("%s started (env=%s)", settings.app_name, settings.app_env)
        logger.info("CORS allowed origins: %s", ", ".join(settings.allowed_origin_list))

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        quota_tracker: AuditQuotaTracker | None = getattr(app.state, "quota_tracker", None)
        if quota_tracker is not None:
            quota_tracker.shutdown()
        http_client: httpx.AsyncClient | None = getattr(app.state, "http_client", None)
        if http_client is not None:
            await http_client.aclose()

    @app.middleware("http")
    async def _log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.0fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(RelayError)
    async def _relay_error(request: Request, exc: RelayError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response(expose_details=expose_details),
        )

    @app.exception_handler(RateLimitExceeded)
    async def _rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning("Rate limit hit on %s", request.url.path)
        response = JSONResponse(status_code=429, content={"success": False, "message": exc.detail})
        return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        content = {"success": False, "message": "Invalid request body"}
        if expose_details:
            content["errors"] = [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg")} for error in exc.errors()
            ]
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            content = {"success": False, "message": "Endpoint not found", "path": request.url.path}
        else:
            content = {"success": False, "message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        content = {"success": False, "message": "Internal server error"}
        if expose_details:
            content["error"] = str(exc)
            content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(status_code=500, content=content)

    app.include_router(health.router)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/", tags=["health"])
    async def root() -> dict[str, str]:
        return {"message": f"{settings.app_name} ready"}

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    run()
