import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bursa_announcements.api.routes import router
from bursa_announcements.core.config import settings
from bursa_announcements.core.request_log import RequestLog, level_for_status
from bursa_announcements.fetch.http_fetcher import HttpFetcher
from bursa_announcements.services.announcements import AnnouncementService
from bursa_announcements.services.sources import source_from_settings

logger = logging.getLogger(__name__)

_ERROR_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method not allowed",
}

def create_app(
    service: Optional[AnnouncementService] = None,
    request_log: Optional[RequestLog] = None,
) -> FastAPI:
    request_log = request_log or RequestLog(settings.LOG_PATH)
    if service is None:
        # an unknown SOURCE_STRATEGY raises here, before any client is opened
        source = source_from_settings()
        service = AnnouncementService(HttpFetcher(request_log=request_log), source)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Close the shared HTTP client on shutdown."""
        yield
        close = getattr(getattr(service, "fetcher", None), "close", None)
        if close is not None:
            close()

    app = FastAPI(
        title="Bursa Announcements",
        description="Company announcements scraped from Bursa Malaysia, served as JSON",
        version="1.0.0",
        lifespan=lifespan,
        # paths match exactly; "/announcements/" is a 404, not a redirect
        redirect_slashes=False,
    )
    app.state.service = service
    app.state.request_log = request_log

    @app.middleware("http")
    async def log_and_mark_no_store(request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error for %s %s", request.method, request.url.path)
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"msg": "failed", "error": "internal server error"},
            )
        response.headers["Cache-Control"] = "no-store"
        request_log.log(
            level_for_status(response.status_code),
            request.method,
            request.url.path,
            response.status_code,
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = _ERROR_MESSAGES.get(exc.status_code, str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)

    @app.get("/")
    async def root():
        """Greeting"""
        return JSONResponse(content={"msg": "hello world"})

    app.include_router(router)
    return app

_app: Optional[FastAPI] = None

def __getattr__(name: str):
    """Build the module-level `app` on first access (for `uvicorn bursa_announcements.main:app`)."""
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
