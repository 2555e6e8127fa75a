"""
FastAPI application main module.
Wires configuration, persistence, middleware, error handling and static files.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import text
import time
import uuid
from contextlib import asynccontextmanager
from posthub import __version__
from posthub.api import api_router
from posthub.config import Settings, get_settings
from posthub.database import build_engine, build_session_factory, init_db
from posthub.errors import PostHubError
from posthub.services import ImageStore
from posthub.services.image_store import PUBLIC_PREFIX
from posthub.utils import setup_logging, get_logger

logger = get_logger(__name__)


def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
            "request_id": getattr(request.state, "request_id", "unknown"),
        }
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Creates missing tables on startup and disposes the pool on shutdown.
    """
    logger.info("Application startup initiated")
    try:
        init_db(app.state.engine)
        logger.info("Database tables ready")
        yield
    except Exception as e:  # pragma: no cover
        logger.error("Application startup failed", error=str(e), exc_info=True)
        raise
    finally:
        app.state.engine.dispose()
        logger.info("Application shutdown completed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build an application bound to ``settings`` (environment by default)."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Post Hub",
        description="Posts with image galleries and affiliate links, managed with a shared admin password.",
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    # Reflect the caller's origin with credentials allowed
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_context_and_logging(request: Request, call_next):
        """
        Add request ID and timing, and log request start/completion.
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            remote_addr=request.client.host if request.client else "unknown",
            request_id=request_id
        )

        response = await call_next(request)

        process_time_ms = round((time.time() - start_time) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time_ms)
        response.headers["X-Content-Type-Options"] = "nosniff"

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=process_time_ms,
            request_id=request_id
        )
        return response

    @app.exception_handler(PostHubError)
    async def posthub_exception_handler(request: Request, exc: PostHubError):
        """Map domain errors onto their status codes."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Request failed",
            error_type=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            request_id=getattr(request.state, "request_id", "unknown"),
            method=request.method,
            path=request.url.path
        )
        return _error_response(request, exc.status_code, exc.client_message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed requests (bad id, wrong body shape) are client errors."""
        logger.warning(
            "Request validation failed",
            errors=exc.errors(),
            request_id=getattr(request.state, "request_id", "unknown"),
            path=request.url.path,
            method=request.method
        )
        return _error_response(request, 400, "Invalid request")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(request, exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Unexpected failures: details go to the log only."""
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=getattr(request.state, "request_id", "unknown"),
            path=request.url.path,
            method=request.method,
            exc_info=True
        )
        return _error_response(request, 500, "Internal server error")

    @app.get("/health", tags=["health"], summary="Health check")
    async def health_check(request: Request):
        """Service status including a database probe."""
        status = {
            "status": "healthy",
            "service": "posthub",
            "version": __version__,
            "timestamp": time.time(),
            "checks": {},
        }
        db = request.app.state.session_factory()
        try:
            db.execute(text("SELECT 1"))
            status["checks"]["database"] = "healthy"
        except Exception as e:
            logger.warning("Health check: database unavailable", error=str(e))
            status["checks"]["database"] = "unavailable"
            status["status"] = "degraded"
        finally:
            db.close()
        return status

    app.include_router(api_router, prefix="/api")

    uploads_root = ImageStore(settings.uploads_dir).ensure_root()
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=uploads_root), name="uploads")

    # Front end last: a mount at "/" matches everything not routed above
    if settings.public_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.public_dir, html=True), name="public")
    else:
        logger.info("Public directory not found; front end not served", public_dir=str(settings.public_dir))

    return app


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_file=settings.log_file, enable_console=True)
    if not settings.admin_password:
        logger.warning("ADMIN_PASSWORD is not set; all create/update/delete requests will be rejected")

    logger.info("Starting server", host=settings.host, port=settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False
    )


if __name__ == "__main__":
    run()
