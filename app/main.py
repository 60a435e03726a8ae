"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.responses import JSONResponse, Response
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.api import admin, blog, locations, search, submissions
from app.api.dependencies import get_location_cache, require_admin_secret
from app.core.config import get_settings
from app.core.errors import NotFound, PameKidsError, PermissionDenied, RemoteUnavailable, ValidationError
from app.core.logger import get_logger
from app.core.logging_config import configure_logging
from app.core.readiness import collect_readiness_status

configure_logging()
logger = get_logger(__name__)
settings = get_settings()

_ERROR_STATUS_CODES: dict[type[PameKidsError], int] = {
    NotFound: 404,
    PermissionDenied: 403,
    ValidationError: 422,
    RemoteUnavailable: 503,
}


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _resolve_docs_mode(mode: str) -> str:
    normalized = (mode or "").strip().lower()
    if normalized in {"disabled", "secret", "public"}:
        return normalized
    logger.warning("Invalid DOCS_MODE value, falling back to disabled: %s", mode)
    return "disabled"


def _configure_proxy_headers(app_: FastAPI) -> None:
    if not settings.PROXY_HEADERS_ENABLED:
        return

    trusted_hosts = _split_csv(settings.PROXY_TRUSTED_HOSTS) or ["127.0.0.1"]
    app_.add_middleware(ProxyHeadersMiddleware, trusted_hosts=trusted_hosts)


def _configure_trusted_hosts(app_: FastAPI) -> None:
    trusted_hosts = _split_csv(settings.TRUSTED_HOSTS)
    if not trusted_hosts:
        return

    app_.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)


def _configure_cors(app_: FastAPI) -> None:
    origins = _split_csv(settings.CORS_ALLOW_ORIGINS)
    if not origins:
        return

    allow_methods = _split_csv(settings.CORS_ALLOW_METHODS) or ["GET"]
    allow_headers = _split_csv(settings.CORS_ALLOW_HEADERS) or ["Content-Type", "x-admin-secret"]
    allow_credentials = settings.CORS_ALLOW_CREDENTIALS

    if "*" in origins and allow_credentials:
        logger.warning("CORS_ALLOW_ORIGINS contains '*' with CORS_ALLOW_CREDENTIALS=true; forcing credentials off.")
        allow_credentials = False

    app_.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=allow_methods,
        allow_headers=allow_headers,
    )


@asynccontextmanager
async def lifespan(app_: FastAPI):
    yield
    # Background refreshes hold store calls; let them settle before exit.
    if get_location_cache.cache_info().currsize:
        await get_location_cache().drain_background_refreshes()


docs_mode = _resolve_docs_mode(settings.DOCS_MODE)

app = FastAPI(
    title="PameKids API",
    lifespan=lifespan,
    docs_url="/docs" if docs_mode == "public" else None,
    redoc_url="/redoc" if docs_mode == "public" else None,
    openapi_url="/openapi.json" if docs_mode == "public" else None,
)

_configure_proxy_headers(app)
_configure_trusted_hosts(app)
_configure_cors(app)

app.include_router(locations.router)
app.include_router(search.router)
app.include_router(blog.router)
app.include_router(submissions.router)
app.include_router(admin.router)


@app.middleware("http")
async def add_security_headers(request: Request, call_next) -> Response:
    """Attach baseline security headers."""
    response = await call_next(request)
    if not settings.SECURITY_HEADERS_ENABLED:
        return response

    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    response.headers.setdefault("Cache-Control", "no-store")
    if settings.ENABLE_HSTS and request.url.scheme == "https":
        response.headers.setdefault("Strict-Transport-Security", f"max-age={settings.HSTS_MAX_AGE_SECONDS}")
    return response


@app.exception_handler(PameKidsError)
async def domain_exception_handler(request: Request, exc: PameKidsError) -> JSONResponse:
    """Map domain errors to status codes; unclassified store errors become 500."""
    status_code = next(
        (code for error_type, code in _ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        500,
    )
    if status_code == 500:
        logger.error("Unclassified error on %s %s: %s", request.method, request.url.path, exc)
        message = exc.message if settings.EXPOSE_INTERNAL_ERRORS else "An internal server error occurred."
    else:
        logger.info("Request failed on %s %s: code=%s", request.method, request.url.path, exc.code)
        message = exc.message
    return JSONResponse(status_code=status_code, content={"detail": message, "code": exc.code})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render unexpected exceptions in the standard error shape."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    message = str(exc) if settings.EXPOSE_INTERNAL_ERRORS else "An internal server error occurred."
    return JSONResponse(status_code=500, content={"detail": message})


if docs_mode == "secret":

    @app.get("/openapi.json", include_in_schema=False, dependencies=[Depends(require_admin_secret)])
    def openapi_json() -> JSONResponse:
        """Return the OpenAPI schema after admin authentication."""
        return JSONResponse(app.openapi())

    @app.get("/docs", include_in_schema=False, dependencies=[Depends(require_admin_secret)])
    def swagger_ui() -> Response:
        return get_swagger_ui_html(openapi_url="/openapi.json", title=f"{app.title} - Swagger UI")

    @app.get("/redoc", include_in_schema=False, dependencies=[Depends(require_admin_secret)])
    def redoc_ui() -> Response:
        return get_redoc_html(openapi_url="/openapi.json", title=f"{app.title} - ReDoc")


@app.get("/")
def health_check() -> dict:
    """Health check."""
    return {"status": "ok", "message": "PameKids API is running"}


@app.get("/health/ready")
async def readiness_check() -> JSONResponse:
    """Readiness of the store and external APIs; 503 when a required check fails."""
    result = await collect_readiness_status()
    status_code = 200 if result["status"] == "ready" else 503
    return JSONResponse(status_code=status_code, content=result)
