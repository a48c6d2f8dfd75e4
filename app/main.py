"""
Entry Point
"""

import secrets
from contextlib import asynccontextmanager
from time import perf_counter

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request
from fastmcp import FastMCP
from fastmcp.server.auth.providers.debug import DebugTokenVerifier
from ulid import ULID

from app.api.validation import router as validation_router
from app.context.validator import server as validator_server
from app.core.config import settings
from app.core.log import logger
from app.schema.status import HealthCheckResponse, IndexResponse

exec_id = ULID()
start_time = perf_counter()


def _health() -> HealthCheckResponse:
    return HealthCheckResponse(
        status="ok",
        version=settings.PROJECT_VERSION,
        uptime=perf_counter() - start_time,
        exec_id=exec_id,
    )


verifier = DebugTokenVerifier(
    validate=lambda token: secrets.compare_digest(token, settings.APP_AUTH_KEY),
    client_id="mcp-client",
    scopes=["read"],
)

mcp_server = FastMCP(
    "ARModelValidator",
    version=settings.PROJECT_VERSION,
    auth=verifier,
)


@mcp_server.resource("resource://health_check")
async def get_health() -> str:
    """Provides platform information"""
    return _health().model_dump_json()


mcp_server.mount(validator_server, namespace="validator")
mcp_app = mcp_server.http_app(path="/mcp")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan for FastMCP application"""
    async with mcp_app.lifespan(app):
        logger.info(f"Starting up {settings.PROJECT_NAME} v{settings.PROJECT_VERSION}")
        logger.info(f"Debug mode: {settings.DEBUG}")
        logger.info(f"Listening on: {settings.APP_HOST}:{settings.APP_PORT} - Workers: {settings.APP_WORKERS}")
        logger.info(f"Max upload: {settings.MAX_UPLOAD_SIZE_MB}MB - Exec ID: {exec_id}")
        try:
            yield
        finally:
            logger.info(f"Shutting down {settings.PROJECT_NAME}...")


app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    docs_url="/docs",
    redoc_url=None,
)

app.add_middleware(
    CorrelationIdMiddleware,
    generator=lambda: str(ULID()),
    validator=None,
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log method, path, status, and duration for every HTTP request."""
    t0 = perf_counter()
    response = await call_next(request)
    duration_ms = (perf_counter() - t0) * 1000
    if request.url.path != "/health":
        logger.info(
            f"{request.method} {request.url.path} "
            f"status={response.status_code} "
            f"duration={duration_ms:.1f}ms"
        )
    return response


app.include_router(validation_router)
app.mount("/app", mcp_app)


@app.get(
    "/health",
    include_in_schema=False,
)
async def health() -> HealthCheckResponse:
    """Health check endpoint"""
    return _health()


@app.get(
    "/",
    include_in_schema=False,
)
async def index() -> IndexResponse:
    return IndexResponse(message=f"{settings.PROJECT_NAME} v{settings.PROJECT_VERSION}")
