"""FastAPI application entry point.

Community Board API - communities and their posts.
"""

import asyncio
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from community_api.metrics import Metrics
from community_api.middleware import RequestLoggingMiddleware
from community_api.routes import api_router
from community_api.schemas import ErrorResponse
from community_api.schemas import common as codes
from community_api.settings import Settings, get_settings
from community_api.stores import (
    CommunityNotFoundError,
    PostNotFoundError,
    Store,
    ValidationError,
    create_store,
)

logger = logging.getLogger("uvicorn.error")


def _error(status_code: int, code: str, message: str, detail: dict | None = None) -> JSONResponse:
    body = ErrorResponse.build(code, message, detail)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Connects the store on startup and releases it on shutdown.
    """
    store: Store = app.state.store
    await store.connect()
    logger.info(f"{type(store).__name__} connected")

    yield

    await store.close()
    logger.info(f"{type(store).__name__} closed")


def create_app(
    settings: Settings | None = None,
    store: Store | None = None,
    metrics: Metrics | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    ``store`` and ``metrics`` default to the ones named by settings; tests pass their own.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Communities and posts",
        lifespan=lifespan,
        docs_url="/swagger",
        redoc_url=None,
        openapi_url="/swagger/openapi.json",
    )
    app.state.settings = settings
    app.state.store = store if store is not None else create_store(settings)
    app.state.metrics = metrics if metrics is not None else Metrics()

    # Middleware (last added runs first)
    app.add_middleware(RequestLoggingMiddleware, metrics=app.state.metrics)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store errors -> structured HTTP errors
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, codes.VALIDATION_ERROR, str(exc), {"field": exc.field})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
        return _error(400, codes.INVALID_REQUEST_BODY, "invalid request body", {"errors": errors})

    @app.exception_handler(CommunityNotFoundError)
    async def community_not_found_handler(request: Request, exc: CommunityNotFoundError) -> JSONResponse:
        return _error(404, codes.COMMUNITY_NOT_FOUND, "community not found", {"community_id": exc.community_id})

    @app.exception_handler(PostNotFoundError)
    async def post_not_found_handler(request: Request, exc: PostNotFoundError) -> JSONResponse:
        return _error(
            404,
            codes.POST_NOT_FOUND,
            "post not found",
            {"community_id": exc.community_id, "post_id": exc.post_id},
        )

    @app.exception_handler(asyncio.TimeoutError)
    async def timeout_handler(request: Request, exc: asyncio.TimeoutError) -> JSONResponse:
        logger.warning(f"Store operation timed out: {request.method} {request.url.path}")
        return _error(504, codes.TIMEOUT, "store operation timed out")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error: {request.method} {request.url.path}")
        return _error(
            500,
            codes.INTERNAL_ERROR,
            str(exc) if settings.debug else "Internal server error",
        )

    @app.get("/healthz", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    @app.get("/metrics", tags=["health"], response_class=PlainTextResponse)
    async def metrics_endpoint(request: Request) -> PlainTextResponse:
        """Request metrics in Prometheus text format."""
        return PlainTextResponse(
            request.app.state.metrics.to_prometheus_format(),
            media_type="text/plain; version=0.0.4",
        )

    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "community_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=settings.debug,
    )
