"""
FastAPI Application Factory.

Usage:
    # Development
    uvicorn api.app:create_app --factory --reload

    # Production
    uvicorn api.app:app --host 0.0.0.0 --port 8000 --workers 4

    # Or use the convenience function
    from api.app import create_app
    app = create_app()
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog.store import get_catalog_store
from config.settings import get_settings
from core.errors import (
    InputError,
    InsufficientCandidatesError,
    NotFoundError,
    ShoppingEngineError,
    TemplateResolutionError,
)
from core.logging import configure_logging, get_logger
from core.middleware import RequestTracingMiddleware


logger = get_logger(__name__)


# Error class -> HTTP status
ERROR_STATUS = (
    (InputError, 400),
    (NotFoundError, 404),
    (InsufficientCandidatesError, 422),
    (TemplateResolutionError, 422),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Runs on startup:
    - Initialize logging
    - Warm the catalog snapshot

    Runs on shutdown:
    - Log shutdown
    """
    settings = get_settings()

    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else "INFO",
    )

    logger.info(
        "Starting outfit search API",
        environment=settings.environment,
        port=settings.port,
    )

    if getattr(app.state, "warm_catalog", True):
        products = get_catalog_store().get()
        logger.info("Catalog warmed", products=len(products))

    yield  # Application is running

    logger.info("Shutting down outfit search API")


async def shopping_error_handler(request: Request, exc: ShoppingEngineError) -> JSONResponse:
    status_code = 500
    for error_class, code in ERROR_STATUS:
        if isinstance(exc, error_class):
            status_code = code
            break

    log = logger.warning if status_code < 500 else logger.error
    log(
        "Request failed",
        path=request.url.path,
        status_code=status_code,
        error=type(exc).__name__,
        message=exc.message,
    )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def create_app(warm_catalog: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        warm_catalog: If True, build the catalog snapshot at startup

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title="Outfit Search API",
        description="""
        Product search and tiered outfit bundles over an in-memory catalog.

        ## Main Endpoints

        - `POST /api/search` - Ranked search with constraint chips and follow-ups
        - `POST /api/cart/build` - Budget / Balanced / Premium outfit bundles
        - `POST /api/compare/verdict` - Two-product comparison
        - `POST /api/product/insight` - Single-product insight and alternatives
        - `GET /api/products/{id}` - Product lookup

        ## Health Checks

        - `/health` - Basic health check
        - `/ready` - Readiness probe (catalog loaded)
        - `/live` - Liveness probe
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.warm_catalog = warm_catalog

    # =========================================================================
    # Middleware (order matters - first added = outermost)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request tracing (adds X-Request-ID, logs timing)
    app.add_middleware(RequestTracingMiddleware)

    app.add_exception_handler(ShoppingEngineError, shopping_error_handler)

    # =========================================================================
    # Routes
    # =========================================================================

    from api.routes.health import router as health_router
    app.include_router(health_router)

    from api.routes.search import router as search_router
    app.include_router(search_router)

    from api.routes.cart import router as cart_router
    app.include_router(cart_router)

    from api.routes.products import router as products_router
    app.include_router(products_router)

    return app


# Create default app instance for uvicorn
# Usage: uvicorn api.app:app
app = create_app()
