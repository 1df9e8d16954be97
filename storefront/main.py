"""Main FastAPI application."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings
from .core.auth import TokenCodec
from .core.logging import configure_logging
from .core.session import SessionIssuer
from .database import init_db, close_db
from .api.middleware import (
    RequestLoggingMiddleware,
    ErrorHandlingMiddleware,
    SecurityHeadersMiddleware,
    http_exception_handler,
    validation_exception_handler,
)
from .api.routes import order, product, user


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    configure_logging()
    await init_db()
    yield
    # Shutdown
    await close_db()


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Raises ``ConfigurationError`` when the JWT secret or expiry is unusable.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.api.title,
        description=app_settings.api.description,
        version=app_settings.api.version,
        lifespan=lifespan
    )

    # Session components, shared by every request
    token_codec = TokenCodec(app_settings.auth)
    app.state.token_codec = token_codec
    app.state.session_issuer = SessionIssuer(
        app_settings.auth,
        token_codec,
        secure_cookies=app_settings.is_production,
    )

    # Add middleware
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Include routers
    app.include_router(user.router, prefix=app_settings.api.prefix)
    app.include_router(product.router, prefix=app_settings.api.prefix)
    app.include_router(order.router, prefix=app_settings.api.prefix)

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "message": "StoreFleet API",
            "version": app_settings.api.version,
            "status": "healthy"
        }

    # Health check endpoint
    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
        workers=settings.api.workers if not settings.api.reload else 1,
    )
