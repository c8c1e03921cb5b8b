"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import Settings, settings
from database.engine import AsyncSessionLocal, init_db, close_db
from api.routes import health
from api.routes.v1 import (
    admin,
    applications,
    auth,
    jobs,
    positions,
    question_options,
)
from api.services.auth import ensure_default_admin

# Import middleware components
from core.middleware import (
    AuthenticationMiddleware,
    ErrorHandlingMiddleware,
    RateLimitMiddleware,
    StructuredLoggingMiddleware,
    default_rules,
    setup_error_handlers,
    setup_logging,
)

logger = logging.getLogger(__name__)


def build_lifespan(redis_client: Optional[redis.Redis] = None):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create tables and the default admin on startup; release connections on shutdown."""
        logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
        await init_db()
        async with AsyncSessionLocal() as session:
            await ensure_default_admin(session)

        yield

        logger.info(f"Shutting down {settings.app_name}")
        if redis_client is not None:
            await redis_client.aclose()
        await close_db()

    return lifespan


def create_app(app_settings: Settings = settings) -> FastAPI:
    """
    Build the application.

    Middleware executes in reverse order of registration, so the request
    path is CORS -> error handling -> logging -> rate limiting ->
    authentication -> routes.
    """
    redis_client = None
    if app_settings.rate_limit_enabled:
        redis_client = redis.from_url(
            app_settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
        )

    app = FastAPI(
        title=app_settings.app_name,
        description="Job postings and application management API",
        version=health.VERSION,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        lifespan=build_lifespan(redis_client),
    )

    setup_error_handlers(app)

    # 1. Authentication (innermost - only routes see the admin identity)
    app.add_middleware(
        AuthenticationMiddleware,
        jwt_secret=app_settings.jwt_secret_key,
        jwt_algorithm=app_settings.jwt_algorithm,
        api_prefix=app_settings.api_prefix,
    )

    # 2. Rate limiting (optional)
    if redis_client is not None:
        app.add_middleware(
            RateLimitMiddleware,
            redis_client=redis_client,
            rules=default_rules(
                app_settings.api_prefix,
                per_minute=app_settings.rate_limit_per_minute,
                login_per_minute=app_settings.rate_limit_login_per_minute,
            ),
            key_prefix="careers:ratelimit",
        )

    # 3. Structured logging
    app.add_middleware(
        StructuredLoggingMiddleware,
        log_request_body=app_settings.log_request_body,
        max_body_size=app_settings.log_max_body_size,
    )

    # 4. Error handling (catches whatever the exception handlers did not)
    app.add_middleware(
        ErrorHandlingMiddleware,
        expose_details=not app_settings.is_production,
    )

    # 5. CORS (outermost - preflight requests never reach authentication)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-request-id"],
    )

    app.include_router(health.router)

    for module in (auth, positions, jobs, question_options, applications, admin):
        app.include_router(module.router, prefix=app_settings.api_prefix)

    return app


# Setup logging first, before anything else logs
setup_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
