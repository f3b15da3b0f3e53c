"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vulcan.api.exceptions import register_exception_handlers
from vulcan.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from vulcan.api.routers import components, guides, health, projects, rules
from vulcan.config import get_settings, validate_config
from vulcan.database import close_db, init_db
from vulcan.logging_config import configure_logging, get_logger

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging()
    logger.info("Starting Vulcan", environment=settings.environment)

    # Validate configuration (strict mode in production)
    validate_config(settings, strict=settings.is_production)
    logger.info("Configuration validated")

    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down Vulcan")
    await close_db()
    logger.info("Database connections closed")


API_DESCRIPTION = """
# Vulcan API

Author security guidance for a component from Security Requirements Guides.

## Features

- **Guide import**: Upload XCCDF benchmarks (SRGs) and keep their rules as canonical templates
- **Components**: Derive a component's rules from a guide, a spreadsheet, or another component
- **Overlays**: Build a component on top of a released one
- **Review**: Lock reviewed rules and release a component once every rule is locked
- **Export**: Download a component's rules as CSV

## Core Concepts

- **SRG**: Security Requirements Guide, a benchmark of generic security rules
- **Component**: A prefixed container of rules scoped to a project
- **Satisfies**: One rule fulfilling the intent of another rule of the same component
- **Release**: Irreversible; requires every rule to be locked
"""

OPENAPI_TAGS = [
    {
        "name": "health",
        "description": "Health check endpoints for monitoring"
    },
    {
        "name": "projects",
        "description": "Projects that own components"
    },
    {
        "name": "guides",
        "description": "Security Requirements Guide upload, listing and removal"
    },
    {
        "name": "components",
        "description": "Component creation, duplication, overlay, release and export"
    },
    {
        "name": "rules",
        "description": "Rule review locks, edits and satisfies relationships"
    },
]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=API_DESCRIPTION,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        license_info={
            "name": "Apache-2.0",
        },
    )

    # Configure middleware (order matters - first added = last executed)
    # Security headers (runs last)
    app.add_middleware(SecurityHeadersMiddleware)

    # Request logging (runs early to capture all requests)
    app.add_middleware(RequestLoggingMiddleware)

    # CORS (runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
    app.include_router(projects.router, prefix=settings.api_prefix, tags=["projects"])
    app.include_router(guides.router, prefix=settings.api_prefix, tags=["guides"])
    app.include_router(components.router, prefix=settings.api_prefix, tags=["components"])
    app.include_router(rules.router, prefix=settings.api_prefix, tags=["rules"])

    register_exception_handlers(app)

    return app


app = create_app()
