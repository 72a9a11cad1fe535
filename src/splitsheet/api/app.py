"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..registry import WorkbookRegistry
from .routes import register_exception_handlers, router

# Global registry instance
_registry: Optional[WorkbookRegistry] = None


def get_registry() -> WorkbookRegistry:
    """Get the global workbook registry."""
    global _registry
    if _registry is None:
        _registry = WorkbookRegistry()
    return _registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    registry = get_registry()
    await registry.initialize()
    yield
    # Shutdown
    await registry.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SplitSheet",
        description="Trip expense splitting backed by Google Sheets",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # API routes
    app.include_router(router, prefix="/api")

    return app
