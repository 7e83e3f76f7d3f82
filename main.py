import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import Base, engine
from app.exception_handlers import register_exception_handlers
from app.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from app.routes import files, items, permissions

setup_structured_logging(log_level=settings.log_level, json_format=settings.log_json)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Multi-user file manager with per-item sharing",
        debug=settings.debug,
        version=settings.app_version,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(StructuredLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(items.router, prefix="/api/v1/items")
    app.include_router(permissions.router, prefix="/api/v1/permissions")
    app.include_router(files.router, prefix="/api/v1/files")

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting %s in %s mode", settings.app_name, settings.environment)
        if settings.debug:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created (if not existing).")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down the application...")
        await engine.dispose()

    if settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
