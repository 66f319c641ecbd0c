import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskhub.config import Settings, settings as default_settings
from taskhub.database import Database
from taskhub.exception_handlers import register_exception_handlers
from taskhub.middleware.logging import AccessLogMiddleware, configure_logging
from taskhub.routes import auth, health, projects, tasks, tenants, users

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Create the FastAPI application.

    A prebuilt ``database`` may be passed in (tests do this); otherwise one is
    built from settings. Either way it lives on ``app.state.database``.
    """
    settings = settings or default_settings
    configure_logging(settings.log_level, json_format=settings.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up the application...")
        if settings.debug or settings.database_url.startswith("sqlite"):
            await app.state.database.create_all()
            logger.info("Database tables created (if not existing).")
        yield
        logger.info("Shutting down the application...")
        await app.state.database.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant project and task management API",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AccessLogMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/api/auth")
    app.include_router(tenants.router, prefix="/api/tenants")
    app.include_router(users.tenant_user_router, prefix="/api/tenants")
    app.include_router(users.router, prefix="/api/users")
    app.include_router(projects.router, prefix="/api/projects")
    app.include_router(tasks.project_task_router, prefix="/api/projects")
    app.include_router(tasks.router, prefix="/api/tasks")
    app.include_router(health.router, prefix="/api")

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=default_settings.debug)
