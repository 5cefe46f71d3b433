"""Bugwatch Core FastAPI application."""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import get_settings
from ..database import create_schema, dispose_engine, init_engine, session_factory
from ..work_items import InMemoryWorkItemQueue, WorkItemWorker
from .routers import organizations, projects, tokens

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("bugwatch-core")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_engine(settings.database_url)
    if settings.create_schema_on_startup:
        await create_schema()
        logger.info("Database schema created")

    app.state.work_queue = InMemoryWorkItemQueue()
    worker_task = None
    if settings.run_jobs_in_process:
        worker = WorkItemWorker(app.state.work_queue, session_factory())
        worker_task = asyncio.create_task(worker.run())

    logger.info("Starting Bugwatch Core API")
    try:
        yield
    finally:
        if worker_task is not None:
            worker_task.cancel()
            try:
                await worker_task
            except asyncio.CancelledError:
                pass
        await dispose_engine()
        logger.info("Bugwatch Core API stopped")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Bugwatch Core API",
        description="Organizations, projects and api tokens for Bugwatch",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(organizations.router, prefix="/api/v2/organizations")
    app.include_router(projects.router, prefix="/api/v2/projects")
    app.include_router(tokens.router, prefix="/api/v2/tokens")

    @app.get("/")
    def root():
        """Root endpoint with server info."""
        return {
            "name": "Bugwatch Core API",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
