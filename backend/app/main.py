import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import Settings
from routes.videos import router as videos_router
from services.catalog import ClipCatalog, InMemoryClipCatalog, SqliteClipCatalog, load_clips
from services.database import Database
from services.processor import JobProcessor
from services.renderer import Renderer, SimulatedRenderer
from services.store import InMemoryJobStore, JobStore, SqliteJobStore

logger = logging.getLogger(__name__)


def _build_backends(settings: Settings) -> tuple[ClipCatalog, JobStore]:
    if settings.store_backend == "sqlite":
        database = Database(settings.resolved_database_path)
        database.init_schema()
        return SqliteClipCatalog(database), SqliteJobStore(database)
    return InMemoryClipCatalog(), InMemoryJobStore()


def create_app(
    settings: Settings | None = None,
    *,
    catalog: ClipCatalog | None = None,
    job_store: JobStore | None = None,
    renderer: Renderer | None = None,
) -> FastAPI:
    """
    Build the API with its collaborators attached to ``app.state``.

    Collaborators are created eagerly (not in the lifespan) so the app also
    works under transports that skip startup events.
    """
    settings = settings or Settings.from_env()
    if catalog is None or job_store is None:
        default_catalog, default_store = _build_backends(settings)
        catalog = default_catalog if catalog is None else catalog
        job_store = default_store if job_store is None else job_store
    if settings.clip_catalog_path:
        for clip in load_clips(settings.clip_catalog_path):
            catalog.add(clip)

    settings.generated_dir.mkdir(parents=True, exist_ok=True)
    renderer = renderer or SimulatedRenderer(
        output_dir=settings.generated_dir,
        delay_seconds=settings.render_delay_seconds,
    )
    processor = JobProcessor(
        job_store,
        renderer,
        work_root=settings.storage_path,
        cleanup_delay_seconds=settings.cleanup_delay_seconds,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("[main] ClipMosaic API up (store=%s, storage=%s)", settings.store_backend, settings.storage_path)
        try:
            yield
        finally:
            await processor.drain()

    app = FastAPI(title="ClipMosaic API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.catalog = catalog
    app.state.job_store = job_store
    app.state.processor = processor

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    app.include_router(videos_router, prefix="/api")
    # Only rendered outputs are public; the database and working areas share storage_path.
    app.mount("/api/videos/generated", StaticFiles(directory=settings.generated_dir), name="videos")
    return app
