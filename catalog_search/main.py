"""FastAPI application wiring the catalog search service."""
from __future__ import annotations

import asyncio
import logging
import platform
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from .cache import CacheBackend, get_cache
from .catalog import CatalogStore, get_store
from .config import settings
from .models import ErrorResponse, HealthResponse, ReloadResponse, SearchResponse
from .search_service import get_query_tables, search_catalog

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# uvicorn installs its own handlers; ``force=True`` replaces them so every
# logger shares one format and level.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info(
        "Starting catalog search server env=%s python=%s catalog=%s",
        settings.environment,
        platform.python_version(),
        settings.catalog_path,
    )
    get_query_tables()
    await asyncio.to_thread(get_cache)
    if settings.load_on_startup:
        loaded = await asyncio.to_thread(get_store().reload)
        if not loaded:
            logger.warning("Server starting in DEGRADED mode (products not loaded)")
    yield
    logger.info("Shutting down catalog search server")


app = FastAPI(title="Catalog Search Service", lifespan=lifespan)

STATIC_DIR = Path(settings.static_dir)
if STATIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    logger.debug(
        "HTTP %s %s status=%s duration_ms=%.1f",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - start) * 1000,
    )
    return response


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if settings.is_development else "Something went wrong"
    return JSONResponse(status_code=500, content={"error": "Internal server error", "message": message})


@app.get("/health", response_model=HealthResponse)
async def health(store: CatalogStore = Depends(get_store)) -> JSONResponse:
    snapshot = store.snapshot
    payload = HealthResponse(
        status="ok" if snapshot.ready else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime=time.monotonic() - STARTED_AT,
        products={
            "count": snapshot.count,
            "loadedAt": snapshot.loaded_at.isoformat() if snapshot.loaded_at else None,
            "error": snapshot.error,
        },
        environment={
            "python": platform.python_version(),
            "platform": platform.system().lower(),
            "env": settings.environment,
        },
    )
    logger.info("Health check status=%s", payload.status)
    return JSONResponse(status_code=200 if snapshot.ready else 503, content=payload.model_dump())


@app.get("/search", response_model=SearchResponse, responses={503: {"model": ErrorResponse}})
async def search(
    q: str = Query("", description="Search query"),
    store: CatalogStore = Depends(get_store),
    cache: CacheBackend = Depends(get_cache),
):
    query = q.strip()
    snapshot = store.snapshot
    if not snapshot.ready:
        logger.warning("Search attempted while catalog not ready q=%r", query)
        body = ErrorResponse(
            error="Service temporarily unavailable",
            message="Product database is not loaded. Please try again in a moment.",
            query=query,
        )
        return JSONResponse(status_code=503, content=body.model_dump())

    if len(query) < settings.min_query_length:
        return SearchResponse(
            query=query,
            count=0,
            results=[],
            message=f"Query too short (minimum {settings.min_query_length} characters)",
        )

    # Blocking: full catalog scan and Redis calls.
    payload = await asyncio.to_thread(search_catalog, snapshot, query, cache)
    return SearchResponse(**payload)


@app.post("/admin/reload", response_model=ReloadResponse)
async def reload_catalog(store: CatalogStore = Depends(get_store)) -> ReloadResponse:
    logger.info("Manual reload requested")
    success = await asyncio.to_thread(store.reload)
    snapshot = store.snapshot
    return ReloadResponse(success=success, productCount=snapshot.count, error=snapshot.error)


@app.get("/{path:path}", include_in_schema=False)
async def index(path: str):
    index_path = STATIC_DIR / "index.html"
    if index_path.is_file():
        return FileResponse(index_path)
    logger.error("index.html not found at %s (requested /%s)", index_path, path)
    return PlainTextResponse("Application not found", status_code=404)
