"""
Shotwell Viewer – browse a Shotwell photo library over HTTP (FastAPI + SQLite)

Quick start
-----------
1) python -m venv .venv && source .venv/bin/activate
2) pip install -e .
3) SHOTWELL_DBNAME=~/.local/share/shotwell/data/photo.db python app.py
4) Open http://localhost:8001 → browse events and tags

Notes
-----
• The Shotwell database is opened read-only; nothing is ever written to it.
• Scaled photos and thumbnails are cached under SHOTWELL_CACHE_DIR and never expire.
• Route patterns can be changed with SHOTWELL_PATHS='{"raw": "/original/:id/*basename"}'.
"""

import sys
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from config import Settings
from database import StoreUnavailable, make_engine
from logs import init_logging
from renditions import RenditionCache
from routes import make_templates, register_routes
from templates_static import ensure_assets


async def store_unavailable(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error("Photo library unavailable while serving {}: {}", request.url.path, exc)
    return JSONResponse({"detail": "Photo library unavailable"}, status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the viewer application."""
    settings = settings or Settings()

    app = FastAPI(title="Shotwell Viewer")
    app.state.settings = settings
    app.state.engine = make_engine(settings.database_url)
    app.state.cache = RenditionCache(settings.cache_dir)

    # Ensure templates exist
    ensure_assets(settings.templates_dir)
    app.state.templates = make_templates(settings.templates_dir)

    router = APIRouter(prefix=settings.prefix.rstrip("/"))
    register_routes(router, settings.paths)
    app.include_router(router)
    app.add_exception_handler(StoreUnavailable, store_unavailable)

    logger.info("Serving {} with renditions cached in {}", app.state.engine.url, settings.cache_dir)
    return app


def main() -> None:
    settings = Settings()
    init_logging(settings.log_level, settings.log_dir)

    # Allow `python app.py 8000`
    port = int(sys.argv[1]) if len(sys.argv) > 1 else settings.port
    print(f"→ Open http://{settings.host}:{port}")
    import uvicorn

    uvicorn.run("app:create_app", factory=True, host=settings.host, port=port)


if __name__ == "__main__":
    main()
