"""FastAPI application factory and lifespan."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bodycomp.api import data
from bodycomp.api.v1 import api_router
from bodycomp.core.config import Settings, get_settings
from bodycomp.storage.json_store import JsonDocumentStore
from bodycomp.storage.write_queue import StorageError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: report the data file; shutdown: let queued writes finish."""
    store: JsonDocumentStore = app.state.store
    logger.info("Using data file %s", store.path.resolve())
    yield
    await store.close()


async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"status": "error", "message": str(exc)})


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """Composition root: settings, store and routers are wired here and nowhere else."""
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.store = JsonDocumentStore(settings.data_file, default_height_cm=settings.default_height_cm)

    # CORS: anything in debug, localhost in development, CORS_ORIGINS otherwise
    if settings.debug:
        cors_origins = ["*"]
    elif settings.environment == "development":
        cors_origins = [f"http://localhost:{settings.port}", f"http://127.0.0.1:{settings.port}"]
    else:
        cors_origins = settings.cors_origin_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StorageError, storage_error_handler)

    @app.get("/")
    def root():
        return {"status": "ok", "message": settings.app_name}

    app.include_router(data.router, prefix="/data", tags=["data"])
    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


def run() -> None:
    """Serve the app with uvicorn on the configured host and PORT."""
    settings = get_settings()
    uvicorn.run(
        "bodycomp.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


app = create_application()

if __name__ == "__main__":
    run()
