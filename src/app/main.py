"""TopMarks - GPS mark folders.

Main FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import settings
from app.routers.layers import router as layers_router
from topmarks import __version__
from topmarks.layers import FolderStore
from topmarks.layers.persistence import JsonFileStorage


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"{settings.app_name} v{__version__} - INITIALIZING")

    storage = JsonFileStorage(settings.storage_dir)
    logger.info(f"Storage: {storage.directory}")

    store = FolderStore.open(
        storage,
        key=settings.storage_key,
        strict_range=settings.parser_strict_range,
    )
    app.state.folder_store = store

    logger.info(f"{settings.app_name} ONLINE")

    yield

    store.close()
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title="TopMarks",
    description="Paste GPS marks and organize them into map folders",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(layers_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": __version__,
        "system": settings.app_name,
    }


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
