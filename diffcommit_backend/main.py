"""
Diff & Commit Backend - FastAPI Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from diffcommit_backend.logging_config import configure_logging
from diffcommit_backend.routers import config, merge, selection
from diffcommit_backend.services.config_manager import ConfigManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown logic"""
    configure_logging()
    logger.info("[Backend] Starting Diff & Commit Backend...")
    config_manager = ConfigManager.get_instance()
    logger.info("[Backend] ConfigManager initialized (%s)", config_manager.config_file)

    yield
    # Shutdown: cancel in-flight edits
    for session in merge.sessions.values():
        session.cancel_edit()
    logger.info("[Backend] Shutting down Diff & Commit Backend...")


app = FastAPI(
    title="Diff & Commit Backend",
    description="Interactive word-level merge and selection editing backend",
    version="1.0.0",
    lifespan=lifespan,
)

# Editor shell runs locally
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(merge.router, prefix="/api/merge", tags=["merge"])
app.include_router(selection.router, prefix="/api/selection", tags=["selection"])
app.include_router(config.router, prefix="/api/config", tags=["config"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "diffcommit-backend"}


if __name__ == "__main__":
    import uvicorn

    server = ConfigManager.get_instance().get("server", {})
    uvicorn.run(app, host=server.get("host", "127.0.0.1"), port=server.get("port", 8000))
