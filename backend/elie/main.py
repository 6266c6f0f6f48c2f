"""
ELIE - Main FastAPI Application
Chat with a remote assistant and attach files to its vector store.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from .config import settings
from .database import init_db, close_db
from .routers import (
    assistants_router,
    vector_stores_router,
    chat_router,
    conversations_router,
    files_router,
    settings_router,
    startup_router
)
from .services.startup import WelcomeState


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    await init_db()
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)

    yield

    # Shutdown
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Conversations with a thread/run assistant and vector store file ingestion",
    lifespan=lifespan
)

# Reset on every process start; set once the welcome greeting has been played
app.state.welcome = WelcomeState()


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(startup_router)
app.include_router(conversations_router)
app.include_router(chat_router)
app.include_router(files_router)
app.include_router(settings_router)
app.include_router(assistants_router)
app.include_router(vector_stores_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": {
            "startup": "/api/startup",
            "conversations": "/api/conversations",
            "chat": "/api/chat",
            "files": "/api/files",
            "settings": "/api/settings",
            "assistants": "/api/assistants",
            "vector_stores": "/api/vector-stores"
        }
    }
