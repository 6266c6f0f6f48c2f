"""
API Routers package.
"""

from .assistants import router as assistants_router, vector_stores_router
from .chat import router as chat_router
from .conversations import router as conversations_router
from .files import router as files_router
from .settings import router as settings_router
from .startup import router as startup_router

__all__ = [
    "assistants_router",
    "vector_stores_router",
    "chat_router",
    "conversations_router",
    "files_router",
    "settings_router",
    "startup_router"
]
