"""
Startup route: greeting and first screen.
"""

from fastapi import APIRouter, Depends
from typing import Awaitable, Callable

from ..dependencies import get_connectivity_check, get_store, get_welcome_state
from ..services.startup import WelcomeState, startup_destination, startup_greeting
from ..services.store import ConversationStore


router = APIRouter(prefix="/api/startup", tags=["Startup"])


@router.get("")
async def startup(
    welcome: WelcomeState = Depends(get_welcome_state),
    store: ConversationStore = Depends(get_store),
    is_online: Callable[[], Awaitable[bool]] = Depends(get_connectivity_check)
):
    """Greeting to play (once per process) and the screen to open first."""
    greeting = await startup_greeting(welcome, is_online)
    config = await store.get_config()
    return {
        "greeting": greeting,
        "destination": startup_destination(config)
    }
