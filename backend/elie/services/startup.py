"""
Startup greeting and first-screen routing.

The "welcome played once" flag lives in an explicit ``WelcomeState``
owned by the application and reset only by a process restart.
"""

import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .store import ApiConfigSnapshot


OFFLINE_WARNING = "Warning! No internet connection detected. Some features may not work properly."

WELCOME_MESSAGES = [
    "Hello! My name is ELIE, your AI Assistant.",
    "Hi there! I'm ELIE, how can I assist you today?",
    "Welcome! I'm ELIE, here to help you.",
    "Hey! ELIE at your service.",
    "Greetings! I'm ELIE, your personal assistant.",
    "Nice to meet you! I'm ELIE, let's get started.",
    "Good day! I'm ELIE, your smart assistant. How can I help?",
    "Hi! ELIE here, ready to assist you anytime.",
    "Hello! I'm ELIE. What can I do for you today?",
    "Hey there! Need some help? ELIE is here for you.",
]

DESTINATION_SETTINGS = "settings"
DESTINATION_CONVERSATIONS = "conversations"


@dataclass
class WelcomeState:
    played: bool = False


async def startup_greeting(
    state: WelcomeState,
    is_online: Callable[[], Awaitable[bool]],
    choose: Callable = random.choice
) -> Optional[str]:
    """The offline warning, a welcome phrase the first time, or None afterwards."""
    if not await is_online():
        return OFFLINE_WARNING
    if state.played:
        return None
    state.played = True
    return choose(WELCOME_MESSAGES)


def startup_destination(config: Optional[ApiConfigSnapshot]) -> str:
    """Send users without an API key to settings first."""
    if config is None or not config.has_api_key:
        return DESTINATION_SETTINGS
    return DESTINATION_CONVERSATIONS
