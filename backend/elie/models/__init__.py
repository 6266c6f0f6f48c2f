"""
Database models package.
"""

from .conversation import Conversation
from .message import Message, SENDER_USER, SENDER_BOT
from .api_config import ApiConfig, API_CONFIG_ID
from .vector_file import VectorFile

__all__ = [
    "Conversation",
    "Message",
    "ApiConfig",
    "VectorFile",
    "SENDER_USER",
    "SENDER_BOT",
    "API_CONFIG_ID",
]
