"""
Conversation management on top of the local store.
"""

import logging
from typing import List, Tuple

from ..errors import NotFound
from ..models import Conversation, Message
from .store import ConversationStore


logger = logging.getLogger(__name__)


class ConversationService:
    """Service for conversation CRUD, transcripts and reactions."""

    def __init__(self, store: ConversationStore):
        self.store = store

    async def create(self, title: str) -> Conversation:
        title = title.strip()
        if not title:
            raise ValueError("Conversation title must not be empty")
        return await self.store.create_conversation(title)

    async def list_conversations(self) -> List[Conversation]:
        return await self.store.list_conversations()

    async def get(self, conversation_id: int) -> Conversation:
        conversation = await self.store.get_conversation(conversation_id)
        if not conversation:
            raise NotFound("Conversation not found")
        return conversation

    async def transcript(self, conversation_id: int) -> Tuple[Conversation, List[Message]]:
        conversation = await self.get(conversation_id)
        return conversation, await self.store.get_messages(conversation_id)

    async def rename(self, conversation_id: int, title: str) -> Conversation:
        title = title.strip()
        if not title:
            raise ValueError("Conversation title must not be empty")
        conversation = await self.store.rename_conversation(conversation_id, title)
        if not conversation:
            raise NotFound("Conversation not found")
        return conversation

    async def delete(self, conversation_id: int) -> None:
        """Delete a conversation together with its messages."""
        await self.get(conversation_id)
        removed = await self.store.delete_messages_for_conversation(conversation_id)
        await self.store.delete_conversation(conversation_id)
        logger.info("Deleted conversation %s and %s messages", conversation_id, removed)

    async def react(self, message_id: int, like: bool) -> Message:
        message = await self.store.add_reaction(message_id, like)
        if not message:
            raise NotFound("Message not found")
        return message

    async def reaction_totals(self) -> Tuple[int, int]:
        return await self.store.reaction_totals()

    async def clear_history(self) -> int:
        removed = await self.store.delete_all_messages()
        logger.info("Cleared chat history (%s messages)", removed)
        return removed
