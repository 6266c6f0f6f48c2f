"""
Local conversation store.

Narrow async operations over the four local tables. Every operation
opens its own session and commits on its own, so concurrent workflows
never share a transaction.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models import (
    ApiConfig,
    API_CONFIG_ID,
    Conversation,
    Message,
    VectorFile,
)
from ..utils.clock import now_ms


@dataclass(frozen=True)
class ApiConfigSnapshot:
    """Read-only view of the API configuration for one workflow call."""

    api_key: str
    assistant_id: str
    vector_store_id: str
    custom_prompt: Optional[str] = None

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())

    @property
    def has_assistant_binding(self) -> bool:
        return bool(self.assistant_id.strip()) and bool(self.vector_store_id.strip())

    @classmethod
    def from_row(cls, row: ApiConfig) -> "ApiConfigSnapshot":
        return cls(
            api_key=row.api_key or "",
            assistant_id=row.assistant_id or "",
            vector_store_id=row.vector_store_id or "",
            custom_prompt=row.custom_prompt
        )


class ConversationStore:
    """Storage for conversations, messages, the API config and ingested files."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # Conversations

    async def create_conversation(self, title: str, timestamp: Optional[int] = None) -> Conversation:
        async with self.session_factory() as db:
            conversation = Conversation(
                title=title,
                timestamp=timestamp if timestamp is not None else now_ms(),
                likes=0,
                dislikes=0
            )
            db.add(conversation)
            await db.commit()
            await db.refresh(conversation)
            return conversation

    async def list_conversations(self) -> List[Conversation]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(Conversation).order_by(Conversation.timestamp.desc(), Conversation.id.desc())
            )
            return list(result.scalars().all())

    async def get_conversation(self, conversation_id: int) -> Optional[Conversation]:
        async with self.session_factory() as db:
            return await db.get(Conversation, conversation_id)

    async def rename_conversation(self, conversation_id: int, title: str) -> Optional[Conversation]:
        async with self.session_factory() as db:
            conversation = await db.get(Conversation, conversation_id)
            if not conversation:
                return None
            conversation.title = title
            await db.commit()
            await db.refresh(conversation)
            return conversation

    async def delete_conversation(self, conversation_id: int) -> bool:
        """Delete the conversation row only; messages are removed separately."""
        async with self.session_factory() as db:
            result = await db.execute(
                delete(Conversation).where(Conversation.id == conversation_id)
            )
            await db.commit()
            return result.rowcount > 0

    # Messages

    async def insert_message(
        self,
        conversation_id: int,
        sender: str,
        body: str,
        timestamp: Optional[int] = None,
        response_time: Optional[int] = None
    ) -> Message:
        async with self.session_factory() as db:
            message = Message(
                conversation_id=conversation_id,
                sender=sender,
                body=body,
                timestamp=timestamp if timestamp is not None else now_ms(),
                likes=0,
                dislikes=0,
                response_time=response_time
            )
            db.add(message)
            await db.commit()
            await db.refresh(message)
            return message

    async def get_messages(self, conversation_id: int) -> List[Message]:
        """Messages of a conversation, oldest first."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(Message)
                .where(Message.conversation_id == conversation_id)
                .order_by(Message.timestamp, Message.id)
            )
            return list(result.scalars().all())

    async def get_message(self, message_id: int) -> Optional[Message]:
        async with self.session_factory() as db:
            return await db.get(Message, message_id)

    async def add_reaction(self, message_id: int, like: bool) -> Optional[Message]:
        """Increment a message's like or dislike counter and its conversation's."""
        async with self.session_factory() as db:
            message = await db.get(Message, message_id)
            if not message:
                return None

            if like:
                await db.execute(
                    update(Message).where(Message.id == message_id).values(likes=Message.likes + 1)
                )
                await db.execute(
                    update(Conversation)
                    .where(Conversation.id == message.conversation_id)
                    .values(likes=Conversation.likes + 1)
                )
            else:
                await db.execute(
                    update(Message).where(Message.id == message_id).values(dislikes=Message.dislikes + 1)
                )
                await db.execute(
                    update(Conversation)
                    .where(Conversation.id == message.conversation_id)
                    .values(dislikes=Conversation.dislikes + 1)
                )
            await db.commit()
            await db.refresh(message)
            return message

    async def delete_messages_for_conversation(self, conversation_id: int) -> int:
        async with self.session_factory() as db:
            result = await db.execute(
                delete(Message).where(Message.conversation_id == conversation_id)
            )
            await db.commit()
            return result.rowcount

    async def delete_all_messages(self) -> int:
        """Clear every transcript; the derived conversation counters go back to zero."""
        async with self.session_factory() as db:
            result = await db.execute(delete(Message))
            await db.execute(update(Conversation).values(likes=0, dislikes=0))
            await db.commit()
            return result.rowcount

    async def reaction_totals(self) -> Tuple[int, int]:
        """(likes, dislikes) summed over all messages; zero when there are none."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(
                    func.coalesce(func.sum(Message.likes), 0),
                    func.coalesce(func.sum(Message.dislikes), 0)
                )
            )
            likes, dislikes = result.one()
            return int(likes), int(dislikes)

    # API configuration

    async def get_config(self) -> Optional[ApiConfigSnapshot]:
        async with self.session_factory() as db:
            row = await db.get(ApiConfig, API_CONFIG_ID)
            return ApiConfigSnapshot.from_row(row) if row else None

    async def save_config(
        self, api_key: str, assistant_id: str = "", vector_store_id: str = ""
    ) -> ApiConfigSnapshot:
        async with self.session_factory() as db:
            row = await db.get(ApiConfig, API_CONFIG_ID)
            if not row:
                row = ApiConfig(id=API_CONFIG_ID)
                db.add(row)
            row.api_key = api_key.strip()
            row.assistant_id = assistant_id.strip()
            row.vector_store_id = vector_store_id.strip()
            await db.commit()
            await db.refresh(row)
            return ApiConfigSnapshot.from_row(row)

    async def save_custom_prompt(self, custom_prompt: Optional[str]) -> ApiConfigSnapshot:
        async with self.session_factory() as db:
            row = await db.get(ApiConfig, API_CONFIG_ID)
            if not row:
                row = ApiConfig(id=API_CONFIG_ID, api_key="", assistant_id="", vector_store_id="")
                db.add(row)
            row.custom_prompt = custom_prompt if custom_prompt and custom_prompt.strip() else None
            await db.commit()
            await db.refresh(row)
            return ApiConfigSnapshot.from_row(row)

    async def reset_config(self) -> None:
        async with self.session_factory() as db:
            await db.execute(delete(ApiConfig).where(ApiConfig.id == API_CONFIG_ID))
            await db.commit()

    # Ingested files

    async def insert_vector_file(self, file_name: str, file_id: str) -> VectorFile:
        """Record an ingested file, replacing any record with the same remote id."""
        async with self.session_factory() as db:
            result = await db.execute(select(VectorFile).where(VectorFile.file_id == file_id))
            vector_file = result.scalar_one_or_none()
            if vector_file:
                vector_file.file_name = file_name
            else:
                vector_file = VectorFile(file_name=file_name, file_id=file_id)
                db.add(vector_file)
            await db.commit()
            await db.refresh(vector_file)
            return vector_file

    async def list_vector_files(self) -> List[VectorFile]:
        async with self.session_factory() as db:
            result = await db.execute(select(VectorFile).order_by(VectorFile.id))
            return list(result.scalars().all())

    async def get_vector_file(self, vector_file_id: int) -> Optional[VectorFile]:
        async with self.session_factory() as db:
            return await db.get(VectorFile, vector_file_id)

    async def delete_vector_file(self, vector_file_id: int) -> bool:
        async with self.session_factory() as db:
            result = await db.execute(delete(VectorFile).where(VectorFile.id == vector_file_id))
            await db.commit()
            return result.rowcount > 0
