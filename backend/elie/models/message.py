"""
Message database model.
"""

from sqlalchemy import Column, Integer, String, BigInteger, ForeignKey, Text, Index

from ..database import Base


SENDER_USER = "user"
SENDER_BOT = "bot"


class Message(Base):
    """A single utterance in a conversation, sent by the user or the bot."""

    __tablename__ = "messages"

    __table_args__ = (
        Index('ix_messages_conversation_timestamp', 'conversation_id', 'timestamp'),
    )

    id = Column(Integer, primary_key=True, index=True)
    # No ON DELETE CASCADE: deleting a conversation removes its messages explicitly
    conversation_id = Column(Integer, ForeignKey("conversations.id"), nullable=False)

    sender = Column(String(10), nullable=False)  # "user" or "bot"
    body = Column(Text, nullable=False)

    # Epoch milliseconds; the only ordering key within a conversation
    timestamp = Column(BigInteger, nullable=False)

    # Reactions only ever increment
    likes = Column(Integer, default=0, nullable=False)
    dislikes = Column(Integer, default=0, nullable=False)

    # Whole seconds between the preceding user message and this bot reply
    response_time = Column(Integer, nullable=True)
