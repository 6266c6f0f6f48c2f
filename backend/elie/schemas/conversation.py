"""
Conversation-related Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import List


class ConversationCreate(BaseModel):
    """Schema for creating a conversation."""
    title: str = Field(..., min_length=1, max_length=200)


class ConversationUpdate(BaseModel):
    """Schema for renaming a conversation."""
    title: str = Field(..., min_length=1, max_length=200)


class ConversationResponse(BaseModel):
    """Conversation response schema."""
    id: int
    title: str
    timestamp: int
    likes: int
    dislikes: int

    class Config:
        from_attributes = True


class ConversationWithMessages(ConversationResponse):
    """Conversation with full message history."""
    messages: List["MessageResponse"] = []


class ReactionTotals(BaseModel):
    """Sum of reactions over every stored message."""
    likes: int
    dislikes: int


# Import MessageResponse for type hint
from .message import MessageResponse
ConversationWithMessages.model_rebuild()
