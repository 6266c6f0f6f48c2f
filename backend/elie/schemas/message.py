"""
Message-related Pydantic schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional, List


class SendMessageRequest(BaseModel):
    """Schema for sending a chat message."""
    text: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    """Message response schema."""
    id: int
    conversation_id: int
    sender: str
    body: str
    timestamp: int
    likes: int
    dislikes: int
    response_time: Optional[int] = None

    class Config:
        from_attributes = True


class ChatResponse(BaseModel):
    """Messages persisted by one send."""
    conversation_id: int
    messages: List[MessageResponse]
