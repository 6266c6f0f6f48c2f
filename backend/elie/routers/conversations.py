"""
Conversation management routes.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from ..dependencies import get_conversation_service, http_error
from ..errors import ElieError
from ..schemas.conversation import (
    ConversationCreate,
    ConversationUpdate,
    ConversationResponse,
    ConversationWithMessages,
)
from ..schemas.message import MessageResponse
from ..services.conversation_service import ConversationService


router = APIRouter(prefix="/api/conversations", tags=["Conversations"])


@router.get("", response_model=List[ConversationResponse])
async def list_conversations(
    service: ConversationService = Depends(get_conversation_service)
):
    """List all conversations, newest first."""
    return await service.list_conversations()


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    conversation_data: ConversationCreate,
    service: ConversationService = Depends(get_conversation_service)
):
    """Create a new conversation."""
    try:
        return await service.create(conversation_data.title)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/{conversation_id}", response_model=ConversationWithMessages)
async def get_conversation(
    conversation_id: int,
    service: ConversationService = Depends(get_conversation_service)
):
    """Get a conversation with all messages."""
    try:
        conversation, messages = await service.transcript(conversation_id)
    except ElieError as e:
        raise http_error(e)

    return {
        **ConversationResponse.model_validate(conversation).model_dump(),
        "messages": [MessageResponse.model_validate(msg) for msg in messages]
    }


@router.put("/{conversation_id}", response_model=ConversationResponse)
async def update_conversation(
    conversation_id: int,
    updates: ConversationUpdate,
    service: ConversationService = Depends(get_conversation_service)
):
    """Rename a conversation."""
    try:
        return await service.rename(conversation_id, updates.title)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except ElieError as e:
        raise http_error(e)


@router.delete("/{conversation_id}")
async def delete_conversation(
    conversation_id: int,
    service: ConversationService = Depends(get_conversation_service)
):
    """Delete a conversation and its messages."""
    try:
        await service.delete(conversation_id)
    except ElieError as e:
        raise http_error(e)

    return {"message": "Conversation deleted"}
