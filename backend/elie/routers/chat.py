"""
Chat routes: sending messages through the assistant and reacting to them.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import (
    get_conversation_service,
    get_run_orchestrator,
    http_error,
)
from ..errors import ElieError
from ..schemas.conversation import ReactionTotals
from ..schemas.message import ChatResponse, MessageResponse, SendMessageRequest
from ..services.conversation_service import ConversationService
from ..services.run_orchestrator import RunOrchestrator


router = APIRouter(prefix="/api/chat", tags=["Chat"])


@router.post("/{conversation_id}", response_model=ChatResponse)
async def send_message(
    conversation_id: int,
    chat_request: SendMessageRequest,
    service: ConversationService = Depends(get_conversation_service),
    orchestrator: RunOrchestrator = Depends(get_run_orchestrator)
):
    """Send a message to the assistant and wait for its reply."""
    text = chat_request.text.strip()
    if not text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message text must not be empty"
        )

    try:
        await service.get(conversation_id)
        result = await orchestrator.send_message(conversation_id, text)
    except ElieError as e:
        raise http_error(e)

    return ChatResponse(
        conversation_id=conversation_id,
        messages=[
            MessageResponse.model_validate(result.user_message),
            MessageResponse.model_validate(result.bot_message)
        ]
    )


@router.post("/messages/{message_id}/like", response_model=MessageResponse)
async def like_message(
    message_id: int,
    service: ConversationService = Depends(get_conversation_service)
):
    """Add a like to a message."""
    try:
        return await service.react(message_id, like=True)
    except ElieError as e:
        raise http_error(e)


@router.post("/messages/{message_id}/dislike", response_model=MessageResponse)
async def dislike_message(
    message_id: int,
    service: ConversationService = Depends(get_conversation_service)
):
    """Add a dislike to a message."""
    try:
        return await service.react(message_id, like=False)
    except ElieError as e:
        raise http_error(e)


@router.get("/reactions", response_model=ReactionTotals)
async def reaction_totals(
    service: ConversationService = Depends(get_conversation_service)
):
    """Likes and dislikes summed over every message."""
    likes, dislikes = await service.reaction_totals()
    return ReactionTotals(likes=likes, dislikes=dislikes)


@router.delete("/history")
async def clear_history(
    service: ConversationService = Depends(get_conversation_service)
):
    """Delete every message of every conversation."""
    removed = await service.clear_history()
    return {"message": "Chat history cleared", "deleted": removed}
