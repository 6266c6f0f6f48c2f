"""
API configuration routes.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from typing import Optional

from ..dependencies import get_remote_admin, get_store, http_error
from ..errors import ElieError
from ..schemas.assistant import Assistant
from ..schemas.config import ApiConfigResponse, ApiConfigUpdate, CustomPromptUpdate
from ..services.remote_admin import RemoteAdminService
from ..services.store import ApiConfigSnapshot, ConversationStore


router = APIRouter(prefix="/api/settings", tags=["Settings"])


def _config_response(config: Optional[ApiConfigSnapshot]) -> ApiConfigResponse:
    if config is None:
        return ApiConfigResponse(api_key_set=False, assistant_id="", vector_store_id="")
    return ApiConfigResponse(
        api_key_set=config.has_api_key,
        api_key_hint=f"...{config.api_key[-4:]}" if config.has_api_key else None,
        assistant_id=config.assistant_id,
        vector_store_id=config.vector_store_id,
        custom_prompt=config.custom_prompt
    )


@router.get("", response_model=ApiConfigResponse)
async def get_settings(store: ConversationStore = Depends(get_store)):
    """Get the API configuration."""
    return _config_response(await store.get_config())


@router.put("", response_model=ApiConfigResponse)
async def update_settings(
    updates: ApiConfigUpdate,
    store: ConversationStore = Depends(get_store)
):
    """Save the API key, assistant id and vector store id."""
    if not updates.api_key.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please fill in the API key."
        )

    config = await store.save_config(
        updates.api_key,
        assistant_id=updates.assistant_id,
        vector_store_id=updates.vector_store_id
    )
    return _config_response(config)


@router.put("/prompt", response_model=ApiConfigResponse)
async def update_custom_prompt(
    updates: CustomPromptUpdate,
    store: ConversationStore = Depends(get_store)
):
    """Save the custom prompt sent ahead of every message."""
    return _config_response(await store.save_custom_prompt(updates.custom_prompt))


@router.post("/reset")
async def reset_settings(store: ConversationStore = Depends(get_store)):
    """Forget the API configuration."""
    await store.reset_config()
    return {"message": "API configuration reset"}


@router.post("/bind", response_model=Assistant)
async def bind_vector_store(admin: RemoteAdminService = Depends(get_remote_admin)):
    """Attach the configured vector store to the configured assistant."""
    try:
        return await admin.bind_vector_store()
    except ElieError as e:
        raise http_error(e)
