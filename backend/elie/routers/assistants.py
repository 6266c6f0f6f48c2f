"""
Remote assistant and vector store management routes.
"""

from fastapi import APIRouter, Depends, status
from typing import List

from ..dependencies import get_remote_admin, http_error
from ..errors import ElieError
from ..schemas.assistant import Assistant, AssistantCreate, VectorStore, VectorStoreCreate
from ..services.remote_admin import RemoteAdminService


router = APIRouter(prefix="/api/assistants", tags=["Assistants"])
vector_stores_router = APIRouter(prefix="/api/vector-stores", tags=["Vector Stores"])


@router.get("", response_model=List[Assistant])
async def list_assistants(admin: RemoteAdminService = Depends(get_remote_admin)):
    """List the account's assistants, newest first."""
    try:
        return await admin.list_assistants()
    except ElieError as e:
        raise http_error(e)


@router.post("", response_model=Assistant, status_code=status.HTTP_201_CREATED)
async def create_assistant(
    request: AssistantCreate,
    admin: RemoteAdminService = Depends(get_remote_admin)
):
    """Create an assistant with file search enabled."""
    try:
        return await admin.create_assistant(request)
    except ElieError as e:
        raise http_error(e)


@router.delete("/{assistant_id}")
async def delete_assistant(
    assistant_id: str,
    admin: RemoteAdminService = Depends(get_remote_admin)
):
    """Delete an assistant."""
    try:
        await admin.delete_assistant(assistant_id)
    except ElieError as e:
        raise http_error(e)
    return {"message": "Your assistant has been successfully deleted."}


@vector_stores_router.get("", response_model=List[VectorStore])
async def list_vector_stores(admin: RemoteAdminService = Depends(get_remote_admin)):
    """List the account's vector stores."""
    try:
        return await admin.list_vector_stores()
    except ElieError as e:
        raise http_error(e)


@vector_stores_router.post("", response_model=VectorStore, status_code=status.HTTP_201_CREATED)
async def create_vector_store(
    request: VectorStoreCreate,
    admin: RemoteAdminService = Depends(get_remote_admin)
):
    """Create a vector store."""
    try:
        return await admin.create_vector_store(request.name)
    except ElieError as e:
        raise http_error(e)


@vector_stores_router.delete("/{vector_store_id}")
async def delete_vector_store(
    vector_store_id: str,
    admin: RemoteAdminService = Depends(get_remote_admin)
):
    """Delete a vector store."""
    try:
        await admin.delete_vector_store(vector_store_id)
    except ElieError as e:
        raise http_error(e)
    return {"message": "Your vector store has been successfully deleted."}
