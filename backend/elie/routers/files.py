"""
File ingestion and vector file routes.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import StreamingResponse
from typing import List
import asyncio
import json
import logging

from ..config import settings
from ..dependencies import (
    get_conversation_service,
    get_ingestion_pipeline,
    get_remote_admin,
    get_store,
    http_error,
)
from ..errors import ElieError
from ..schemas.file import VectorFileResponse
from ..schemas.message import MessageResponse
from ..services.conversation_service import ConversationService
from ..services.ingestion import IngestionPipeline, IngestResult
from ..services.progress import ProgressChannel
from ..services.remote_admin import RemoteAdminService
from ..services.store import ConversationStore


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["Files"])


def _result_payload(result: IngestResult) -> dict:
    return {
        "file": VectorFileResponse.model_validate(result.vector_file).model_dump(),
        "message": MessageResponse.model_validate(result.message).model_dump()
    }


@router.post("/upload/{conversation_id}")
async def upload_file(
    conversation_id: int,
    file: UploadFile = File(...),
    stream: bool = True,
    service: ConversationService = Depends(get_conversation_service),
    pipeline: IngestionPipeline = Depends(get_ingestion_pipeline)
):
    """Upload a file into the vector store and announce it in the conversation.

    With ``stream`` the response is a server-sent event stream of
    progress events followed by a ``done`` or ``error`` event.
    """
    try:
        await service.get(conversation_id)
    except ElieError as e:
        raise http_error(e)

    if file.size is not None and file.size > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size: {settings.MAX_UPLOAD_SIZE / (1024*1024):.1f}MB"
        )

    content = await file.read()
    file_name = file.filename or ""
    content_type = file.content_type or "application/octet-stream"

    if not stream:
        try:
            result = await pipeline.ingest_file(
                conversation_id, file_name, content, content_type=content_type
            )
        except ElieError as e:
            raise http_error(e)
        return _result_payload(result)

    progress = ProgressChannel()
    task = asyncio.create_task(
        pipeline.ingest_file(
            conversation_id, file_name, content, progress=progress, content_type=content_type
        )
    )

    async def generate():
        try:
            async for event in progress:
                yield f"data: {json.dumps({'type': 'progress', **event.to_dict()})}\n\n"

            try:
                result = await task
            except ElieError as e:
                yield f"data: {json.dumps({'type': 'error', 'error': e.__class__.__name__, 'message': e.user_message})}\n\n"
            except Exception as e:
                logger.exception("Ingestion of %s failed unexpectedly", file_name)
                yield f"data: {json.dumps({'type': 'error', 'error': e.__class__.__name__, 'message': ElieError.user_message})}\n\n"
            else:
                yield f"data: {json.dumps({'type': 'done', **_result_payload(result)})}\n\n"
        finally:
            # The client went away: abandon the ingestion with it
            if not task.done():
                logger.info("Upload stream closed early, cancelling ingestion of %s", file_name)
                task.cancel()

    return StreamingResponse(generate(), media_type="text/event-stream")


@router.get("", response_model=List[VectorFileResponse])
async def list_files(store: ConversationStore = Depends(get_store)):
    """List the files registered in the vector store."""
    return await store.list_vector_files()


@router.delete("/{vector_file_id}")
async def delete_file(
    vector_file_id: int,
    admin: RemoteAdminService = Depends(get_remote_admin)
):
    """Remove a file from the vector store and from the local list."""
    try:
        await admin.delete_vector_file(vector_file_id)
    except ElieError as e:
        raise http_error(e)

    return {"message": "Your file has been successfully deleted."}
