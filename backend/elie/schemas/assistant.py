"""
Pydantic schemas for the remote assistant API payloads.

Field names follow the provider's wire format exactly.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Any, Dict


RUN_STATUS_COMPLETED = "completed"
ROLE_ASSISTANT = "assistant"


class Thread(BaseModel):
    id: str
    created_at: Optional[int] = None


class TextValue(BaseModel):
    value: str = ""
    annotations: List[Any] = []


class ContentPart(BaseModel):
    """One segment of a thread message; only "text" segments carry text."""
    type: str
    text: Optional[TextValue] = None


class ThreadMessage(BaseModel):
    id: str
    role: str
    content: Optional[List[ContentPart]] = None
    created_at: int = 0

    def text(self) -> str:
        """Join the text segments with a single space."""
        return " ".join(
            part.text.value for part in (self.content or []) if part.text is not None
        )


class ThreadMessageList(BaseModel):
    data: Optional[List[ThreadMessage]] = None


class MessageCreate(BaseModel):
    role: str = "user"
    content: str


class RunCreate(BaseModel):
    assistant_id: str


class Run(BaseModel):
    id: str
    status: str
    started_at: Optional[int] = None
    updated_at: Optional[int] = None

    @property
    def is_completed(self) -> bool:
        return self.status == RUN_STATUS_COMPLETED


class UploadedFile(BaseModel):
    id: str
    filename: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[int] = None


class VectorStoreFileCreate(BaseModel):
    file_id: str


class VectorStoreFile(BaseModel):
    id: str
    status: Optional[str] = None
    created_at: Optional[int] = None


class VectorStoreCreate(BaseModel):
    name: str = Field(..., min_length=1)


class VectorStore(BaseModel):
    id: str
    name: Optional[str] = None
    created_at: Optional[int] = None


class VectorStoreList(BaseModel):
    data: List[VectorStore] = []


class Tool(BaseModel):
    type: str


class AssistantCreate(BaseModel):
    """Schema for creating an assistant."""
    name: str = Field(..., min_length=1)
    instructions: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    tools: List[Tool] = [Tool(type="file_search")]


class AssistantUpdate(BaseModel):
    tool_resources: Dict[str, Any]


class Assistant(BaseModel):
    id: str
    name: Optional[str] = None
    created_at: Optional[int] = None


class AssistantList(BaseModel):
    data: List[Assistant] = []
