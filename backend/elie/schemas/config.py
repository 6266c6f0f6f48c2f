"""
API configuration schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional


class ApiConfigUpdate(BaseModel):
    """Schema for saving the API configuration."""
    api_key: str = Field(..., min_length=1)
    assistant_id: str = ""
    vector_store_id: str = ""


class CustomPromptUpdate(BaseModel):
    custom_prompt: Optional[str] = None


class ApiConfigResponse(BaseModel):
    """API configuration response; the key is masked."""
    api_key_set: bool
    api_key_hint: Optional[str] = None
    assistant_id: str
    vector_store_id: str
    custom_prompt: Optional[str] = None
