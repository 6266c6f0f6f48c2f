"""
Ingested file schemas.
"""

from pydantic import BaseModel


class VectorFileResponse(BaseModel):
    id: int
    file_name: str
    file_id: str

    class Config:
        from_attributes = True
