"""
Ingested file database model.
"""

from sqlalchemy import Column, Integer, String

from ..database import Base


class VectorFile(Base):
    """A file that was uploaded and registered into the vector store."""

    __tablename__ = "vector_files"

    id = Column(Integer, primary_key=True, index=True)
    file_name = Column(String(500), nullable=False)
    file_id = Column(String(200), unique=True, nullable=False)
