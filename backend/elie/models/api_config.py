"""
API configuration database model.
"""

from sqlalchemy import Column, Integer, String, Text

from ..database import Base


API_CONFIG_ID = 1


class ApiConfig(Base):
    """Singleton row holding the remote credentials and bindings."""

    __tablename__ = "api_config"

    id = Column(Integer, primary_key=True, default=API_CONFIG_ID)
    api_key = Column(String(500), nullable=False, default="")
    assistant_id = Column(String(200), nullable=False, default="")
    vector_store_id = Column(String(200), nullable=False, default="")

    # Sent to every new thread ahead of the user's message
    custom_prompt = Column(Text, nullable=True)
