"""
Conversation database model.
"""

from sqlalchemy import Column, Integer, String, BigInteger

from ..database import Base


class Conversation(Base):
    """A local conversation transcript."""

    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)

    # Creation time in epoch milliseconds
    timestamp = Column(BigInteger, nullable=False, index=True)

    # Derived from the messages' reaction counters
    likes = Column(Integer, default=0, nullable=False)
    dislikes = Column(Integer, default=0, nullable=False)
