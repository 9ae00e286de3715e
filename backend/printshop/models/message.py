from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from printshop.core.database import Base


class Message(Base):
    """Contact form submission. Append-only and not linked to any user."""
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    subject = Column(String, nullable=True)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
