import logging
from typing import Optional
from sqlalchemy.orm import Session
from printshop.models.message import Message

logger = logging.getLogger(__name__)


class ContactService:
    """Append-only log of contact form messages"""

    def __init__(self, db: Session):
        self.db = db

    def submit(self, name: str, email: str, subject: Optional[str], message: str) -> Message:
        db_message = Message(name=name, email=email, subject=subject, message=message)
        self.db.add(db_message)
        self.db.commit()
        self.db.refresh(db_message)

        logger.info(f"Contact message {db_message.id} received")
        return db_message
