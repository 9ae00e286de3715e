from typing import Optional
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session
from printshop.core.database import get_db
from printshop.services.contact_service import ContactService
from printshop.utils.validators import check_email

router = APIRouter(tags=["contact"])


class ContactMessage(BaseModel):
    name: str = Field(min_length=1)
    email: str
    subject: Optional[str] = None
    message: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email(value)


@router.post("/contact", status_code=status.HTTP_201_CREATED)
async def submit_contact_message(contact: ContactMessage, db: Session = Depends(get_db)):
    """Store a contact form message. No login required."""
    message = ContactService(db).submit(contact.name, contact.email, contact.subject, contact.message)
    return {"message": "Message sent successfully", "messageId": message.id}
