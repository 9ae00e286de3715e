from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from starlette.concurrency import run_in_threadpool
from printshop.core.security import SessionClaims
from printshop.api.dependencies import get_current_session, get_user_service
from printshop.services.user_service import UserService

router = APIRouter(tags=["profile"])


class ProfileResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str]
    created_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class ProfileUpdate(BaseModel):
    name: str = Field(min_length=1)
    phone: Optional[str] = None


class PasswordChange(BaseModel):
    currentPassword: str
    newPassword: str = Field(min_length=1)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    session: SessionClaims = Depends(get_current_session),
    users: UserService = Depends(get_user_service)
):
    """Get the caller's profile"""
    return users.get_profile(session.user_id)


@router.put("/profile")
async def update_profile(
    profile: ProfileUpdate,
    session: SessionClaims = Depends(get_current_session),
    users: UserService = Depends(get_user_service)
):
    """Update name and phone. Email cannot be changed."""
    users.update_profile(session.user_id, profile.name, profile.phone)
    return {"message": "Profile updated successfully"}


@router.put("/change-password")
async def change_password(
    passwords: PasswordChange,
    session: SessionClaims = Depends(get_current_session),
    users: UserService = Depends(get_user_service)
):
    """
    Replace the caller's password.

    Tokens issued before the change stay valid until they expire.
    """
    await run_in_threadpool(
        users.change_password,
        session.user_id,
        passwords.currentPassword,
        passwords.newPassword,
    )
    return {"message": "Password updated successfully"}
