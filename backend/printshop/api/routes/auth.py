import logging
from typing import Optional
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator
from starlette.concurrency import run_in_threadpool
from printshop.core.security import SessionIssuer
from printshop.api.dependencies import get_session_issuer, get_user_service
from printshop.services.user_service import UserService
from printshop.utils.validators import check_email

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=1)
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return check_email(value)


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterResponse(BaseModel):
    message: str
    token: str
    userId: int


class LoginResponse(RegisterResponse):
    name: str


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    users: UserService = Depends(get_user_service),
    issuer: SessionIssuer = Depends(get_session_issuer)
):
    """Register a new user and log them in"""
    # bcrypt is CPU-bound; keep it off the event loop
    user = await run_in_threadpool(
        users.register,
        user_data.name,
        user_data.email,
        user_data.password,
        user_data.phone,
    )
    token = issuer.issue(user.id, user.email)

    return {
        "message": "User registered successfully",
        "token": token,
        "userId": user.id,
    }


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    users: UserService = Depends(get_user_service),
    issuer: SessionIssuer = Depends(get_session_issuer)
):
    """Login and get a session token"""
    user = await run_in_threadpool(users.verify, credentials.email, credentials.password)
    token = issuer.issue(user.id, user.email)

    return {
        "message": "Login successful",
        "token": token,
        "userId": user.id,
        "name": user.name,
    }
