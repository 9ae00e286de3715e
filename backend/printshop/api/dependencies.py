import secrets
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader, OAuth2PasswordBearer
from sqlalchemy.orm import Session
from printshop.core.config import Settings
from printshop.core.database import get_db
from printshop.core.exceptions import Forbidden
from printshop.core.security import PasswordHasher, SessionClaims, SessionIssuer
from printshop.services.user_service import UserService
from printshop.storage.local_storage import LocalStorage

# OAuth2 password bearer scheme - extracts token from "Authorization: Bearer <token>"
# auto_error=False so a missing header reaches SessionIssuer.verify and becomes a 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/login", auto_error=False)

# Shop staff authenticate with a shared key instead of a session
staff_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_issuer(request: Request) -> SessionIssuer:
    return request.app.state.session_issuer


def get_storage(request: Request) -> LocalStorage:
    return request.app.state.storage


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_user_service(
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(db, hasher)


async def get_current_session(
    token: Optional[str] = Depends(oauth2_scheme),
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> SessionClaims:
    """
    Identity of the caller, taken from the bearer token alone.

    Sessions are stateless: no user lookup happens here, so routes that need
    the user row load it themselves and report 404 if it is gone.
    """
    return issuer.verify(token)


async def require_staff(
    api_key: Optional[str] = Depends(staff_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    if not settings.STAFF_API_KEY:
        raise Forbidden("Staff access is disabled")
    if api_key is None or not secrets.compare_digest(api_key, settings.STAFF_API_KEY):
        raise Forbidden("Invalid staff key")
