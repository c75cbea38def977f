from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
import uuid

from cbt.core.config import settings
from cbt.core.database import get_db
from cbt.core.exceptions import AuthenticationError, AuthorizationError
from cbt.core.logging_config import set_user_id
from cbt.core.security import decode_token
from cbt.models.user import User, UserRole

security = HTTPBearer(auto_error=False)


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header first, then the session cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""

    token = _extract_token(request, credentials)
    if not token:
        raise AuthenticationError()

    payload = decode_token(token)

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    try:
        uuid.UUID(user_id)
    except ValueError:
        raise AuthenticationError("Invalid user ID format")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")

    # Every account gets a profile at signup; one without is unusable
    if not user.profile:
        raise AuthenticationError("User profile not found")

    set_user_id(str(user.id))
    return user


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Current user, or None when the request carries no valid session"""
    if not _extract_token(request, credentials):
        return None
    try:
        return await get_current_user(request, credentials, db)
    except (AuthenticationError, AuthorizationError):
        return None


async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Get current admin user"""
    if current_user.role != UserRole.ADMIN:
        raise AuthorizationError("Admin access required")
    return current_user


async def get_current_teacher(
    current_user: User = Depends(get_current_user)
) -> User:
    if current_user.role != UserRole.TEACHER:
        raise AuthorizationError("Teacher access required")
    return current_user


async def get_current_student(
    current_user: User = Depends(get_current_user)
) -> User:
    if current_user.role != UserRole.STUDENT:
        raise AuthorizationError("Student access required")
    return current_user


async def get_question_author(
    current_user: User = Depends(get_current_user)
) -> User:
    """Teachers and admins may write to the question bank"""
    if current_user.role not in [UserRole.TEACHER, UserRole.ADMIN]:
        raise AuthorizationError("Teacher or admin access required")
    return current_user
