from fastapi import APIRouter, Depends, status, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from cbt.core.database import get_db
from cbt.core.config import settings
from cbt.core.exceptions import CBTError
from cbt.core.security import create_access_token, set_session_cookie, clear_session_cookie
from cbt.core.logging_config import logger, set_user_id
from cbt.core.rate_limiter import auth_rate_limit
from cbt.models.user import User
from cbt.schemas.auth import (
    SignupRequest,
    SigninRequest,
    UserInfo,
    ProfileResponse,
    AuthResponse,
    SessionResponse,
)
from cbt.schemas.base import MessageResponse
from cbt.modules.auth.dependencies import get_optional_user
from cbt.services.user_service import user_service

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _issue_session(user: User, response: Response) -> AuthResponse:
    """Create the access token, set it as the session cookie and build the body"""
    access_token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role.value}
    )
    set_session_cookie(response, access_token)
    return AuthResponse(
        user=UserInfo(id=str(user.id), email=user.email),
        profile=ProfileResponse.model_validate(user.profile),
        access_token=access_token,
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@auth_rate_limit()
async def signup(
    request: Request,
    response: Response,
    data: SignupRequest,
    db: AsyncSession = Depends(get_db)
):
    """Create an account with its profile and start a session"""
    client_ip = _client_ip(request)

    try:
        user = await user_service.create_user(
            db,
            email=data.email,
            password=data.password,
            full_name=data.full_name,
            role=data.role,
            allowed_roles=settings.SIGNUP_ALLOWED_ROLES,
        )
    except CBTError as e:
        logger.log_auth_event(
            event="signup",
            success=False,
            user_email=data.email,
            reason=e.message,
            client_ip=client_ip
        )
        raise

    set_user_id(str(user.id))
    logger.log_auth_event(
        event="signup",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        user_role=user.role.value
    )
    return _issue_session(user, response)


@router.post("/signin", response_model=AuthResponse)
@auth_rate_limit()
async def signin(
    request: Request,
    response: Response,
    data: SigninRequest,
    db: AsyncSession = Depends(get_db)
):
    """Check credentials and start a session"""
    client_ip = _client_ip(request)

    try:
        user = await user_service.authenticate(db, data.email, data.password)
    except CBTError as e:
        logger.log_auth_event(
            event="signin",
            success=False,
            user_email=data.email,
            reason=e.message,
            client_ip=client_ip
        )
        raise

    set_user_id(str(user.id))
    logger.log_auth_event(
        event="signin",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        user_role=user.role.value if user.role else None
    )
    return _issue_session(user, response)


@router.post("/signout", response_model=MessageResponse)
async def signout(
    request: Request,
    response: Response,
    current_user: Optional[User] = Depends(get_optional_user)
):
    """End the session. Succeeds even without one."""
    clear_session_cookie(response)
    if current_user:
        logger.log_auth_event(
            event="signout",
            success=True,
            user_email=current_user.email,
            client_ip=_client_ip(request)
        )
    return MessageResponse(message="Signed out")


@router.get("/session", response_model=SessionResponse)
async def get_session(
    current_user: Optional[User] = Depends(get_optional_user)
):
    """Current user and profile, or nulls when signed out"""
    if not current_user:
        return SessionResponse()
    return SessionResponse(
        user=UserInfo(id=str(current_user.id), email=current_user.email),
        profile=ProfileResponse.model_validate(current_user.profile),
    )
