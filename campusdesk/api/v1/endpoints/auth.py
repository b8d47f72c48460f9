from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime
import uuid

from campusdesk.core.database import get_db
from campusdesk.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
    build_token_data,
)
from campusdesk.core.logging_config import logger, set_user_id
from campusdesk.core.rate_limiter import auth_rate_limit
from campusdesk.models.user import User
from campusdesk.modules.auth.dependencies import get_current_user
from campusdesk.schemas.auth import (
    UserLogin,
    RefreshTokenRequest,
    Token,
    LoginResponse,
    UserResponse,
)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@auth_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login user (rate limited)"""
    client_ip = request.client.host if request.client else "unknown"

    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if not user or not user.hashed_password or not verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=credentials.email,
            reason="Invalid credentials",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    if not user.is_active:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=credentials.email,
            reason="Account inactive",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    user.last_login = datetime.utcnow()
    await db.commit()
    await db.refresh(user)

    set_user_id(str(user.id))
    token_data = build_token_data(user)

    logger.log_auth_event(
        event="login",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        user_role=user.role.value
    )

    return {
        "access_token": create_access_token(token_data),
        "refresh_token": create_refresh_token(token_data),
        "token_type": "bearer",
        "user": UserResponse.model_validate(user),
    }


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user info"""
    return UserResponse.model_validate(current_user)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    token_request: RefreshTokenRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """Refresh access token using refresh token"""
    client_ip = request.client.host if request.client else "unknown"

    payload = decode_token(token_request.refresh_token)

    if payload.get("type") != "refresh":
        logger.log_auth_event(
            event="token_refresh",
            success=False,
            reason="Invalid token type",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type - expected refresh token"
        )

    user_id = payload.get("sub")
    try:
        uuid.UUID(str(user_id))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format"
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        logger.log_auth_event(
            event="token_refresh",
            success=False,
            reason="User not found",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    token_data = build_token_data(user)
    logger.log_auth_event(
        event="token_refresh",
        success=True,
        user_email=user.email,
        client_ip=client_ip
    )

    return {
        "access_token": create_access_token(token_data),
        "refresh_token": create_refresh_token(token_data),
        "token_type": "bearer"
    }
