from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Callable, Iterable, Optional
import uuid

from campusdesk.core.database import get_db
from campusdesk.core.logging_config import set_user_id
from campusdesk.core.security import decode_token
from campusdesk.models.user import User, UserRole

security = HTTPBearer()

# Roles allowed to edit the timetable
TIMETABLE_EDITOR_ROLES = {UserRole.ADMIN, UserRole.HOD, UserRole.COORDINATOR, UserRole.PRINCIPAL}

# Roles that see the no-due queue and the workload report
NO_DUE_APPROVER_ROLES = {
    UserRole.ADMIN, UserRole.HOD, UserRole.LIBRARIAN, UserRole.ACCOUNTANT, UserRole.PRINCIPAL,
}


async def get_user_from_token(token: str, db: AsyncSession) -> Optional[User]:
    """
    Resolve an access token to an active user.

    Returns None instead of raising so WebSocket handlers can close the
    socket with their own code.
    """
    try:
        payload = decode_token(token)
    except HTTPException:
        return None

    if payload.get("type") != "access":
        return None

    user_id = payload.get("sub")
    try:
        uuid.UUID(str(user_id))
    except ValueError:
        return None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        return None
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""

    payload = decode_token(credentials.credentials)

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    try:
        uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format"
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    set_user_id(str(user.id))
    return user


def require_roles(roles: Iterable[UserRole], detail: str = "Insufficient role") -> Callable:
    """Dependency factory: 403 unless the caller holds one of ``roles``"""
    allowed = set(roles)

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail
            )
        return current_user

    return checker


get_timetable_editor = require_roles(TIMETABLE_EDITOR_ROLES, "Timetable editor access required")
get_no_due_approver = require_roles(NO_DUE_APPROVER_ROLES, "No-due approver access required")
