from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campusdesk.core.database import get_db
from campusdesk.models.user import User
from campusdesk.modules.auth.dependencies import get_current_user
from campusdesk.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from campusdesk.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = NotificationService(db)
    notifications = await service.get_notifications_by_user(str(current_user.id), limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=await service.get_unread_count(str(current_user.id)),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    count = await NotificationService(db).get_unread_count(str(current_user.id))
    return UnreadCountResponse(unread_count=count)


@router.post("/read-all")
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    updated = await NotificationService(db).mark_all_read(str(current_user.id))
    return {"success": True, "updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    notification = await NotificationService(db).mark_read(notification_id, str(current_user.id))
    return NotificationResponse.model_validate(notification)
