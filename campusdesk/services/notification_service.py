"""
Notification Service
In-app notifications for a single user
"""

from typing import List, Optional
from datetime import datetime
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from campusdesk.core.exceptions import NotificationNotFoundError
from campusdesk.models.notification import Notification, NotificationType

DEFAULT_LIST_LIMIT = 50


class NotificationService:
    """Create, list and mark notifications"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_notification(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        action_url: Optional[str] = None,
        commit: bool = True,
    ) -> Notification:
        """Queue a notification; pass commit=False to ride along with the caller's transaction"""
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            action_url=action_url,
        )
        self.db.add(notification)
        if commit:
            await self.db.commit()
            await self.db.refresh(notification)
        return notification

    async def get_notifications_by_user(self, user_id: str, limit: int = DEFAULT_LIST_LIMIT) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def mark_read(self, notification_id: str, user_id: str) -> Notification:
        """Mark one of the user's notifications read; others' notifications look missing"""
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotificationNotFoundError(notification_id)

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            await self.db.commit()
            await self.db.refresh(notification)
        return notification

    async def mark_all_read(self, user_id: str) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .values(is_read=True, read_at=datetime.utcnow())
            .execution_options(synchronize_session="fetch")
        )
        await self.db.commit()
        return result.rowcount or 0

    async def get_unread_count(self, user_id: str) -> int:
        count = await self.db.scalar(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read == False,  # noqa: E712
            )
        )
        return count or 0
