from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import ApiResponse, UserNotificationOut
from app.db.session import get_session
from app.db.models.user import User
from app.services.notification_service import NotificationService
from app.auth import get_current_user

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(session: AsyncSession = Depends(get_session)) -> NotificationService:
    return NotificationService(session)


@router.get("", response_model=ApiResponse[List[UserNotificationOut]])
async def get_my_notifications(
    unread_only: bool = Query(False, description="Only return unread notifications"),
    user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    notifications = await notification_service.list_user_notifications(user.id, unread_only)
    return ApiResponse(content=notifications)


@router.patch("/{notification_id}/read", response_model=ApiResponse[UserNotificationOut])
async def mark_notification_read(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    notification = await notification_service.mark_as_read(user.id, notification_id)
    return ApiResponse(message="Notification marked as read", content=notification)


@router.delete("/{notification_id}", response_model=ApiResponse[None])
async def delete_notification_endpoint(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    notification_service: NotificationService = Depends(get_notification_service)
):
    await notification_service.delete_notification(user.id, notification_id)
    return ApiResponse(message="Notification deleted")
