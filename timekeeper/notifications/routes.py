from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from timekeeper.core.database import get_db
from timekeeper.core.dependencies import get_current_user
from timekeeper.employees.models import Profile
from timekeeper.notifications.schemas import NotificationResponse, UnreadCountResponse, MarkAllReadResponse
from timekeeper.notifications.service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=List[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(False),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The caller's notifications, newest first."""
    return NotificationService(db).list_notifications(current_user, unread_only, skip, limit)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"unread": NotificationService(db).unread_count(current_user)}


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"updated": NotificationService(db).mark_all_read(current_user)}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return NotificationService(db).mark_read(notification_id, current_user)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    NotificationService(db).delete_notification(notification_id, current_user)
    return {"message": "Notification deleted successfully"}
