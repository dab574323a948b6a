"""Notifications 기능 API 라우터입니다. 워크플로 전이가 남긴 인앱 알림을 조회합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from manuscript_workflow.database import get_db
from manuscript_workflow.schemas.notification import NotificationOut
from manuscript_workflow.services import notification_service
from manuscript_workflow.middleware.auth_middleware import get_current_user
from manuscript_workflow.models.user import User

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return notification_service.get_notifications(db, current_user.user_id, unread_only)


@router.patch("/{noti_id}/read", response_model=NotificationOut)
def mark_read(noti_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return notification_service.mark_read(db, noti_id, current_user.user_id)


@router.post("/read-all")
def mark_all_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    updated = notification_service.mark_all_read(db, current_user.user_id)
    return {"message": "All notifications marked as read", "updated": updated}
