"""Notification Service 도메인 서비스 레이어입니다. 워크플로 이벤트를 수신자별 인앱 알림으로 기록합니다."""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from manuscript_workflow.errors import NotFoundError
from manuscript_workflow.models.notification import Notification
from manuscript_workflow.models.user import User
from manuscript_workflow.utils.permissions import ADMIN


def get_notifications(db: Session, user_id: int, unread_only: bool = False) -> List[Notification]:
    q = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        q = q.filter(Notification.is_read == False)  # noqa: E712
    return q.order_by(Notification.created_at.desc(), Notification.noti_id.desc()).limit(50).all()


def admin_user_ids(db: Session) -> List[int]:
    rows = (
        db.query(User.user_id)
        .filter(User.role == ADMIN, User.is_active == True)  # noqa: E712
        .order_by(User.user_id)
        .all()
    )
    return [int(row[0]) for row in rows]


def create_notification(
    db: Session,
    user_id: int,
    noti_type: str,
    title: str,
    message: Optional[str] = None,
    link_url: Optional[str] = None,
) -> Notification:
    noti = Notification(
        user_id=user_id,
        noti_type=noti_type,
        title=title,
        message=message,
        link_url=link_url,
    )
    db.add(noti)
    db.commit()
    db.refresh(noti)
    return noti


def notify(
    db: Session,
    event: str,
    recipient_ids: Iterable[Optional[int]],
    title: str,
    message: Optional[str] = None,
    link_url: Optional[str] = None,
) -> List[Notification]:
    created = []
    seen = set()
    for user_id in recipient_ids:
        # 같은 사용자에게 같은 이벤트를 두 번 보내지 않는다.
        if user_id is None or user_id in seen:
            continue
        seen.add(user_id)
        created.append(create_notification(db, user_id, event, title, message, link_url))
    return created


def mark_read(db: Session, noti_id: int, user_id: int) -> Notification:
    noti = db.query(Notification).filter(
        Notification.noti_id == noti_id,
        Notification.user_id == user_id,
    ).first()
    if not noti:
        raise NotFoundError("Notification not found")
    noti.is_read = True
    db.commit()
    db.refresh(noti)
    return noti


def mark_all_read(db: Session, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read == False,  # noqa: E712
    ).update({"is_read": True})
    db.commit()
    return updated
