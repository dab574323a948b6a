"""상태 커밋 이후 실행되는 부수 효과(알림, 감사 로그)를 모아 두었다가 best-effort로 실행합니다."""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from manuscript_workflow.services import audit_service, notification_service

logger = logging.getLogger(__name__)


class PostCommitActions:
    def __init__(self):
        self._actions: List[tuple[str, Callable[[Session], Any]]] = []

    def __len__(self) -> int:
        return len(self._actions)

    def extend(self, other: "PostCommitActions") -> None:
        self._actions.extend(other._actions)

    def notify(
        self,
        event: str,
        recipient_ids: Iterable[Optional[int]],
        title: str,
        message: Optional[str] = None,
        link_url: Optional[str] = None,
    ) -> None:
        recipients = list(recipient_ids)
        self._actions.append((
            f"notify:{event}",
            lambda db: notification_service.notify(db, event, recipients, title, message, link_url),
        ))

    def notify_admins(self, event: str, title: str, message: Optional[str] = None, link_url: Optional[str] = None) -> None:
        self._actions.append((
            f"notify:{event}",
            lambda db: notification_service.notify(
                db, event, notification_service.admin_user_ids(db), title, message, link_url
            ),
        ))

    def audit(
        self,
        event_type: str,
        actor_id: Optional[int],
        article_id: Optional[int] = None,
        target_user_id: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._actions.append((
            f"audit:{event_type}",
            lambda db: audit_service.record(db, event_type, actor_id, article_id, target_user_id, metadata),
        ))

    def dispatch(self, db: Session) -> int:
        """실패한 동작 수를 반환한다. 실패는 로그만 남기고 전이는 되돌리지 않는다."""
        failures = 0
        for name, action in self._actions:
            try:
                action(db)
            except Exception as exc:
                failures += 1
                db.rollback()
                logger.warning("[post-commit] %s failed: %s", name, exc)
        self._actions.clear()
        return failures
