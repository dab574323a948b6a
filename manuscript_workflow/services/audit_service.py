"""감사 로그 기록 서비스입니다. 기록은 append-only이며 워크플로 전이를 실패시키지 않습니다."""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from manuscript_workflow.models.audit import AuditEvent


def record(
    db: Session,
    event_type: str,
    actor_id: Optional[int],
    article_id: Optional[int] = None,
    target_user_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditEvent:
    event = AuditEvent(
        event_type=event_type,
        actor_id=actor_id,
        article_id=article_id,
        target_user_id=target_user_id,
        metadata_json=metadata or {},
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def list_article_events(db: Session, article_id: int) -> List[AuditEvent]:
    return (
        db.query(AuditEvent)
        .filter(AuditEvent.article_id == article_id)
        .order_by(AuditEvent.event_id)
        .all()
    )
