"""편집자 담당 이력 서비스입니다. 배정, 재배정, 해제, 완료를 이력 행으로 남깁니다."""

from typing import List, Optional

from sqlalchemy.orm import Session

from manuscript_workflow.models.article import ArticleEditorHistory
from manuscript_workflow.utils.helpers import utcnow

ACTIVE = "active"
REASSIGNED = "reassigned"
UNASSIGNED = "unassigned"
COMPLETED = "completed"


def _close_active(db: Session, article_id: int, status: str) -> int:
    rows = (
        db.query(ArticleEditorHistory)
        .filter(ArticleEditorHistory.article_id == article_id, ArticleEditorHistory.status == ACTIVE)
        .all()
    )
    now = utcnow()
    for row in rows:
        row.status = status
        row.unassigned_at = now
    return len(rows)


def log_assignment(
    db: Session,
    article_id: int,
    editor_id: int,
    assigned_by: int,
    reason: Optional[str] = None,
) -> ArticleEditorHistory:
    row = ArticleEditorHistory(
        article_id=article_id,
        editor_id=editor_id,
        assigned_by=assigned_by,
        reason=reason,
        status=ACTIVE,
        assigned_at=utcnow(),
    )
    db.add(row)
    db.flush()
    return row


def log_reassignment(
    db: Session,
    article_id: int,
    new_editor_id: int,
    assigned_by: int,
    reason: Optional[str] = None,
) -> ArticleEditorHistory:
    _close_active(db, article_id, REASSIGNED)
    return log_assignment(db, article_id, new_editor_id, assigned_by, reason)


def log_unassignment(db: Session, article_id: int) -> int:
    return _close_active(db, article_id, UNASSIGNED)


def mark_completed(db: Session, article_id: int) -> int:
    return _close_active(db, article_id, COMPLETED)


def get_article_history(db: Session, article_id: int) -> List[ArticleEditorHistory]:
    return (
        db.query(ArticleEditorHistory)
        .filter(ArticleEditorHistory.article_id == article_id)
        .order_by(ArticleEditorHistory.history_id.asc())
        .all()
    )
