"""편집자/심사자 접근 권한 해제 서비스입니다.

사용자 비활성화와 담당 원고 이관은 하나의 트랜잭션으로 처리한다. 원고 상태는 직접 바꾸지 않고
workflow_service 의 배정/해제 전이를 그대로 호출한다.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from manuscript_workflow.errors import BadRequestError, NotFoundError
from manuscript_workflow.models.article import Article
from manuscript_workflow.models.user import User
from manuscript_workflow.schemas.access import AccessRemovalResult
from manuscript_workflow.services import workflow_service
from manuscript_workflow.utils.article_states import ACTIVE_EDITOR_STATUSES, ACTIVE_REVIEWER_STATUSES
from manuscript_workflow.utils.permissions import ADMIN, ASSIGNABLE_ROLES, EDITOR, Actor, require_permission

logger = logging.getLogger(__name__)


def _affected_articles(db: Session, user: User) -> List[Article]:
    if user.role == EDITOR:
        column, statuses = Article.assigned_editor_id, ACTIVE_EDITOR_STATUSES
    else:
        column, statuses = Article.assigned_reviewer_id, ACTIVE_REVIEWER_STATUSES
    return (
        db.query(Article)
        .filter(column == user.user_id, Article.status.in_([s.value for s in statuses]))
        .order_by(Article.article_id)
        .all()
    )


def _validate_fallback(db: Session, user: User, fallback_user_id: Optional[int]) -> None:
    if fallback_user_id is None:
        return
    if fallback_user_id == user.user_id:
        raise BadRequestError("Fallback user must differ from the user losing access")
    fallback = db.query(User).filter(User.user_id == fallback_user_id).first()
    if not fallback:
        raise NotFoundError("Fallback user not found")
    if not fallback.is_active or fallback.role not in (user.role, ADMIN):
        raise BadRequestError(f"Fallback user must be an active {user.role}")


def remove_user_access(
    db: Session,
    user_id: int,
    actor: Actor,
    reason: Optional[str] = None,
    fallback_user_id: Optional[int] = None,
) -> AccessRemovalResult:
    require_permission(actor, "remove_access", message="Only admins can remove user access")
    if user_id == actor.user_id:
        raise BadRequestError("You cannot remove your own access")

    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    if user.role not in ASSIGNABLE_ROLES:
        raise BadRequestError("Only editors and reviewers can have their access removed")
    if not user.is_active:
        raise BadRequestError("User access has already been removed")
    _validate_fallback(db, user, fallback_user_id)

    role = user.role
    with workflow_service.unit_of_work(db) as post:
        user.is_active = False
        articles = _affected_articles(db, user)
        for article in articles:
            if role == EDITOR:
                if fallback_user_id is not None:
                    workflow_service.assign_editor_in_tx(
                        db, article, fallback_user_id, actor, post,
                        preserve_work=True, reason=reason or "Previous editor lost access",
                    )
                else:
                    workflow_service.unassign_editor_in_tx(db, article, actor, post, reason)
            else:
                if fallback_user_id is not None:
                    workflow_service.assign_reviewer_in_tx(db, article, fallback_user_id, actor, post, reason)
                else:
                    workflow_service.unassign_reviewer_in_tx(db, article, actor, post, reason)
        article_ids = [article.article_id for article in articles]

        post.audit(
            "ACCESS_REMOVED", actor.user_id, target_user_id=user_id,
            metadata={
                "role": role,
                "reason": reason,
                "article_ids": article_ids,
                "fallback_user_id": fallback_user_id,
            },
        )
        post.notify(
            "access_removed",
            [user_id],
            "Your access has been removed",
            reason or "An administrator removed your editorial access.",
        )

    logger.info(
        "[access] user=%s (%s) deactivated by user=%s, %s article(s) migrated",
        user_id, role, actor.user_id, len(article_ids),
    )
    return AccessRemovalResult(
        user_id=user_id,
        role=role,
        reassigned_count=len(article_ids),
        article_ids=article_ids,
        fallback_user_id=fallback_user_id,
    )
