"""Permissions 관련 공용 유틸리티 헬퍼입니다. 전이마다 한 번씩 평가되는 권한 검사 함수를 제공합니다."""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from manuscript_workflow.errors import ForbiddenError
from manuscript_workflow.models.article import Article
from manuscript_workflow.models.user import User


ADMIN = "admin"
EDITOR = "editor"
REVIEWER = "reviewer"
AUTHOR = "author"

ALL_ROLES = (ADMIN, EDITOR, REVIEWER, AUTHOR)
ASSIGNABLE_ROLES = (EDITOR, REVIEWER)


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: str
    is_active: bool = True

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(user_id=user.user_id, role=user.role, is_active=bool(user.is_active))


def is_admin(actor: Actor) -> bool:
    return actor.role == ADMIN


def is_assigned_editor(actor: Actor, article: Article) -> bool:
    return article.assigned_editor_id is not None and article.assigned_editor_id == actor.user_id


def is_assigned_reviewer(actor: Actor, article: Article) -> bool:
    return article.assigned_reviewer_id is not None and article.assigned_reviewer_id == actor.user_id


def _any_role(actor: Actor, article: Optional[Article]) -> bool:
    return True


def _admin_only(actor: Actor, article: Optional[Article]) -> bool:
    return is_admin(actor)


def _assigned_editor_only(actor: Actor, article: Optional[Article]) -> bool:
    return article is not None and is_assigned_editor(actor, article)


def _assigned_reviewer_only(actor: Actor, article: Optional[Article]) -> bool:
    return article is not None and is_assigned_reviewer(actor, article)


def _admin_or_assigned_editor(actor: Actor, article: Optional[Article]) -> bool:
    return is_admin(actor) or _assigned_editor_only(actor, article)


def _admin_or_assignee(actor: Actor, article: Optional[Article]) -> bool:
    return (
        is_admin(actor)
        or _assigned_editor_only(actor, article)
        or _assigned_reviewer_only(actor, article)
    )


def _can_view(actor: Actor, article: Optional[Article]) -> bool:
    if article is not None and article.author_id == actor.user_id:
        return True
    return _admin_or_assignee(actor, article)


_RULES: Dict[str, Callable[[Actor, Optional[Article]], bool]] = {
    "submit_article": _any_role,
    "assign_editor": _admin_only,
    "unassign_editor": _admin_only,
    "mark_pending_approval": _admin_only,
    "upload_correction": _admin_or_assigned_editor,
    "editor_approve": _assigned_editor_only,
    "admin_approve": _admin_only,
    "assign_reviewer": _admin_only,
    "unassign_reviewer": _admin_only,
    "reviewer_upload": _assigned_reviewer_only,
    "reviewer_approve": _assigned_reviewer_only,
    "publish": _admin_only,
    "delete_article": _admin_only,
    "remove_access": _admin_only,
    "generate_visual_diff": _admin_or_assignee,
    "view_article": _can_view,
}


def can_perform(actor: Optional[Actor], action: str, article: Optional[Article] = None) -> bool:
    if actor is None or not actor.is_active or actor.role not in ALL_ROLES:
        return False
    rule = _RULES.get(action)
    if rule is None:
        return False
    return rule(actor, article)


def require_permission(
    actor: Optional[Actor],
    action: str,
    article: Optional[Article] = None,
    message: Optional[str] = None,
) -> Actor:
    if not can_perform(actor, action, article):
        if actor is None:
            raise ForbiddenError("Authentication is required for this action")
        raise ForbiddenError(message or "You do not have permission to perform this action")
    return actor
