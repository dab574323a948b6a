"""원고 상태 값과 허용 전이 표를 정의합니다."""

import enum
from typing import Dict, FrozenSet, NamedTuple

from manuscript_workflow.errors import BadRequestError


class ArticleStatus(str, enum.Enum):
    PENDING_ADMIN_REVIEW = "PENDING_ADMIN_REVIEW"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ASSIGNED_TO_EDITOR = "ASSIGNED_TO_EDITOR"
    EDITOR_EDITING = "EDITOR_EDITING"
    EDITOR_APPROVED = "EDITOR_APPROVED"
    ASSIGNED_TO_REVIEWER = "ASSIGNED_TO_REVIEWER"
    REVIEWER_EDITING = "REVIEWER_EDITING"
    REVIEWER_APPROVED = "REVIEWER_APPROVED"
    PUBLISHED = "PUBLISHED"


class ChangeLogStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PUBLISHED = "published"


class VisualDiffStatus(str, enum.Enum):
    PENDING = "PENDING"
    GENERATING = "GENERATING"
    READY = "READY"
    FAILED = "FAILED"


class Transition(NamedTuple):
    sources: FrozenSet[ArticleStatus]
    target: ArticleStatus


S = ArticleStatus

TRANSITIONS: Dict[str, Transition] = {
    "assign_editor": Transition(
        frozenset({S.PENDING_ADMIN_REVIEW, S.ASSIGNED_TO_EDITOR, S.EDITOR_EDITING}),
        S.ASSIGNED_TO_EDITOR,
    ),
    "unassign_editor": Transition(
        frozenset({S.ASSIGNED_TO_EDITOR, S.EDITOR_EDITING}),
        S.PENDING_ADMIN_REVIEW,
    ),
    "mark_pending_approval": Transition(
        frozenset({S.PENDING_ADMIN_REVIEW}),
        S.PENDING_APPROVAL,
    ),
    "upload_correction": Transition(
        frozenset({S.ASSIGNED_TO_EDITOR, S.EDITOR_EDITING}),
        S.EDITOR_EDITING,
    ),
    "editor_approve": Transition(
        frozenset({S.ASSIGNED_TO_EDITOR, S.EDITOR_EDITING}),
        S.EDITOR_APPROVED,
    ),
    "admin_approve": Transition(
        frozenset({S.PENDING_ADMIN_REVIEW, S.ASSIGNED_TO_EDITOR, S.PENDING_APPROVAL}),
        S.PUBLISHED,
    ),
    "assign_reviewer": Transition(
        frozenset({S.EDITOR_APPROVED, S.ASSIGNED_TO_REVIEWER, S.REVIEWER_EDITING}),
        S.ASSIGNED_TO_REVIEWER,
    ),
    # 활성 편집자가 없으면 서비스에서 PENDING_ADMIN_REVIEW로 되돌린다.
    "unassign_reviewer": Transition(
        frozenset({S.ASSIGNED_TO_REVIEWER, S.REVIEWER_EDITING}),
        S.ASSIGNED_TO_EDITOR,
    ),
    "reviewer_upload": Transition(
        frozenset({S.ASSIGNED_TO_REVIEWER, S.REVIEWER_EDITING}),
        S.REVIEWER_EDITING,
    ),
    "reviewer_approve": Transition(
        frozenset({S.ASSIGNED_TO_REVIEWER, S.REVIEWER_EDITING}),
        S.REVIEWER_APPROVED,
    ),
    "publish": Transition(
        frozenset({S.EDITOR_APPROVED, S.REVIEWER_APPROVED}),
        S.PUBLISHED,
    ),
}

# 담당 해제 훅이 대상으로 삼는 "진행 중" 상태
ACTIVE_EDITOR_STATUSES = frozenset({S.ASSIGNED_TO_EDITOR, S.EDITOR_EDITING})
ACTIVE_REVIEWER_STATUSES = frozenset({S.ASSIGNED_TO_REVIEWER, S.REVIEWER_EDITING})


def allowed_sources(transition: str) -> FrozenSet[ArticleStatus]:
    return TRANSITIONS[transition].sources


def ensure_transition(current_status: str, transition: str) -> ArticleStatus:
    """현재 상태에서 전이가 허용되면 목표 상태를 반환하고, 아니면 BadRequestError를 던진다."""
    rule = TRANSITIONS[transition]
    try:
        status = ArticleStatus(current_status)
    except ValueError:
        raise BadRequestError(f"Unknown article status: {current_status}")
    if status not in rule.sources:
        allowed = ", ".join(sorted(s.value for s in rule.sources))
        raise BadRequestError(
            f"Cannot {transition.replace('_', ' ')} in current status: {status.value}. "
            f"Allowed statuses: {allowed}"
        )
    return rule.target
