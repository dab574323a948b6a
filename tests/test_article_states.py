"""Test 원고 상태 전이 표와 권한 검사 동작을 검증하는 자동화 테스트입니다."""

import pytest

from manuscript_workflow.errors import BadRequestError, ForbiddenError
from manuscript_workflow.models.article import Article
from manuscript_workflow.utils.article_states import TRANSITIONS, ArticleStatus, ensure_transition
from manuscript_workflow.utils.permissions import Actor, can_perform, require_permission


def test_every_transition_targets_a_known_status():
    for name, rule in TRANSITIONS.items():
        assert rule.sources, name
        assert isinstance(rule.target, ArticleStatus)


def test_published_is_terminal():
    for rule in TRANSITIONS.values():
        assert ArticleStatus.PUBLISHED not in rule.sources


def test_ensure_transition_returns_target():
    assert ensure_transition("PENDING_ADMIN_REVIEW", "assign_editor") == ArticleStatus.ASSIGNED_TO_EDITOR
    assert ensure_transition("EDITOR_EDITING", "editor_approve") == ArticleStatus.EDITOR_APPROVED
    assert ensure_transition("PENDING_APPROVAL", "admin_approve") == ArticleStatus.PUBLISHED


def test_ensure_transition_names_offending_status():
    with pytest.raises(BadRequestError) as exc_info:
        ensure_transition("PUBLISHED", "editor_approve")
    assert "PUBLISHED" in str(exc_info.value)
    assert exc_info.value.status_code == 400


def test_unknown_status_is_rejected():
    with pytest.raises(BadRequestError):
        ensure_transition("ARCHIVED", "publish")


def _article(**kwargs):
    defaults = dict(article_id=1, author_id=10, assigned_editor_id=20, assigned_reviewer_id=30)
    defaults.update(kwargs)
    return Article(**defaults)


def test_capabilities_by_role_and_assignment():
    article = _article()
    admin = Actor(user_id=1, role="admin")
    editor = Actor(user_id=20, role="editor")
    other_editor = Actor(user_id=21, role="editor")
    reviewer = Actor(user_id=30, role="reviewer")
    author = Actor(user_id=10, role="author")

    assert can_perform(admin, "assign_editor", article)
    assert not can_perform(editor, "assign_editor", article)
    assert can_perform(editor, "editor_approve", article)
    assert not can_perform(other_editor, "editor_approve", article)
    # 관리자도 편집자 승인 경로는 사용할 수 없다.
    assert not can_perform(admin, "editor_approve", article)
    assert can_perform(admin, "upload_correction", article)
    assert can_perform(reviewer, "reviewer_approve", article)
    assert not can_perform(editor, "reviewer_approve", article)
    assert can_perform(author, "view_article", article)
    assert not can_perform(author, "generate_visual_diff", article)


def test_inactive_or_missing_actor_cannot_act():
    article = _article()
    assert not can_perform(None, "publish", article)
    assert not can_perform(Actor(user_id=1, role="admin", is_active=False), "publish", article)
    assert not can_perform(Actor(user_id=1, role="superuser"), "publish", article)
    assert not can_perform(Actor(user_id=1, role="admin"), "unknown_action", article)


def test_require_permission_raises_forbidden():
    with pytest.raises(ForbiddenError) as exc_info:
        require_permission(Actor(user_id=21, role="editor"), "editor_approve", _article(), "Not your article")
    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Not your article"

    with pytest.raises(ForbiddenError):
        require_permission(None, "publish", _article())
