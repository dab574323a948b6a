"""Test 편집자/심사자 접근 권한 해제 훅의 이관 규칙과 원자성을 검증하는 자동화 테스트입니다."""

import pytest

from manuscript_workflow.errors import BadRequestError, ForbiddenError, NotFoundError
from manuscript_workflow.models.article import Article, ArticleChangeLog
from manuscript_workflow.models.audit import AuditEvent
from manuscript_workflow.models.notification import Notification
from manuscript_workflow.models.user import User
from manuscript_workflow.services import access_service, history_service, workflow_service
from tests.conftest import TestingSession


@pytest.fixture
def editor_articles(db, actors, seed_users, gateway):
    ids = []
    for title in ("First Paper", "Second Paper", "Third Paper"):
        article = workflow_service.submit_article(
            db, actors["author"], title, f"uploads/articles/{title.lower().replace(' ', '-')}.pdf", gateway=gateway
        )
        workflow_service.assign_editor(db, article.article_id, seed_users["editor"].user_id, actors["admin"])
        ids.append(article.article_id)
    # 세 번째 원고는 이미 승인되어 이관 대상이 아니다.
    workflow_service.editor_approve(db, ids[2], actors["editor"])
    return ids


def _fresh(article_id):
    session = TestingSession()
    try:
        article = session.get(Article, article_id)
        return article.status, article.assigned_editor_id, article.assigned_reviewer_id
    finally:
        session.close()


def test_removing_editor_without_fallback_reverts_articles(db, editor_articles, actors, seed_users):
    editor = seed_users["editor"]

    result = access_service.remove_user_access(db, editor.user_id, actors["admin"], reason="left the journal")

    assert result.reassigned_count == 2
    assert result.article_ids == editor_articles[:2]
    assert result.role == "editor"
    for article_id in editor_articles[:2]:
        assert _fresh(article_id) == ("PENDING_ADMIN_REVIEW", None, None)
    assert _fresh(editor_articles[2])[0] == "EDITOR_APPROVED"

    db.refresh(editor)
    assert editor.is_active is False
    assert db.query(AuditEvent).filter(AuditEvent.event_type == "ACCESS_REMOVED").count() == 1
    assert db.query(AuditEvent).filter(AuditEvent.event_type == "EDITOR_UNASSIGNED").count() == 2
    assert db.query(Notification).filter(
        Notification.user_id == editor.user_id, Notification.noti_type == "access_removed"
    ).count() == 1


def test_removing_editor_with_fallback_reassigns_and_keeps_work(db, editor_articles, actors, seed_users, gateway):
    editor, editor2 = seed_users["editor"], seed_users["editor2"]
    workflow_service.upload_correction(
        db, editor_articles[0], actors["editor"], "uploads/articles/first-v2.pdf", gateway=gateway
    )

    result = access_service.remove_user_access(
        db, editor.user_id, actors["admin"], fallback_user_id=editor2.user_id
    )

    assert result.reassigned_count == 2
    assert result.fallback_user_id == editor2.user_id
    for article_id in editor_articles[:2]:
        assert _fresh(article_id) == ("ASSIGNED_TO_EDITOR", editor2.user_id, None)
    assert db.query(ArticleChangeLog).filter(ArticleChangeLog.article_id == editor_articles[0]).count() == 1
    history = history_service.get_article_history(db, editor_articles[0])
    assert [h.status for h in history] == ["reassigned", "active"]


def test_removing_reviewer_returns_article_to_editor(db, actors, seed_users, gateway):
    article = workflow_service.submit_article(db, actors["author"], "Review Me", "uploads/articles/r.pdf", gateway=gateway)
    workflow_service.assign_editor(db, article.article_id, seed_users["editor"].user_id, actors["admin"])
    workflow_service.editor_approve(db, article.article_id, actors["editor"])
    workflow_service.assign_reviewer(db, article.article_id, seed_users["reviewer"].user_id, actors["admin"])

    result = access_service.remove_user_access(db, seed_users["reviewer"].user_id, actors["admin"])

    assert result.reassigned_count == 1
    assert _fresh(article.article_id) == ("ASSIGNED_TO_EDITOR", seed_users["editor"].user_id, None)


def test_removing_reviewer_without_active_editor_goes_to_admin_queue(db, actors, seed_users, gateway):
    article = workflow_service.submit_article(db, actors["author"], "Orphan", "uploads/articles/o.pdf", gateway=gateway)
    workflow_service.assign_editor(db, article.article_id, seed_users["editor"].user_id, actors["admin"])
    workflow_service.editor_approve(db, article.article_id, actors["editor"])
    workflow_service.assign_reviewer(db, article.article_id, seed_users["reviewer"].user_id, actors["admin"])
    editor = db.get(User, seed_users["editor"].user_id)
    editor.is_active = False
    db.commit()

    access_service.remove_user_access(db, seed_users["reviewer"].user_id, actors["admin"])

    assert _fresh(article.article_id) == ("PENDING_ADMIN_REVIEW", None, None)


def test_removing_reviewer_with_fallback(db, actors, seed_users, gateway):
    article = workflow_service.submit_article(db, actors["author"], "Swap", "uploads/articles/s.pdf", gateway=gateway)
    workflow_service.assign_editor(db, article.article_id, seed_users["editor"].user_id, actors["admin"])
    workflow_service.editor_approve(db, article.article_id, actors["editor"])
    workflow_service.assign_reviewer(db, article.article_id, seed_users["reviewer"].user_id, actors["admin"])

    access_service.remove_user_access(
        db, seed_users["reviewer"].user_id, actors["admin"], fallback_user_id=seed_users["reviewer2"].user_id
    )

    assert _fresh(article.article_id) == (
        "ASSIGNED_TO_REVIEWER", seed_users["editor"].user_id, seed_users["reviewer2"].user_id
    )


def test_failure_midway_rolls_back_everything(db, editor_articles, actors, seed_users, monkeypatch):
    editor = seed_users["editor"]
    real_unassign = workflow_service.unassign_editor_in_tx
    calls = []

    def flaky_unassign(db_, article, actor, post, reason=None):
        calls.append(article.article_id)
        if len(calls) == 2:
            raise RuntimeError("storage hiccup")
        return real_unassign(db_, article, actor, post, reason)

    monkeypatch.setattr(workflow_service, "unassign_editor_in_tx", flaky_unassign)

    with pytest.raises(RuntimeError):
        access_service.remove_user_access(db, editor.user_id, actors["admin"])

    assert len(calls) == 2
    for article_id in editor_articles[:2]:
        assert _fresh(article_id) == ("ASSIGNED_TO_EDITOR", editor.user_id, None)
    check = TestingSession()
    try:
        assert check.get(User, editor.user_id).is_active is True
    finally:
        check.close()
    assert db.query(AuditEvent).filter(AuditEvent.event_type == "ACCESS_REMOVED").count() == 0


def test_only_admins_can_remove_access(db, actors, seed_users):
    with pytest.raises(ForbiddenError):
        access_service.remove_user_access(db, seed_users["reviewer"].user_id, actors["editor"])


def test_invalid_removal_requests(db, actors, seed_users):
    admin = actors["admin"]
    with pytest.raises(BadRequestError):
        access_service.remove_user_access(db, admin.user_id, admin)
    with pytest.raises(BadRequestError):
        access_service.remove_user_access(db, seed_users["author"].user_id, admin)
    with pytest.raises(NotFoundError):
        access_service.remove_user_access(db, 9999, admin)
    with pytest.raises(BadRequestError):
        access_service.remove_user_access(
            db, seed_users["editor"].user_id, admin, fallback_user_id=seed_users["reviewer"].user_id
        )
    with pytest.raises(BadRequestError):
        access_service.remove_user_access(
            db, seed_users["editor"].user_id, admin, fallback_user_id=seed_users["editor"].user_id
        )
    assert db.get(User, seed_users["editor"].user_id).is_active is True

    access_service.remove_user_access(db, seed_users["editor"].user_id, admin)
    with pytest.raises(BadRequestError):
        access_service.remove_user_access(db, seed_users["editor"].user_id, admin)
