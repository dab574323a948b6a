"""Article Workflow 도메인 서비스 레이어입니다.

원고 상태 전이(배정, 교정본 업로드, 승인, 게시)를 담당한다. 각 전이는 다음 순서를 따른다.
  1. 권한 검사 (utils.permissions)
  2. 현재 상태 검사 (utils.article_states)
  3. 하나의 트랜잭션 안에서 상태 변경과 연관 행 변경
  4. commit 이후 알림/감사 로그 실행 (실패해도 전이는 유지)

문서 변환/추출 같은 외부 호출은 트랜잭션 밖에서만 수행한다.
`*_in_tx` 함수는 commit 하지 않으므로 access_service 처럼 여러 전이를 하나의 트랜잭션으로 묶을 때 사용한다.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from manuscript_workflow.config import settings
from manuscript_workflow.errors import BadRequestError, NotFoundError
from manuscript_workflow.models.article import Article, ArticleChangeLog, ArticleEditorHistory, ArticleRevision
from manuscript_workflow.models.user import User
from manuscript_workflow.services import diff_service, history_service, revision_service
from manuscript_workflow.services.document_gateway import (
    DocumentGateway,
    DocumentGatewayError,
    ExtractedContent,
    get_document_gateway,
)
from manuscript_workflow.services.post_commit import PostCommitActions
from manuscript_workflow.utils.article_states import (
    TRANSITIONS,
    ArticleStatus,
    ChangeLogStatus,
    allowed_sources,
    ensure_transition,
)
from manuscript_workflow.utils.helpers import utcnow
from manuscript_workflow.utils.permissions import (
    ADMIN,
    EDITOR,
    REVIEWER,
    Actor,
    is_admin,
    is_assigned_reviewer,
    require_permission,
)
from manuscript_workflow.utils.slugs import generate_unique_slug

logger = logging.getLogger(__name__)


@dataclass
class AssignmentOutcome:
    article: Article
    is_reassignment: bool
    old_editor_id: Optional[int]
    new_editor_id: int
    purged_work: bool = False


@dataclass
class CorrectionOutcome:
    article: Article
    version_number: int
    change_log_id: int
    diff_summary: str


@dataclass
class PublishOutcome:
    article: Article
    diff_summary: str
    published_change_logs: int


@contextmanager
def unit_of_work(db: Session) -> Iterator[PostCommitActions]:
    """블록 전체를 한 트랜잭션으로 commit 하고, 성공했을 때만 수집된 부수 효과를 실행한다."""
    post = PostCommitActions()
    try:
        yield post
        db.commit()
    except Exception:
        db.rollback()
        raise
    post.dispatch(db)


def _article_link(article: Article) -> str:
    return f"/articles/{article.article_id}"


# ---------------------------------------------------------------------------
# 조회
# ---------------------------------------------------------------------------

def get_article(db: Session, article_id: int) -> Article:
    article = db.query(Article).filter(Article.article_id == article_id).first()
    if not article:
        raise NotFoundError("Article not found")
    return article


def get_article_for(db: Session, article_id: int, actor: Actor) -> Article:
    article = get_article(db, article_id)
    require_permission(actor, "view_article", article, "You do not have access to this article")
    return article


def list_articles(db: Session, actor: Actor, status: Optional[str] = None) -> List[Article]:
    q = db.query(Article)
    if actor.role == EDITOR:
        q = q.filter(Article.assigned_editor_id == actor.user_id)
    elif actor.role == REVIEWER:
        q = q.filter(Article.assigned_reviewer_id == actor.user_id)
    elif not is_admin(actor):
        q = q.filter(Article.author_id == actor.user_id)
    if status:
        q = q.filter(Article.status == status)
    return q.order_by(Article.article_id.desc()).all()


def list_change_logs(db: Session, article_id: int, actor: Actor) -> List[ArticleChangeLog]:
    get_article_for(db, article_id, actor)
    return revision_service.list_change_logs(db, article_id)


def list_revisions(db: Session, article_id: int, actor: Actor) -> List[ArticleRevision]:
    get_article_for(db, article_id, actor)
    return revision_service.list_revisions(db, article_id)


def get_editor_history(db: Session, article_id: int, actor: Actor) -> List[ArticleEditorHistory]:
    get_article_for(db, article_id, actor)
    return history_service.get_article_history(db, article_id)


# ---------------------------------------------------------------------------
# 내부 헬퍼
# ---------------------------------------------------------------------------

def _get_assignee(db: Session, user_id: int, role: str) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    if not user.is_active:
        raise BadRequestError(f"User {user_id} is inactive and cannot be assigned")
    if user.role not in (role, ADMIN):
        raise BadRequestError(f"User {user_id} does not have the {role} role")
    return user


def _apply_transition(
    db: Session,
    article: Article,
    transition: str,
    target: Optional[ArticleStatus] = None,
) -> ArticleStatus:
    """상태 조건부 UPDATE로 전이를 적용한다. 동시에 다른 전이가 먼저 끝났다면 BadRequestError."""
    target = target or ensure_transition(article.status, transition)
    current = article.status
    db.flush()
    affected = (
        db.query(Article)
        .filter(
            Article.article_id == article.article_id,
            Article.status == current,
            Article.status.in_([s.value for s in allowed_sources(transition)]),
        )
        .update({"status": target.value}, synchronize_session="fetch")
    )
    if affected != 1:
        db.refresh(article, ["status"])
        raise BadRequestError(
            f"Cannot {transition.replace('_', ' ')} in current status: {article.status}. "
            "The article was changed by another request"
        )
    logger.info("[workflow] article=%s %s: %s -> %s", article.article_id, transition, current, target.value)
    return target


def _extract(gateway: DocumentGateway, file_url: Optional[str]) -> Optional[ExtractedContent]:
    if not file_url:
        return None
    try:
        return gateway.extract(file_url)
    except DocumentGatewayError as exc:
        logger.warning("[workflow] text extraction failed for %s: %s", file_url, exc)
        return None


def _convert(gateway: DocumentGateway, file_url: str):
    if not str(file_url or "").strip():
        raise BadRequestError("A document file is required")
    try:
        return gateway.ensure_both_formats(file_url)
    except DocumentGatewayError as exc:
        logger.error("[workflow] document conversion failed for %s: %s", file_url, exc)
        raise BadRequestError(f"Document conversion failed: {exc}")


@dataclass(frozen=True)
class _DocumentSnapshot:
    status: str
    content: Optional[str]
    current_pdf_url: Optional[str]
    original_pdf_url: Optional[str]


def _snapshot_and_release(db: Session, article: Article) -> _DocumentSnapshot:
    """게이트웨이 호출 전에 필요한 값만 복사하고 읽기 트랜잭션을 닫는다."""
    snapshot = _DocumentSnapshot(
        status=article.status,
        content=article.content,
        current_pdf_url=article.current_pdf_url,
        original_pdf_url=article.original_pdf_url,
    )
    db.rollback()
    return snapshot


def _current_text(gateway: DocumentGateway, snapshot: _DocumentSnapshot) -> Tuple[str, bool]:
    if snapshot.content:
        return snapshot.content, True
    extracted = _extract(gateway, snapshot.current_pdf_url)
    if extracted is None:
        return "", False
    return extracted.text, True


# ---------------------------------------------------------------------------
# 제출
# ---------------------------------------------------------------------------

def submit_article(
    db: Session,
    actor: Actor,
    title: str,
    file_url: str,
    category: Optional[str] = None,
    abstract: Optional[str] = None,
    gateway: Optional[DocumentGateway] = None,
) -> Article:
    require_permission(actor, "submit_article")
    title = str(title or "").strip()
    if not title:
        raise BadRequestError("Title is required")
    gateway = gateway or get_document_gateway()
    # 인증 단계의 조회 트랜잭션을 변환 호출 전에 닫는다.
    db.rollback()

    converted = _convert(gateway, file_url)
    extracted = _extract(gateway, converted.pdf_path)

    with unit_of_work(db) as post:
        article = Article(
            slug=generate_unique_slug(db, title),
            title=title,
            category=category,
            abstract=abstract,
            author_id=actor.user_id,
            status=ArticleStatus.PENDING_ADMIN_REVIEW.value,
            original_pdf_url=converted.pdf_path,
            original_word_url=converted.word_path,
            current_pdf_url=converted.pdf_path,
            current_word_url=converted.word_path,
            content=extracted.text if extracted else None,
            content_html=extracted.html if extracted else None,
            submitted_at=utcnow(),
        )
        db.add(article)
        db.flush()
        post.audit("ARTICLE_SUBMITTED", actor.user_id, article.article_id, metadata={"title": title})
        post.notify_admins(
            "article_submitted",
            "New article submitted",
            f"'{title}' is waiting for admin review.",
            _article_link(article),
        )
    db.refresh(article)
    return article


# ---------------------------------------------------------------------------
# 편집자 배정/해제
# ---------------------------------------------------------------------------

def assign_editor_in_tx(
    db: Session,
    article: Article,
    editor_id: int,
    actor: Actor,
    post: PostCommitActions,
    preserve_work: bool = True,
    reason: Optional[str] = None,
) -> AssignmentOutcome:
    require_permission(actor, "assign_editor", article, "Only admins can assign editors")
    if article.assigned_editor_id == editor_id:
        raise BadRequestError("This editor is already assigned to the article")
    ensure_transition(article.status, "assign_editor")
    editor = _get_assignee(db, editor_id, EDITOR)

    old_editor_id = article.assigned_editor_id
    is_reassignment = old_editor_id is not None
    purged = False
    metadata = {"old_editor_id": old_editor_id, "new_editor_id": editor.user_id, "preserve_work": preserve_work}

    if is_reassignment and not preserve_work:
        deleted_logs, deleted_revisions = revision_service.purge_revision_history(db, article, old_editor_id)
        purged = True
        metadata.update(deleted_change_logs=deleted_logs, deleted_revisions=deleted_revisions)

    _apply_transition(db, article, "assign_editor")
    article.assigned_editor_id = editor.user_id
    article.assigned_reviewer_id = None

    link = _article_link(article)
    if is_reassignment:
        history_service.log_reassignment(db, article.article_id, editor.user_id, actor.user_id, reason)
        post.audit("EDITOR_REASSIGNED", actor.user_id, article.article_id, editor.user_id, metadata)
        post.notify(
            "article_unassigned",
            [old_editor_id],
            "Article reassigned",
            f"'{article.title}' has been reassigned to another editor.",
            link,
        )
        post.notify(
            "article_assigned",
            [editor.user_id],
            "Article assigned to you",
            f"'{article.title}' has been reassigned to you.",
            link,
        )
    else:
        history_service.log_assignment(db, article.article_id, editor.user_id, actor.user_id, reason)
        post.audit("EDITOR_ASSIGNED", actor.user_id, article.article_id, editor.user_id, metadata)
        post.notify(
            "article_assigned",
            [editor.user_id],
            "Article assigned to you",
            f"'{article.title}' has been assigned to you for editing.",
            link,
        )
        post.notify(
            "article_in_review",
            [article.author_id],
            "Your article is under review",
            f"An editor has been assigned to '{article.title}'.",
            link,
        )

    return AssignmentOutcome(
        article=article,
        is_reassignment=is_reassignment,
        old_editor_id=old_editor_id,
        new_editor_id=editor.user_id,
        purged_work=purged,
    )


def assign_editor(
    db: Session,
    article_id: int,
    editor_id: int,
    actor: Actor,
    preserve_work: bool = True,
    reason: Optional[str] = None,
) -> AssignmentOutcome:
    with unit_of_work(db) as post:
        article = get_article(db, article_id)
        outcome = assign_editor_in_tx(db, article, editor_id, actor, post, preserve_work, reason)
    db.refresh(outcome.article)
    return outcome


def unassign_editor_in_tx(
    db: Session,
    article: Article,
    actor: Actor,
    post: PostCommitActions,
    reason: Optional[str] = None,
) -> Article:
    require_permission(actor, "unassign_editor", article, "Only admins can unassign editors")
    ensure_transition(article.status, "unassign_editor")
    old_editor_id = article.assigned_editor_id

    _apply_transition(db, article, "unassign_editor")
    article.assigned_editor_id = None
    article.assigned_reviewer_id = None
    history_service.log_unassignment(db, article.article_id)

    post.audit(
        "EDITOR_UNASSIGNED", actor.user_id, article.article_id, old_editor_id,
        {"reason": reason} if reason else None,
    )
    post.notify(
        "article_unassigned",
        [old_editor_id],
        "Article unassigned",
        f"You are no longer assigned to '{article.title}'.",
        _article_link(article),
    )
    return article


def unassign_editor(db: Session, article_id: int, actor: Actor, reason: Optional[str] = None) -> Article:
    with unit_of_work(db) as post:
        article = unassign_editor_in_tx(db, get_article(db, article_id), actor, post, reason)
    db.refresh(article)
    return article


def mark_pending_approval(db: Session, article_id: int, actor: Actor) -> Article:
    with unit_of_work(db) as post:
        article = get_article(db, article_id)
        require_permission(actor, "mark_pending_approval", article, "Only admins can change this status")
        _apply_transition(db, article, "mark_pending_approval")
        post.audit("ARTICLE_PENDING_APPROVAL", actor.user_id, article.article_id)
    db.refresh(article)
    return article


# ---------------------------------------------------------------------------
# 심사자 배정/해제
# ---------------------------------------------------------------------------

def assign_reviewer_in_tx(
    db: Session,
    article: Article,
    reviewer_id: int,
    actor: Actor,
    post: PostCommitActions,
    reason: Optional[str] = None,
) -> Article:
    require_permission(actor, "assign_reviewer", article, "Only admins can assign reviewers")
    if article.assigned_reviewer_id == reviewer_id:
        raise BadRequestError("This reviewer is already assigned to the article")
    ensure_transition(article.status, "assign_reviewer")
    reviewer = _get_assignee(db, reviewer_id, REVIEWER)

    old_reviewer_id = article.assigned_reviewer_id
    _apply_transition(db, article, "assign_reviewer")
    article.assigned_reviewer_id = reviewer.user_id

    event = "REVIEWER_REASSIGNED" if old_reviewer_id else "REVIEWER_ASSIGNED"
    post.audit(
        event, actor.user_id, article.article_id, reviewer.user_id,
        {"old_reviewer_id": old_reviewer_id, "reason": reason},
    )
    link = _article_link(article)
    if old_reviewer_id:
        post.notify(
            "article_unassigned",
            [old_reviewer_id],
            "Review reassigned",
            f"'{article.title}' has been reassigned to another reviewer.",
            link,
        )
    post.notify(
        "review_assigned",
        [reviewer.user_id],
        "Review assigned to you",
        f"'{article.title}' is ready for your review.",
        link,
    )
    return article


def assign_reviewer(
    db: Session,
    article_id: int,
    reviewer_id: int,
    actor: Actor,
    reason: Optional[str] = None,
) -> Article:
    with unit_of_work(db) as post:
        article = assign_reviewer_in_tx(db, get_article(db, article_id), reviewer_id, actor, post, reason)
    db.refresh(article)
    return article


def unassign_reviewer_in_tx(
    db: Session,
    article: Article,
    actor: Actor,
    post: PostCommitActions,
    reason: Optional[str] = None,
) -> Article:
    require_permission(actor, "unassign_reviewer", article, "Only admins can unassign reviewers")
    ensure_transition(article.status, "unassign_reviewer")
    old_reviewer_id = article.assigned_reviewer_id

    editor_active = False
    if article.assigned_editor_id is not None:
        editor_active = (
            db.query(User.user_id)
            .filter(User.user_id == article.assigned_editor_id, User.is_active == True)  # noqa: E712
            .first()
            is not None
        )

    if editor_active:
        _apply_transition(db, article, "unassign_reviewer")
    else:
        # 편집자도 없으면 관리자 재배정 대기열로 돌아간다.
        _apply_transition(db, article, "unassign_reviewer", target=ArticleStatus.PENDING_ADMIN_REVIEW)
        article.assigned_editor_id = None
        history_service.log_unassignment(db, article.article_id)
    article.assigned_reviewer_id = None

    post.audit(
        "REVIEWER_UNASSIGNED", actor.user_id, article.article_id, old_reviewer_id,
        {"reason": reason} if reason else None,
    )
    post.notify(
        "article_unassigned",
        [old_reviewer_id],
        "Review unassigned",
        f"You are no longer assigned to review '{article.title}'.",
        _article_link(article),
    )
    return article


def unassign_reviewer(db: Session, article_id: int, actor: Actor, reason: Optional[str] = None) -> Article:
    with unit_of_work(db) as post:
        article = unassign_reviewer_in_tx(db, get_article(db, article_id), actor, post, reason)
    db.refresh(article)
    return article


# ---------------------------------------------------------------------------
# 교정본 업로드
# ---------------------------------------------------------------------------

def _build_diff_data(old_text: str, new_text: str, extraction_failed: bool) -> Tuple[dict, str]:
    result = diff_service.diff_texts(old_text, new_text)
    summary_text = diff_service.describe_summary(result.summary)
    data = result.model_dump()
    data["summary_text"] = summary_text
    if extraction_failed:
        data["extraction_failed"] = True
    return data, summary_text


class _BaseVersionChanged(Exception):
    """diff 기준 파일이 기록 직전에 바뀌었다."""


def _correction_transition(article: Article, actor: Actor) -> str:
    reviewer_statuses = {s.value for s in TRANSITIONS["reviewer_upload"].sources}
    editor_statuses = {s.value for s in TRANSITIONS["upload_correction"].sources}
    if article.status in reviewer_statuses:
        return "reviewer_upload"
    # 어느 업로드도 허용되지 않는 상태에서는 업로드한 사람의 역할로 전이를 고른다.
    if article.status not in editor_statuses and is_assigned_reviewer(actor, article):
        return "reviewer_upload"
    return "upload_correction"


def upload_correction(
    db: Session,
    article_id: int,
    actor: Actor,
    file_url: str,
    comments: Optional[str] = None,
    editor_document_url: Optional[str] = None,
    editor_document_type: Optional[str] = None,
    gateway: Optional[DocumentGateway] = None,
) -> CorrectionOutcome:
    """편집자 또는 심사자가 교정본을 올린다. 변환 실패 시 아무것도 기록하지 않는다.

    diff 는 기록 시점의 현재 파일과 비교한 결과여야 한다. 그 사이 다른 업로드가 먼저 기록되면
    (버전 번호 충돌 또는 현재 파일 변경) 새 기준 파일로 diff 를 다시 계산해 재시도한다.
    """
    gateway = gateway or get_document_gateway()
    converted = None
    extracted = None

    attempts = max(1, int(settings.VERSION_RETRY_ATTEMPTS))
    for attempt in range(1, attempts + 1):
        article = get_article(db, article_id)
        transition = _correction_transition(article, actor)
        require_permission(actor, transition, article, "You are not assigned to this article")
        ensure_transition(article.status, transition)
        base = _snapshot_and_release(db, article)

        if converted is None:
            converted = _convert(gateway, file_url)
            extracted = _extract(gateway, converted.pdf_path)
        old_text, old_ok = _current_text(gateway, base)
        new_text = extracted.text if extracted else ""
        diff_data, summary_text = _build_diff_data(old_text, new_text, not (old_ok and extracted is not None))
        # 저장되는 old/new 파일은 변환된 PDF 다.
        file_type = revision_service.file_type_for(converted.pdf_path)

        try:
            with unit_of_work(db) as post:
                article = get_article(db, article_id)
                if article.status != base.status or article.current_pdf_url != base.current_pdf_url:
                    raise _BaseVersionChanged(article.current_pdf_url)
                require_permission(actor, transition, article, "You are not assigned to this article")
                _apply_transition(db, article, transition)
                _, change_log = revision_service.record_version(
                    db,
                    article,
                    uploaded_by=actor.user_id,
                    pdf_url=converted.pdf_path,
                    word_url=converted.word_path,
                    file_type=file_type,
                    diff_data=diff_data,
                    comments=comments,
                    editor_document_url=editor_document_url,
                    editor_document_type=editor_document_type,
                )
                article.content = extracted.text if extracted else None
                article.content_html = extracted.html if extracted else None
                if article.reviewed_at is None:
                    article.reviewed_at = utcnow()
                version_number = change_log.version_number
                post.audit(
                    "ARTICLE_CORRECTED", actor.user_id, article.article_id,
                    metadata={"version_number": version_number, "summary": summary_text},
                )
            break
        except (IntegrityError, _BaseVersionChanged) as exc:
            logger.warning(
                "[workflow] concurrent upload on article=%s (attempt %s/%s): %s",
                article_id, attempt, attempts, getattr(exc, "orig", exc),
            )
            if attempt == attempts:
                raise BadRequestError("Could not record the new version, please retry")

    db.refresh(article)
    return CorrectionOutcome(
        article=article,
        version_number=version_number,
        change_log_id=change_log.change_log_id,
        diff_summary=summary_text,
    )


# ---------------------------------------------------------------------------
# 승인 / 게시
# ---------------------------------------------------------------------------

def editor_approve(db: Session, article_id: int, actor: Actor) -> Article:
    with unit_of_work(db) as post:
        article = get_article(db, article_id)
        require_permission(actor, "editor_approve", article, "Only the assigned editor can approve this article")
        _apply_transition(db, article, "editor_approve")
        if article.editor_approved_at is None:
            article.editor_approved_at = utcnow()
        approved = revision_service.bump_change_log_status(
            db, article.article_id, [ChangeLogStatus.PENDING], ChangeLogStatus.APPROVED
        )
        post.audit("EDITOR_APPROVED", actor.user_id, article.article_id, metadata={"approved_change_logs": approved})
        post.notify_admins(
            "article_editor_approved",
            "Article approved by editor",
            f"'{article.title}' is ready to publish.",
            _article_link(article),
        )
    db.refresh(article)
    return article


def reviewer_approve(db: Session, article_id: int, actor: Actor) -> Article:
    with unit_of_work(db) as post:
        article = get_article(db, article_id)
        require_permission(actor, "reviewer_approve", article, "Only the assigned reviewer can approve this article")
        _apply_transition(db, article, "reviewer_approve")
        if article.reviewed_at is None:
            article.reviewed_at = utcnow()
        approved = revision_service.bump_change_log_status(
            db, article.article_id, [ChangeLogStatus.PENDING], ChangeLogStatus.APPROVED, edited_by=actor.user_id
        )
        post.audit("REVIEWER_APPROVED", actor.user_id, article.article_id, metadata={"approved_change_logs": approved})
        post.notify_admins(
            "article_reviewer_approved",
            "Article approved by reviewer",
            f"'{article.title}' has passed review and is ready to publish.",
            _article_link(article),
        )
    db.refresh(article)
    return article


def admin_approve(db: Session, article_id: int, actor: Actor) -> Article:
    """관리자 직접 승인 경로. 편집 단계를 건너뛰며 변경 이력 상태는 건드리지 않는다."""
    with unit_of_work(db) as post:
        article = get_article(db, article_id)
        require_permission(actor, "admin_approve", article, "Only admins can approve articles directly")
        _apply_transition(db, article, "admin_approve")
        if article.approved_at is None:
            article.approved_at = utcnow()
        history_service.mark_completed(db, article.article_id)
        post.audit("ARTICLE_APPROVED", actor.user_id, article.article_id, metadata={"path": "admin_direct"})
        post.notify(
            "article_published",
            [article.author_id],
            "Your article has been published",
            f"'{article.title}' was approved and published.",
            _article_link(article),
        )
    db.refresh(article)
    return article


def _publication_summary(gateway: DocumentGateway, snapshot: _DocumentSnapshot) -> str:
    if snapshot.current_pdf_url == snapshot.original_pdf_url:
        return diff_service.describe_summary(diff_service.diff_texts("", "").summary)
    original = _extract(gateway, snapshot.original_pdf_url)
    current_text, current_ok = _current_text(gateway, snapshot)
    if original is None or not current_ok:
        return ""
    return diff_service.describe_summary(diff_service.diff_texts(original.text, current_text).summary)


def publish_article(
    db: Session,
    article_id: int,
    actor: Actor,
    gateway: Optional[DocumentGateway] = None,
) -> PublishOutcome:
    article = get_article(db, article_id)
    require_permission(actor, "publish", article, "Only admins can publish articles")
    ensure_transition(article.status, "publish")
    summary_text = _publication_summary(gateway or get_document_gateway(), _snapshot_and_release(db, article))

    with unit_of_work(db) as post:
        article = get_article(db, article_id)
        _apply_transition(db, article, "publish")
        if article.approved_at is None:
            article.approved_at = utcnow()
        published = revision_service.bump_change_log_status(
            db,
            article.article_id,
            [ChangeLogStatus.PENDING, ChangeLogStatus.APPROVED],
            ChangeLogStatus.PUBLISHED,
        )
        history_service.mark_completed(db, article.article_id)
        post.audit(
            "ARTICLE_PUBLISHED", actor.user_id, article.article_id,
            metadata={"published_change_logs": published, "summary": summary_text},
        )
        message = f"'{article.title}' has been published."
        if summary_text:
            message = f"{message} Changes from your submission: {summary_text}."
        post.notify(
            "article_published",
            [article.author_id],
            "Your article has been published",
            message,
            _article_link(article),
        )
    db.refresh(article)
    return PublishOutcome(article=article, diff_summary=summary_text, published_change_logs=published)


def delete_article(db: Session, article_id: int, actor: Actor) -> None:
    with unit_of_work(db) as post:
        article = get_article(db, article_id)
        require_permission(actor, "delete_article", article, "Only admins can delete articles")
        post.audit(
            "ARTICLE_DELETED", actor.user_id, article.article_id,
            metadata={"title": article.title, "slug": article.slug},
        )
        db.delete(article)
    logger.info("[workflow] article=%s deleted by user=%s", article_id, actor.user_id)
