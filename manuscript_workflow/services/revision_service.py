"""원고 리비전/변경 이력 저장소 도메인 서비스입니다.

버전 번호 계산, 리비전과 변경 이력 기록, 담당자 작업물 정리(purge)는 모두 호출자의 트랜잭션 안에서
수행되며 이 모듈은 commit 하지 않는다.
"""

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from manuscript_workflow.errors import NotFoundError
from manuscript_workflow.models.article import Article, ArticleChangeLog, ArticleRevision
from manuscript_workflow.utils.article_states import ChangeLogStatus

# 버전 1은 최초 제출본이다.
FIRST_REVISION_VERSION = 2


def next_version_number(db: Session, article_id: int) -> int:
    current_max = (
        db.query(func.max(ArticleChangeLog.version_number))
        .filter(ArticleChangeLog.article_id == article_id)
        .scalar()
    )
    if current_max is None:
        return FIRST_REVISION_VERSION
    return int(current_max) + 1


def file_type_for(file_url: str) -> str:
    return "DOCX" if str(file_url or "").lower().endswith(".docx") else "PDF"


def record_version(
    db: Session,
    article: Article,
    *,
    uploaded_by: int,
    pdf_url: str,
    word_url: Optional[str],
    file_type: str,
    diff_data: dict,
    comments: Optional[str] = None,
    editor_document_url: Optional[str] = None,
    editor_document_type: Optional[str] = None,
) -> Tuple[ArticleRevision, ArticleChangeLog]:
    """리비전 1건과 변경 이력 1건을 추가하고 원고의 current_* 포인터를 새 버전으로 옮긴다."""
    version_number = next_version_number(db, article.article_id)

    revision = ArticleRevision(
        article_id=article.article_id,
        pdf_url=pdf_url,
        word_url=word_url,
        uploaded_by=uploaded_by,
        comments=comments,
    )
    db.add(revision)
    db.flush()

    change_log = ArticleChangeLog(
        article_id=article.article_id,
        revision_id=revision.revision_id,
        version_number=version_number,
        old_file_url=article.current_pdf_url,
        new_file_url=pdf_url,
        file_type=file_type,
        diff_data=diff_data,
        status=ChangeLogStatus.PENDING.value,
        edited_by=uploaded_by,
        comments=comments,
        editor_document_url=editor_document_url,
        editor_document_type=editor_document_type,
    )
    db.add(change_log)

    article.current_pdf_url = pdf_url
    article.current_word_url = word_url
    # unique(article_id, version_number) 충돌은 여기서 IntegrityError로 드러난다.
    db.flush()
    return revision, change_log


def get_change_log(db: Session, change_log_id: int) -> ArticleChangeLog:
    row = db.query(ArticleChangeLog).filter(ArticleChangeLog.change_log_id == change_log_id).first()
    if not row:
        raise NotFoundError("Change log not found")
    return row


def list_change_logs(db: Session, article_id: int) -> List[ArticleChangeLog]:
    return (
        db.query(ArticleChangeLog)
        .filter(ArticleChangeLog.article_id == article_id)
        .order_by(ArticleChangeLog.version_number.asc())
        .all()
    )


def list_revisions(db: Session, article_id: int) -> List[ArticleRevision]:
    return (
        db.query(ArticleRevision)
        .filter(ArticleRevision.article_id == article_id)
        .order_by(ArticleRevision.revision_id.asc())
        .all()
    )


def bump_change_log_status(
    db: Session,
    article_id: int,
    from_statuses: Iterable[ChangeLogStatus],
    to_status: ChangeLogStatus,
    edited_by: Optional[int] = None,
) -> int:
    q = db.query(ArticleChangeLog).filter(
        ArticleChangeLog.article_id == article_id,
        ArticleChangeLog.status.in_([s.value for s in from_statuses]),
    )
    if edited_by is not None:
        q = q.filter(ArticleChangeLog.edited_by == edited_by)
    return q.update({"status": to_status.value}, synchronize_session=False)


def _latest_surviving_version(db: Session, article_id: int) -> Optional[ArticleChangeLog]:
    return (
        db.query(ArticleChangeLog)
        .filter(ArticleChangeLog.article_id == article_id)
        .order_by(ArticleChangeLog.version_number.desc())
        .first()
    )


def purge_revision_history(db: Session, article: Article, uploader_id: int) -> Tuple[int, int]:
    """(article, uploader) 범위의 변경 이력과 리비전을 지우고 문서 포인터를 남은 최신 버전으로 되돌린다.

    반환값은 (삭제된 변경 이력 수, 삭제된 리비전 수)다.
    """
    deleted_logs = (
        db.query(ArticleChangeLog)
        .filter(
            ArticleChangeLog.article_id == article.article_id,
            ArticleChangeLog.edited_by == uploader_id,
        )
        .delete(synchronize_session=False)
    )
    deleted_revisions = (
        db.query(ArticleRevision)
        .filter(
            ArticleRevision.article_id == article.article_id,
            ArticleRevision.uploaded_by == uploader_id,
        )
        .delete(synchronize_session=False)
    )
    db.expire(article, ["revisions", "change_logs"])

    latest = _latest_surviving_version(db, article.article_id)
    if latest is None:
        article.current_pdf_url = article.original_pdf_url
        article.current_word_url = article.original_word_url
    else:
        revision = None
        if latest.revision_id is not None:
            revision = db.query(ArticleRevision).filter(ArticleRevision.revision_id == latest.revision_id).first()
        article.current_pdf_url = latest.new_file_url
        article.current_word_url = revision.word_url if revision else None
    if deleted_logs or deleted_revisions:
        article.content = None
        article.content_html = None
    db.flush()
    return deleted_logs, deleted_revisions
