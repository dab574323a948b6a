"""변경 이력별 시각적 diff PDF를 한 번만 생성하는 코디네이터입니다.

별도 작업 큐나 락 서버 없이 ArticleChangeLog.visual_diff_status 컬럼을 뮤텍스로 사용한다.
  - READY + 파일 존재: 캐시 적중
  - PENDING/FAILED (또는 임대 시간이 지난 GENERATING) -> GENERATING 조건부 UPDATE 로 잠금 획득
  - 잠금 획득 실패: 고정 대기 1회 후 다시 읽고, READY 면 그 결과를, 아니면 "진행 중" 오류를 반환
잠금을 잡은 뒤의 실패는 모두 FAILED 로 기록하고 도메인 오류로 전달한다.
"""

import logging
import os
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from manuscript_workflow.config import settings
from manuscript_workflow.errors import BadRequestError
from manuscript_workflow.models.article import ArticleChangeLog
from manuscript_workflow.services import revision_service
from manuscript_workflow.services.document_gateway import DocumentGateway, DocumentGatewayError, get_document_gateway
from manuscript_workflow.utils.article_states import VisualDiffStatus
from manuscript_workflow.utils.file_paths import file_exists, resolve_upload_path
from manuscript_workflow.utils.helpers import utcnow
from manuscript_workflow.utils.permissions import Actor, require_permission

logger = logging.getLogger(__name__)

IN_PROGRESS_MESSAGE = "Visual diff generation in progress, please try again"


def visual_diff_relative_path(article_id: int, version_number: int) -> str:
    return f"{settings.VISUAL_DIFF_DIR.strip('/')}/{article_id}-v{version_number}.pdf"


def get_visual_diff_status(db: Session, change_log_id: int) -> ArticleChangeLog:
    return revision_service.get_change_log(db, change_log_id)


def _set_status(db: Session, change_log_id: int, status: VisualDiffStatus, url: Optional[str] = None) -> None:
    db.query(ArticleChangeLog).filter(ArticleChangeLog.change_log_id == change_log_id).update(
        {
            "visual_diff_status": status.value,
            "visual_diff_url": url,
            "visual_diff_started_at": None,
        },
        synchronize_session=False,
    )
    db.commit()


def _reset_missing(db: Session, change_log_id: int, cached_url: str) -> None:
    # 관찰한 READY 상태일 때만 되돌린다. 다른 요청이 이미 잠금을 잡았다면 아무것도 바꾸지 않는다.
    db.query(ArticleChangeLog).filter(
        ArticleChangeLog.change_log_id == change_log_id,
        ArticleChangeLog.visual_diff_status == VisualDiffStatus.READY.value,
        ArticleChangeLog.visual_diff_url == cached_url,
    ).update(
        {
            "visual_diff_status": VisualDiffStatus.PENDING.value,
            "visual_diff_url": None,
        },
        synchronize_session=False,
    )
    db.commit()


def _try_acquire(db: Session, change_log_id: int) -> bool:
    reclaimable = ArticleChangeLog.visual_diff_status.in_(
        [VisualDiffStatus.PENDING.value, VisualDiffStatus.FAILED.value]
    )
    lease = int(settings.VISUAL_DIFF_LEASE_SECONDS or 0)
    if lease > 0:
        # 임대 시간이 지난 GENERATING 은 중단된 작업으로 보고 회수한다.
        expired = and_(
            ArticleChangeLog.visual_diff_status == VisualDiffStatus.GENERATING.value,
            or_(
                ArticleChangeLog.visual_diff_started_at.is_(None),
                ArticleChangeLog.visual_diff_started_at < utcnow() - timedelta(seconds=lease),
            ),
        )
        reclaimable = or_(reclaimable, expired)

    affected = (
        db.query(ArticleChangeLog)
        .filter(ArticleChangeLog.change_log_id == change_log_id, reclaimable)
        .update(
            {
                "visual_diff_status": VisualDiffStatus.GENERATING.value,
                "visual_diff_started_at": utcnow(),
            },
            synchronize_session=False,
        )
    )
    db.commit()
    return affected == 1


def release_stale_locks(db: Session, older_than_seconds: Optional[int] = None) -> int:
    """GENERATING 으로 남은 행을 FAILED 로 바꿔 다음 요청이 다시 생성하게 한다.

    older_than_seconds 를 주면 그보다 오래 잡혀 있던 잠금만 푼다. 작업자가 모두 내려간 상태에서
    (배포, 재기동) 호출하는 용도다.
    """
    q = db.query(ArticleChangeLog).filter(
        ArticleChangeLog.visual_diff_status == VisualDiffStatus.GENERATING.value
    )
    if older_than_seconds is not None:
        cutoff = utcnow() - timedelta(seconds=older_than_seconds)
        q = q.filter(
            or_(
                ArticleChangeLog.visual_diff_started_at.is_(None),
                ArticleChangeLog.visual_diff_started_at < cutoff,
            )
        )
    released = q.update(
        {
            "visual_diff_status": VisualDiffStatus.FAILED.value,
            "visual_diff_url": None,
            "visual_diff_started_at": None,
        },
        synchronize_session=False,
    )
    db.commit()
    if released:
        logger.warning("[visual-diff] released %s stale generation lock(s)", released)
    return released


def _cached_url(change_log: ArticleChangeLog) -> Optional[str]:
    if change_log.visual_diff_status == VisualDiffStatus.READY.value and change_log.visual_diff_url:
        return change_log.visual_diff_url
    return None


@dataclass(frozen=True)
class _RenderJob:
    article_id: int
    version_number: int
    file_type: str
    old_file_url: Optional[str]
    new_file_url: str


def _load_job(db: Session, change_log_id: int) -> _RenderJob:
    change_log = revision_service.get_change_log(db, change_log_id)
    db.refresh(change_log)
    job = _RenderJob(
        article_id=change_log.article_id,
        version_number=change_log.version_number,
        file_type=change_log.file_type,
        old_file_url=change_log.old_file_url,
        new_file_url=change_log.new_file_url,
    )
    # 렌더링 동안 트랜잭션을 열어 두지 않는다.
    db.rollback()
    return job


def _render(job: _RenderJob, gateway: DocumentGateway) -> str:
    if job.file_type != "PDF":
        raise BadRequestError("Visual diff is only supported for PDF files")

    relative_path = visual_diff_relative_path(job.article_id, job.version_number)
    dest_path = resolve_upload_path(relative_path)
    os.makedirs(os.path.dirname(dest_path), exist_ok=True)

    try:
        gateway.render_visual_diff(job.old_file_url, job.new_file_url, dest_path)
    except DocumentGatewayError as exc:
        raise BadRequestError(f"Visual diff rendering failed: {exc}")

    if not os.path.isfile(dest_path):
        raise BadRequestError("Visual diff rendering failed: no output file was produced")
    return relative_path


def generate_visual_diff(
    db: Session,
    change_log_id: int,
    actor: Optional[Actor] = None,
    gateway: Optional[DocumentGateway] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """변경 이력의 시각적 diff 파일 경로(UPLOAD_DIR 기준 상대 경로)를 반환한다."""
    change_log = revision_service.get_change_log(db, change_log_id)
    if actor is not None:
        require_permission(
            actor, "generate_visual_diff", change_log.article,
            "You do not have access to this article",
        )

    cached = _cached_url(change_log)
    if cached:
        if file_exists(cached):
            return cached
        logger.warning("[visual-diff] change_log=%s cached file %s is missing, regenerating", change_log_id, cached)
        _reset_missing(db, change_log_id, cached)

    if not _try_acquire(db, change_log_id):
        logger.info("[visual-diff] change_log=%s is locked by another worker, waiting", change_log_id)
        sleep(float(settings.VISUAL_DIFF_WAIT_SECONDS))
        db.expire_all()
        change_log = revision_service.get_change_log(db, change_log_id)
        cached = _cached_url(change_log)
        if cached:
            return cached
        raise BadRequestError(IN_PROGRESS_MESSAGE)

    try:
        relative_path = _render(_load_job(db, change_log_id), gateway or get_document_gateway())
    except Exception as exc:
        db.rollback()
        _set_status(db, change_log_id, VisualDiffStatus.FAILED)
        logger.error("[visual-diff] change_log=%s generation failed: %s", change_log_id, exc)
        if isinstance(exc, BadRequestError):
            raise
        raise BadRequestError("Visual diff generation failed")

    _set_status(db, change_log_id, VisualDiffStatus.READY, relative_path)
    logger.info("[visual-diff] change_log=%s ready at %s", change_log_id, relative_path)
    return relative_path
