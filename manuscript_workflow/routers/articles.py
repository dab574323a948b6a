"""Articles 기능 API 라우터입니다. 요청을 검증하고 워크플로 서비스로 상태 전이를 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from manuscript_workflow.database import get_db
from manuscript_workflow.schemas.article import (
    ArticleSubmit, AssignEditorRequest, AssignReviewerRequest, CorrectionUpload,
    ArticleOut, ChangeLogOut, RevisionOut, EditorHistoryOut,
    AssignmentResult, CorrectionResult, PublishResult, VisualDiffOut,
)
from manuscript_workflow.services import workflow_service, visual_diff_service
from manuscript_workflow.services.document_gateway import DocumentGateway, get_document_gateway
from manuscript_workflow.middleware.auth_middleware import get_current_actor
from manuscript_workflow.utils.permissions import Actor, require_permission

router = APIRouter(tags=["articles"])


@router.post("/api/articles", response_model=ArticleOut)
def submit_article(
    data: ArticleSubmit,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    gateway: DocumentGateway = Depends(get_document_gateway),
):
    return workflow_service.submit_article(
        db, actor, data.title, data.file_url, data.category, data.abstract, gateway=gateway
    )


@router.get("/api/articles", response_model=List[ArticleOut])
def list_articles(status: Optional[str] = None, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return workflow_service.list_articles(db, actor, status)


@router.get("/api/articles/{article_id}", response_model=ArticleOut)
def get_article(article_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return workflow_service.get_article_for(db, article_id, actor)


@router.delete("/api/articles/{article_id}")
def delete_article(article_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    workflow_service.delete_article(db, article_id, actor)
    return {"message": "Article deleted"}


@router.post("/api/articles/{article_id}/assign-editor", response_model=AssignmentResult)
def assign_editor(
    article_id: int,
    data: AssignEditorRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return workflow_service.assign_editor(
        db, article_id, data.editor_id, actor, preserve_work=data.preserve_work, reason=data.reason
    )


@router.post("/api/articles/{article_id}/unassign-editor", response_model=ArticleOut)
def unassign_editor(
    article_id: int,
    reason: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return workflow_service.unassign_editor(db, article_id, actor, reason)


@router.post("/api/articles/{article_id}/pending-approval", response_model=ArticleOut)
def mark_pending_approval(article_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return workflow_service.mark_pending_approval(db, article_id, actor)


@router.post("/api/articles/{article_id}/assign-reviewer", response_model=ArticleOut)
def assign_reviewer(
    article_id: int,
    data: AssignReviewerRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return workflow_service.assign_reviewer(db, article_id, data.reviewer_id, actor, data.reason)


@router.post("/api/articles/{article_id}/unassign-reviewer", response_model=ArticleOut)
def unassign_reviewer(
    article_id: int,
    reason: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return workflow_service.unassign_reviewer(db, article_id, actor, reason)


@router.post("/api/articles/{article_id}/corrections", response_model=CorrectionResult)
def upload_correction(
    article_id: int,
    data: CorrectionUpload,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    gateway: DocumentGateway = Depends(get_document_gateway),
):
    return workflow_service.upload_correction(
        db,
        article_id,
        actor,
        data.file_url,
        comments=data.comments,
        editor_document_url=data.editor_document_url,
        editor_document_type=data.editor_document_type,
        gateway=gateway,
    )


@router.post("/api/articles/{article_id}/editor-approve", response_model=ArticleOut)
def editor_approve(article_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return workflow_service.editor_approve(db, article_id, actor)


@router.post("/api/articles/{article_id}/reviewer-approve", response_model=ArticleOut)
def reviewer_approve(article_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return workflow_service.reviewer_approve(db, article_id, actor)


@router.post("/api/articles/{article_id}/admin-approve", response_model=ArticleOut)
def admin_approve(article_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return workflow_service.admin_approve(db, article_id, actor)


@router.post("/api/articles/{article_id}/publish", response_model=PublishResult)
def publish_article(
    article_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    gateway: DocumentGateway = Depends(get_document_gateway),
):
    return workflow_service.publish_article(db, article_id, actor, gateway=gateway)


@router.get("/api/articles/{article_id}/change-logs", response_model=List[ChangeLogOut])
def list_change_logs(article_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return workflow_service.list_change_logs(db, article_id, actor)


@router.get("/api/articles/{article_id}/revisions", response_model=List[RevisionOut])
def list_revisions(article_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return workflow_service.list_revisions(db, article_id, actor)


@router.get("/api/articles/{article_id}/editor-history", response_model=List[EditorHistoryOut])
def get_editor_history(article_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return workflow_service.get_editor_history(db, article_id, actor)


@router.get("/api/change-logs/{change_log_id}/visual-diff", response_model=VisualDiffOut)
def get_visual_diff(change_log_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    change_log = visual_diff_service.get_visual_diff_status(db, change_log_id)
    require_permission(actor, "view_article", change_log.article, "You do not have access to this article")
    return change_log


@router.post("/api/change-logs/{change_log_id}/visual-diff", response_model=VisualDiffOut)
def generate_visual_diff(
    change_log_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    gateway: DocumentGateway = Depends(get_document_gateway),
):
    visual_diff_service.generate_visual_diff(db, change_log_id, actor=actor, gateway=gateway)
    return visual_diff_service.get_visual_diff_status(db, change_log_id)
