"""원고 워크플로 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ArticleSubmit(BaseModel):
    title: str
    file_url: str
    category: Optional[str] = None
    abstract: Optional[str] = None


class AssignEditorRequest(BaseModel):
    editor_id: int
    preserve_work: bool = True
    reason: Optional[str] = None


class AssignReviewerRequest(BaseModel):
    reviewer_id: int
    reason: Optional[str] = None


class CorrectionUpload(BaseModel):
    file_url: str
    comments: Optional[str] = None
    editor_document_url: Optional[str] = None
    editor_document_type: Optional[str] = None


class ArticleOut(BaseModel):
    article_id: int
    slug: str
    title: str
    category: Optional[str] = None
    author_id: int
    status: str
    original_pdf_url: str
    original_word_url: Optional[str] = None
    current_pdf_url: str
    current_word_url: Optional[str] = None
    assigned_editor_id: Optional[int] = None
    assigned_reviewer_id: Optional[int] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    editor_approved_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ChangeLogOut(BaseModel):
    change_log_id: int
    article_id: int
    version_number: int
    old_file_url: str
    new_file_url: str
    file_type: str
    diff_data: Optional[Dict[str, Any]] = None
    status: str
    edited_by: int
    edited_at: Optional[datetime] = None
    comments: Optional[str] = None
    editor_document_url: Optional[str] = None
    editor_document_type: Optional[str] = None
    visual_diff_status: str
    visual_diff_url: Optional[str] = None

    model_config = {"from_attributes": True}


class RevisionOut(BaseModel):
    revision_id: int
    article_id: int
    pdf_url: str
    word_url: Optional[str] = None
    uploaded_by: int
    comments: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AssignmentResult(BaseModel):
    article: ArticleOut
    is_reassignment: bool
    old_editor_id: Optional[int] = None
    new_editor_id: int
    purged_work: bool = False

    model_config = {"from_attributes": True}


class CorrectionResult(BaseModel):
    article: ArticleOut
    version_number: int
    change_log_id: int
    diff_summary: str

    model_config = {"from_attributes": True}


class PublishResult(BaseModel):
    article: ArticleOut
    diff_summary: str
    published_change_logs: int

    model_config = {"from_attributes": True}


class VisualDiffOut(BaseModel):
    change_log_id: int
    visual_diff_status: str
    visual_diff_url: Optional[str] = None

    model_config = {"from_attributes": True}


class EditorHistoryOut(BaseModel):
    history_id: int
    article_id: int
    editor_id: int
    assigned_by: int
    reason: Optional[str] = None
    status: str
    assigned_at: Optional[datetime] = None
    unassigned_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
