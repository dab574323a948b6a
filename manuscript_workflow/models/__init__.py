"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from manuscript_workflow.models.user import User
from manuscript_workflow.models.article import Article, ArticleRevision, ArticleChangeLog, ArticleEditorHistory
from manuscript_workflow.models.audit import AuditEvent
from manuscript_workflow.models.notification import Notification

__all__ = [
    "User",
    "Article", "ArticleRevision", "ArticleChangeLog", "ArticleEditorHistory",
    "AuditEvent",
    "Notification",
]
