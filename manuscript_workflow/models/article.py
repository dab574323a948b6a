"""Article 워크플로 집합(원고, 리비전, 변경 이력, 담당 이력)의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from manuscript_workflow.database import Base


class Article(Base):
    __tablename__ = "articles"

    article_id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(255), unique=True, nullable=False)
    title = Column(String(500), nullable=False)
    category = Column(String(100))
    abstract = Column(Text)
    author_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    status = Column(String(30), nullable=False, default="PENDING_ADMIN_REVIEW")

    # 최초 제출본은 생성 시 한 번만 기록되고, current_* 는 마지막으로 반영된 버전을 가리킨다.
    original_pdf_url = Column(String(500), nullable=False)
    original_word_url = Column(String(500))
    current_pdf_url = Column(String(500), nullable=False)
    current_word_url = Column(String(500))

    assigned_editor_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    assigned_reviewer_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)

    content = Column(Text)
    content_html = Column(Text)

    submitted_at = Column(DateTime)
    reviewed_at = Column(DateTime)
    editor_approved_at = Column(DateTime)
    approved_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    author = relationship("User", foreign_keys=[author_id], back_populates="submitted_articles")
    assigned_editor = relationship("User", foreign_keys=[assigned_editor_id])
    assigned_reviewer = relationship("User", foreign_keys=[assigned_reviewer_id])
    revisions = relationship(
        "ArticleRevision",
        back_populates="article",
        cascade="all, delete-orphan",
        order_by="ArticleRevision.revision_id",
    )
    change_logs = relationship(
        "ArticleChangeLog",
        back_populates="article",
        cascade="all, delete-orphan",
        order_by="ArticleChangeLog.version_number",
    )
    editor_history = relationship(
        "ArticleEditorHistory",
        back_populates="article",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_article_status", "status"),
        Index("idx_article_editor", "assigned_editor_id", "status"),
        Index("idx_article_reviewer", "assigned_reviewer_id", "status"),
    )


class ArticleRevision(Base):
    __tablename__ = "article_revision"

    revision_id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(Integer, ForeignKey("articles.article_id", ondelete="CASCADE"), nullable=False)
    pdf_url = Column(String(500), nullable=False)
    word_url = Column(String(500))
    uploaded_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    comments = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    article = relationship("Article", back_populates="revisions")

    __table_args__ = (
        Index("idx_revision_article_uploader", "article_id", "uploaded_by"),
    )


class ArticleChangeLog(Base):
    __tablename__ = "article_change_log"

    change_log_id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(Integer, ForeignKey("articles.article_id", ondelete="CASCADE"), nullable=False)
    revision_id = Column(Integer, ForeignKey("article_revision.revision_id", ondelete="SET NULL"), nullable=True)
    version_number = Column(Integer, nullable=False)  # 원본이 1이므로 2부터 시작
    old_file_url = Column(String(500), nullable=False)
    new_file_url = Column(String(500), nullable=False)
    file_type = Column(String(10), nullable=False)  # PDF/DOCX
    diff_data = Column(JSON)
    status = Column(String(20), nullable=False, default="pending")  # pending/approved/published
    edited_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    edited_at = Column(DateTime, server_default=func.now())
    comments = Column(Text)
    editor_document_url = Column(String(500))
    editor_document_type = Column(String(10))

    # visual_diff_status 컬럼 자체가 생성 작업의 잠금으로 쓰인다.
    visual_diff_status = Column(String(20), nullable=False, default="PENDING")
    visual_diff_url = Column(String(500))
    visual_diff_started_at = Column(DateTime)

    article = relationship("Article", back_populates="change_logs")
    revision = relationship("ArticleRevision")
    editor = relationship("User", foreign_keys=[edited_by])

    __table_args__ = (
        UniqueConstraint("article_id", "version_number", name="uq_change_log_article_version"),
        Index("idx_change_log_article_status", "article_id", "status"),
    )


class ArticleEditorHistory(Base):
    __tablename__ = "article_editor_history"

    history_id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(Integer, ForeignKey("articles.article_id", ondelete="CASCADE"), nullable=False)
    editor_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    assigned_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    reason = Column(Text)
    status = Column(String(20), nullable=False, default="active")  # active/reassigned/unassigned/completed
    assigned_at = Column(DateTime, server_default=func.now())
    unassigned_at = Column(DateTime)

    article = relationship("Article", back_populates="editor_history")

    __table_args__ = (
        Index("idx_editor_history_article", "article_id", "status"),
    )
