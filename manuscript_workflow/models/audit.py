"""감사 로그(AuditEvent) SQLAlchemy 모델 정의입니다. 생성 후 수정하지 않는 append-only 테이블입니다."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, JSON
from sqlalchemy.sql import func
from manuscript_workflow.database import Base


class AuditEvent(Base):
    __tablename__ = "audit_event"

    event_id = Column(Integer, primary_key=True, autoincrement=True)
    event_type = Column(String(50), nullable=False)
    actor_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    # 기사가 삭제되어도 감사 로그는 남아야 하므로 FK를 걸지 않는다.
    article_id = Column(Integer, nullable=True)
    target_user_id = Column(Integer, nullable=True)
    metadata_json = Column(JSON)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_audit_article", "article_id", "created_at"),
        Index("idx_audit_type", "event_type", "created_at"),
    )
