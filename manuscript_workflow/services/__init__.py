"""서비스 레이어 패키지 초기화 모듈입니다."""

from manuscript_workflow.services import (
    diff_service,
    document_gateway,
    audit_service,
    notification_service,
    revision_service,
    history_service,
    workflow_service,
    visual_diff_service,
    access_service,
    auth_service,
)
