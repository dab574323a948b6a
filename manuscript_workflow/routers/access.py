"""Access 기능 API 라우터입니다. 편집자/심사자 접근 권한 해제를 처리합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from manuscript_workflow.database import get_db
from manuscript_workflow.schemas.access import AccessRemovalRequest, AccessRemovalResult
from manuscript_workflow.services import access_service
from manuscript_workflow.middleware.auth_middleware import get_current_actor
from manuscript_workflow.utils.permissions import Actor

router = APIRouter(prefix="/api/users", tags=["access"])


@router.post("/{user_id}/remove-access", response_model=AccessRemovalResult)
def remove_access(
    user_id: int,
    data: AccessRemovalRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return access_service.remove_user_access(
        db, user_id, actor, reason=data.reason, fallback_user_id=data.fallback_user_id
    )
