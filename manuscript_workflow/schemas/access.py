"""접근 권한 해제 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from typing import List, Optional

from pydantic import BaseModel


class AccessRemovalRequest(BaseModel):
    reason: Optional[str] = None
    fallback_user_id: Optional[int] = None


class AccessRemovalResult(BaseModel):
    user_id: int
    role: str
    reassigned_count: int
    article_ids: List[int]
    fallback_user_id: Optional[int] = None
