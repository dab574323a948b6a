"""Auth Service 도메인 서비스 레이어입니다. 베어러 토큰 발급만 담당합니다."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt

from manuscript_workflow.config import settings

ALGORITHM = "HS256"


def create_access_token(user_id: int, expires_minutes: Optional[int] = None) -> str:
    minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)
