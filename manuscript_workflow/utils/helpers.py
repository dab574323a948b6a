from datetime import datetime, timezone


def utcnow() -> datetime:
    """DB DateTime 컬럼과 비교할 수 있도록 tzinfo 없는 UTC 시각을 반환한다."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
