"""텍스트 diff 결과 계약을 위한 Pydantic 스키마입니다."""

from typing import List

from pydantic import BaseModel


class DiffPart(BaseModel):
    value: str
    added: bool = False
    removed: bool = False


class DiffSummary(BaseModel):
    added_count: int = 0
    removed_count: int = 0
    unchanged_count: int = 0
    modified_count: int = 0
    actual_added: int = 0
    actual_removed: int = 0
    total_changes: int = 0


class DiffResult(BaseModel):
    parts: List[DiffPart]
    summary: DiffSummary
