"""업로드 루트 기준 파일 경로 변환 헬퍼입니다."""

import os

from manuscript_workflow.config import settings


def is_remote_url(path: str) -> bool:
    return str(path or "").startswith(("http://", "https://"))


def resolve_upload_path(relative_path: str) -> str:
    """'/uploads/...' 같은 웹 경로나 상대 경로를 UPLOAD_DIR 기준 절대 경로로 바꾼다."""
    if is_remote_url(relative_path):
        return relative_path
    text = str(relative_path or "").replace("\\", "/").lstrip("/")
    if text.startswith("uploads/"):
        text = text[len("uploads/"):]
    return os.path.abspath(os.path.join(settings.UPLOAD_DIR, text))


def file_exists(relative_path: str) -> bool:
    # 원격 URL은 로컬에서 존재 여부를 확인할 수 없다.
    if is_remote_url(relative_path):
        return False
    return os.path.isfile(resolve_upload_path(relative_path))
