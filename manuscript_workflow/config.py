"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./manuscript_workflow.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # File storage
    UPLOAD_DIR: str = "uploads"
    VISUAL_DIFF_DIR: str = "visual-diffs"

    # Visual diff lock
    VISUAL_DIFF_WAIT_SECONDS: float = 2.0
    # GENERATING 상태가 이 시간을 넘기면 다른 작업자가 잠금을 회수할 수 있다. 0이면 회수하지 않는다.
    VISUAL_DIFF_LEASE_SECONDS: int = 300

    # 동시 업로드로 버전 번호가 충돌할 때 재시도 횟수
    VERSION_RETRY_ATTEMPTS: int = 3

    # External document service (conversion / extraction / visual diff rendering)
    DOCUMENT_SERVICE_BASE_URL: str = "http://localhost:8100"
    DOCUMENT_SERVICE_API_KEY: str = ""
    DOCUMENT_SERVICE_CONVERT_ENDPOINT: str = "/convert"
    DOCUMENT_SERVICE_EXTRACT_ENDPOINT: str = "/extract"
    DOCUMENT_SERVICE_VISUAL_DIFF_ENDPOINT: str = "/visual-diff"
    DOCUMENT_SERVICE_TIMEOUT_SECONDS: float = 60.0

    class Config:
        # 실행 cwd와 무관하게 프로젝트 루트의 .env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
