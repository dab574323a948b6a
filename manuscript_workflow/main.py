"""FastAPI 애플리케이션 진입점. 미들웨어, API 라우터, 오류 핸들러를 등록합니다."""

import logging
import os
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from manuscript_workflow.config import settings
from manuscript_workflow.database import Base, engine
import manuscript_workflow.models  # noqa: F401 - 모델 import로 metadata 등록
from manuscript_workflow.routers import access, articles, notifications

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Manuscript Workflow",
    description="학술 원고 제출, 편집, 심사, 게시 워크플로 백엔드",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(articles.router)
app.include_router(access.router)
app.include_router(notifications.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # 내부 오류 내용은 응답에 노출하지 않는다.
    logger.exception("[api] unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.on_event("startup")
def ensure_schema():
    Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "manuscript-workflow"}


# 생성된 시각적 diff 등 업로드 파일 서빙
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")
