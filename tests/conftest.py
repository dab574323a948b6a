import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from manuscript_workflow.config import settings
from manuscript_workflow.database import Base, get_db
from manuscript_workflow.main import app
from manuscript_workflow.models.user import User
from manuscript_workflow.services import workflow_service
from manuscript_workflow.services.auth_service import create_access_token
from manuscript_workflow.services.document_gateway import (
    ConvertedDocument,
    DocumentGatewayError,
    ExtractedContent,
    get_document_gateway,
    set_document_gateway,
)
from manuscript_workflow.utils.permissions import Actor

TEST_DB_URL = "sqlite:///./test_manuscript_workflow.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


class FakeGateway:
    """문서 서비스 대역. 변환은 확장자만 바꾸고, 추출 텍스트는 texts 에 등록된 값을 돌려준다."""

    def __init__(self):
        self.texts = {}
        self.fail_convert = False
        self.fail_extract = set()
        self.render_writes = True
        self.render_error = None
        self.render_calls = []
        self.convert_calls = []

    def ensure_both_formats(self, file_url):
        self.convert_calls.append(file_url)
        if self.fail_convert:
            raise DocumentGatewayError("converter unavailable")
        base = file_url.rsplit(".", 1)[0]
        return ConvertedDocument(pdf_path=f"{base}.pdf", word_path=f"{base}.docx")

    def extract(self, file_url):
        if file_url in self.fail_extract:
            raise DocumentGatewayError("scanned document")
        text = self.texts.get(file_url, "")
        return ExtractedContent(text=text, html=f"<p>{text}</p>")

    def render_visual_diff(self, old_file_url, new_file_url, dest_path):
        self.render_calls.append((old_file_url, new_file_url, dest_path))
        if self.render_error:
            raise self.render_error
        if self.render_writes:
            with open(dest_path, "wb") as f:
                f.write(b"%PDF-1.4 visual diff")


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    os.makedirs(path, exist_ok=True)
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def gateway():
    fake = FakeGateway()
    set_document_gateway(fake)
    app.dependency_overrides[get_document_gateway] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_document_gateway, None)
    set_document_gateway(None)


@pytest.fixture
def seed_users(db):
    users = {
        "admin": User(email="admin@journal.test", name="Admin", role="admin"),
        "editor": User(email="editor@journal.test", name="Editor One", role="editor"),
        "editor2": User(email="editor2@journal.test", name="Editor Two", role="editor"),
        "reviewer": User(email="reviewer@journal.test", name="Reviewer One", role="reviewer"),
        "reviewer2": User(email="reviewer2@journal.test", name="Reviewer Two", role="reviewer"),
        "author": User(email="author@journal.test", name="Author", role="author"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def actors(seed_users):
    return {key: Actor.from_user(user) for key, user in seed_users.items()}


@pytest.fixture
def submitted_article(db, actors, gateway):
    gateway.texts["uploads/articles/deep-sea.pdf"] = "The quick fox"
    return workflow_service.submit_article(
        db, actors["author"], "Deep Sea Currents", "uploads/articles/deep-sea.docx", category="ocean", gateway=gateway
    )


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.user_id)}"}
