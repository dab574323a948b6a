"""Test 원고 워크플로 HTTP API 의 인증, 오류 매핑, 응답 계약을 검증하는 자동화 테스트입니다."""

from fastapi.testclient import TestClient

from manuscript_workflow.main import app
from manuscript_workflow.services import workflow_service
from tests.conftest import auth_headers


def _submit(client, seed_users, gateway, title="Tidal Energy"):
    gateway.texts["uploads/articles/tidal.pdf"] = "Tides move water"
    resp = client.post(
        "/api/articles",
        json={"title": title, "file_url": "uploads/articles/tidal.docx", "category": "energy"},
        headers=auth_headers(seed_users["author"]),
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_requires_bearer_token(client):
    resp = client.get("/api/articles")
    assert resp.status_code in (401, 403)


def test_invalid_token_is_rejected(client, seed_users):
    resp = client.get("/api/articles", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_submit_and_assign_over_http(client, seed_users, gateway):
    article = _submit(client, seed_users, gateway)
    assert article["status"] == "PENDING_ADMIN_REVIEW"
    assert article["slug"] == "tidal-energy"

    resp = client.post(
        f"/api/articles/{article['article_id']}/assign-editor",
        json={"editor_id": seed_users["editor"].user_id},
        headers=auth_headers(seed_users["admin"]),
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["is_reassignment"] is False
    assert body["article"]["status"] == "ASSIGNED_TO_EDITOR"

    editor_view = client.get("/api/articles", headers=auth_headers(seed_users["editor"]))
    assert [a["article_id"] for a in editor_view.json()] == [article["article_id"]]


def test_correction_and_visual_diff_over_http(client, seed_users, gateway):
    article = _submit(client, seed_users, gateway)
    article_id = article["article_id"]
    client.post(
        f"/api/articles/{article_id}/assign-editor",
        json={"editor_id": seed_users["editor"].user_id},
        headers=auth_headers(seed_users["admin"]),
    )
    gateway.texts["uploads/articles/tidal-v2.pdf"] = "Tides move more water"

    resp = client.post(
        f"/api/articles/{article_id}/corrections",
        json={"file_url": "uploads/articles/tidal-v2.pdf", "comments": "tightened intro"},
        headers=auth_headers(seed_users["editor"]),
    )
    assert resp.status_code == 200, resp.text
    correction = resp.json()
    assert correction["version_number"] == 2
    assert correction["diff_summary"] == "1 word added"

    logs = client.get(f"/api/articles/{article_id}/change-logs", headers=auth_headers(seed_users["editor"])).json()
    assert logs[0]["comments"] == "tightened intro"
    assert logs[0]["diff_data"]["summary"]["added_count"] == 1

    resp = client.post(
        f"/api/change-logs/{correction['change_log_id']}/visual-diff",
        headers=auth_headers(seed_users["editor"]),
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["visual_diff_status"] == "READY"
    assert resp.json()["visual_diff_url"] == f"visual-diffs/{article_id}-v2.pdf"


def test_domain_errors_map_to_status_codes(client, seed_users, gateway):
    article = _submit(client, seed_users, gateway)
    article_id = article["article_id"]

    resp = client.post(f"/api/articles/{article_id}/publish", headers=auth_headers(seed_users["admin"]))
    assert resp.status_code == 400
    assert "PENDING_ADMIN_REVIEW" in resp.json()["detail"]

    resp = client.post(f"/api/articles/{article_id}/admin-approve", headers=auth_headers(seed_users["editor"]))
    assert resp.status_code == 403

    resp = client.post("/api/articles/9999/admin-approve", headers=auth_headers(seed_users["admin"]))
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Article not found"


def test_unexpected_error_is_generic_500(seed_users, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("database password is hunter2")

    monkeypatch.setattr(workflow_service, "list_articles", explode)
    client = TestClient(app, raise_server_exceptions=False)

    resp = client.get("/api/articles", headers=auth_headers(seed_users["admin"]))

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}


def test_remove_access_over_http(client, seed_users, gateway):
    article = _submit(client, seed_users, gateway)
    client.post(
        f"/api/articles/{article['article_id']}/assign-editor",
        json={"editor_id": seed_users["editor"].user_id},
        headers=auth_headers(seed_users["admin"]),
    )

    resp = client.post(
        f"/api/users/{seed_users['editor'].user_id}/remove-access",
        json={"reason": "contract ended", "fallback_user_id": seed_users["editor2"].user_id},
        headers=auth_headers(seed_users["admin"]),
    )

    assert resp.status_code == 200, resp.text
    assert resp.json()["reassigned_count"] == 1
    assert resp.json()["article_ids"] == [article["article_id"]]

    # 비활성화된 사용자의 토큰은 더 이상 유효하지 않다.
    resp = client.get("/api/articles", headers=auth_headers(seed_users["editor"]))
    assert resp.status_code == 401


def test_notifications_endpoint(client, seed_users, gateway):
    _submit(client, seed_users, gateway)
    headers = auth_headers(seed_users["admin"])

    items = client.get("/api/notifications", headers=headers).json()
    assert [n["noti_type"] for n in items] == ["article_submitted"]

    resp = client.patch(f"/api/notifications/{items[0]['noti_id']}/read", headers=headers)
    assert resp.json()["is_read"] is True
    assert client.get("/api/notifications?unread_only=true", headers=headers).json() == []
