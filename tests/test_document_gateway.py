"""Test 문서 서비스 HTTP 게이트웨이 요청/응답 처리 동작을 검증하는 자동화 테스트입니다."""

import json

import httpx
import pytest

from manuscript_workflow.services.document_gateway import DocumentGatewayError, HttpDocumentGateway


def _gateway(handler, api_key="secret"):
    return HttpDocumentGateway(
        base_url="http://docs.test/", api_key=api_key, timeout=5, transport=httpx.MockTransport(handler)
    )


def test_ensure_both_formats_posts_file_url_with_auth():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"pdf_path": "uploads/a.pdf", "word_path": "uploads/a.docx"})

    result = _gateway(handler).ensure_both_formats("uploads/a.docx")

    assert seen == {
        "url": "http://docs.test/convert",
        "auth": "Bearer secret",
        "body": {"file_url": "uploads/a.docx"},
    }
    assert result.pdf_path == "uploads/a.pdf"
    assert result.word_path == "uploads/a.docx"


def test_conversion_missing_rendition_is_an_error():
    def handler(request):
        return httpx.Response(200, json={"pdf_path": "uploads/a.pdf"})

    with pytest.raises(DocumentGatewayError):
        _gateway(handler).ensure_both_formats("uploads/a.docx")


def test_extract_defaults_missing_fields():
    def handler(request):
        return httpx.Response(200, json={"text": "hello world", "images": ["img/1.png"]})

    result = _gateway(handler, api_key="").extract("uploads/a.pdf")

    assert result.text == "hello world"
    assert result.html == ""
    assert result.images == ["img/1.png"]


def test_http_error_status_is_wrapped():
    def handler(request):
        return httpx.Response(502, json={"detail": "upstream down"})

    with pytest.raises(DocumentGatewayError) as exc_info:
        _gateway(handler).extract("uploads/a.pdf")
    assert "/extract" in str(exc_info.value)


def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DocumentGatewayError):
        _gateway(handler).ensure_both_formats("uploads/a.pdf")


def test_render_writes_response_body(tmp_path):
    def handler(request):
        body = json.loads(request.content)
        assert body == {"old_file_url": "uploads/v1.pdf", "new_file_url": "uploads/v2.pdf"}
        return httpx.Response(200, content=b"%PDF-1.7 rendered")

    dest = tmp_path / "visual-diffs" / "1-v2.pdf"
    _gateway(handler).render_visual_diff("uploads/v1.pdf", "uploads/v2.pdf", str(dest))

    assert dest.read_bytes() == b"%PDF-1.7 rendered"


def test_render_empty_body_is_an_error(tmp_path):
    def handler(request):
        return httpx.Response(200, content=b"")

    dest = tmp_path / "out.pdf"
    with pytest.raises(DocumentGatewayError):
        _gateway(handler).render_visual_diff("uploads/v1.pdf", "uploads/v2.pdf", str(dest))
    assert not dest.exists()
