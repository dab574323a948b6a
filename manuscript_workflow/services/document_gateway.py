"""외부 문서 서비스(형식 변환, 텍스트 추출, 시각적 diff 렌더링) 클라이언트입니다.

워크플로 서비스는 DocumentGateway 프로토콜에만 의존한다. 기본 구현은 HTTP 문서 서비스를 호출하며,
테스트나 다른 배포 환경에서는 set_document_gateway()로 교체한다.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

import httpx

from manuscript_workflow.config import settings

logger = logging.getLogger(__name__)


class DocumentGatewayError(Exception):
    pass


@dataclass
class ConvertedDocument:
    pdf_path: str
    word_path: str


@dataclass
class ExtractedContent:
    text: str = ""
    html: str = ""
    images: List[str] = field(default_factory=list)


class DocumentGateway(Protocol):
    def ensure_both_formats(self, file_url: str) -> ConvertedDocument: ...

    def extract(self, file_url: str) -> ExtractedContent: ...

    def render_visual_diff(self, old_file_url: str, new_file_url: str, dest_path: str) -> None: ...


class HttpDocumentGateway:
    """문서 서비스 REST API를 호출하는 기본 게이트웨이"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or settings.DOCUMENT_SERVICE_BASE_URL).rstrip("/")
        self.api_key = settings.DOCUMENT_SERVICE_API_KEY if api_key is None else api_key
        self.timeout = float(timeout or settings.DOCUMENT_SERVICE_TIMEOUT_SECONDS)
        self._transport = transport

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _post(self, endpoint: str, payload: dict) -> httpx.Response:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(url, headers=self._headers(), json=payload)
                response.raise_for_status()
                return response
        except httpx.HTTPError as exc:
            raise DocumentGatewayError(f"Document service request to {endpoint} failed: {exc}") from exc

    def ensure_both_formats(self, file_url: str) -> ConvertedDocument:
        response = self._post(settings.DOCUMENT_SERVICE_CONVERT_ENDPOINT, {"file_url": file_url})
        data = response.json()
        pdf_path = str(data.get("pdf_path") or "").strip()
        word_path = str(data.get("word_path") or "").strip()
        if not pdf_path or not word_path:
            raise DocumentGatewayError("Document service did not return both PDF and Word renditions")
        return ConvertedDocument(pdf_path=pdf_path, word_path=word_path)

    def extract(self, file_url: str) -> ExtractedContent:
        response = self._post(settings.DOCUMENT_SERVICE_EXTRACT_ENDPOINT, {"file_url": file_url})
        data = response.json()
        return ExtractedContent(
            text=str(data.get("text") or ""),
            html=str(data.get("html") or ""),
            images=[str(url) for url in (data.get("images") or [])],
        )

    def render_visual_diff(self, old_file_url: str, new_file_url: str, dest_path: str) -> None:
        response = self._post(
            settings.DOCUMENT_SERVICE_VISUAL_DIFF_ENDPOINT,
            {"old_file_url": old_file_url, "new_file_url": new_file_url},
        )
        if not response.content:
            raise DocumentGatewayError("Document service returned an empty visual diff")
        os.makedirs(os.path.dirname(dest_path) or ".", exist_ok=True)
        with open(dest_path, "wb") as f:
            f.write(response.content)
        logger.info("[gateway] visual diff written to %s (%d bytes)", dest_path, len(response.content))


_gateway: Optional[DocumentGateway] = None


def get_document_gateway() -> DocumentGateway:
    global _gateway
    if _gateway is None:
        _gateway = HttpDocumentGateway()
    return _gateway


def set_document_gateway(gateway: Optional[DocumentGateway]) -> None:
    global _gateway
    _gateway = gateway
