"""워크플로 도메인 오류 계층입니다. 모든 오류는 그대로 화면에 노출 가능한 메시지를 가집니다."""

from typing import Optional

from fastapi import HTTPException, status


class DomainError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)

    def __str__(self) -> str:
        return str(self.detail)


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class BadRequestError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"


class ForbiddenError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"
