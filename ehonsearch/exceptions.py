"""
Exceptions for ehonsearch

Centralized error types:
- Gateway failures (catalog search)
- Repository failures (persistence)
- Registration failures (orchestrator)
- Input validation
"""

from enum import Enum
from typing import Optional


class EhonSearchException(Exception):
    """Base exception for ehonsearch errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        detail: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.detail = detail
        super().__init__(message)


class GatewayErrorKind(str, Enum):
    """Failure categories reported by a search gateway."""

    INVALID_ISBN = "invalid_isbn"
    BOOK_NOT_FOUND = "book_not_found"
    NETWORK_ERROR = "network_error"
    DECODING_ERROR = "decoding_error"
    HTTP_ERROR = "http_error"
    UNKNOWN = "unknown"


# Operator-facing messages, one per gateway error kind
GATEWAY_ERROR_DESCRIPTIONS = {
    GatewayErrorKind.INVALID_ISBN: "無効なISBN形式です",
    GatewayErrorKind.BOOK_NOT_FOUND: "書籍が見つかりませんでした",
    GatewayErrorKind.NETWORK_ERROR: "ネットワークエラーが発生しました",
    GatewayErrorKind.DECODING_ERROR: "APIレスポンスの解析に失敗しました",
    GatewayErrorKind.HTTP_ERROR: "HTTPエラーが発生しました",
    GatewayErrorKind.UNKNOWN: "不明なエラーが発生しました",
}


class GatewayError(EhonSearchException):
    """Catalog search failed."""

    def __init__(
        self,
        kind: GatewayErrorKind,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.kind = kind
        self.status_code = status_code

        message = GATEWAY_ERROR_DESCRIPTIONS[kind]
        if kind == GatewayErrorKind.HTTP_ERROR and status_code is not None:
            message = f"{message}（ステータスコード: {status_code}）"

        super().__init__(
            message=message,
            code=f"GATEWAY_{kind.name}",
            detail=detail,
        )

    def __repr__(self) -> str:
        if self.status_code is not None:
            return f"GatewayError({self.kind.value}, status_code={self.status_code})"
        return f"GatewayError({self.kind.value})"


class RepositoryError(EhonSearchException):
    """Persistence layer failure."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            message=message,
            code="REPOSITORY_ERROR",
            detail=detail,
        )


class RegistrationError(EhonSearchException):
    """A book could not be registered."""

    def __init__(self, message: str = "絵本の登録に失敗しました", detail: Optional[str] = None):
        super().__init__(
            message=message,
            code="REGISTRATION_FAILED",
            detail=detail,
        )


class ValidationError(EhonSearchException):
    """Input validation failed."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            detail=detail,
        )
