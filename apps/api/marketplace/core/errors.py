"""
errors.py

アプリ共通の例外（エラー種別タグ付き）

- サービス層はここの例外だけを投げる
- HTTPステータスは kind から決める（メッセージ文字列は見ない）
- main.py の exception handler が {"error": {code, message, details}} に変換する
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    DOMAIN = "domain"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"


HTTP_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.DOMAIN: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class AppError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_body(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"error": error}


class ValidationException(AppError):
    """フィールド単位のエラーを全件まとめて持つ"""

    kind = ErrorKind.VALIDATION
    code = "VALIDATION_ERROR"

    def __init__(self, errors: List[FieldError], message: str = "Validation failed") -> None:
        self.errors = list(errors)
        super().__init__(
            message,
            details={"errors": [e.to_dict() for e in self.errors]},
        )


class DomainRuleError(AppError):
    """業務ルール違反（不正カテゴリ、画像枚数上限、slug重複など）"""

    kind = ErrorKind.DOMAIN
    code = "DOMAIN_ERROR"


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"


class UnauthorizedError(AppError):
    kind = ErrorKind.UNAUTHORIZED
    code = "UNAUTHORIZED"


class TooManyRequestsError(AppError):
    kind = ErrorKind.RATE_LIMITED
    code = "TOO_MANY_REQUESTS"

    def __init__(self, message: str, *, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after
