from __future__ import annotations

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from marketplace.core.config import settings

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    API境界の共通Base。
    - 内部（Python / DB）は snake_case、JSONは camelCase
    - 入力は camelCase / snake_case どちらでもOK
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Paginated(CamelModel, Generic[T]):
    items: List[T]
    total_count: int = Field(ge=0)
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ErrorBody(BaseModel):
    error: ErrorDetail


def public_url(path: Optional[str]) -> Optional[str]:
    """相対URLに PUBLIC_BASE_URL を付ける（未設定ならそのまま）"""
    if not path:
        return path
    if path.startswith(("http://", "https://")):
        return path
    base = (settings.PUBLIC_BASE_URL or "").rstrip("/")
    return f"{base}{path}" if base else path
