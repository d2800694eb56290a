from __future__ import annotations

from typing import Optional

from pydantic import Field

from marketplace.schemas.common import CamelModel


class CategoryIn(CamelModel):
    name_ja: str = Field(..., min_length=1, max_length=100)
    name_en: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9][a-z0-9\-]*$")


class CategoryOut(CamelModel):
    id: int
    name_ja: str
    name_en: str
    slug: str
    icon: Optional[str] = None
