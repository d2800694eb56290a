from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from marketplace.schemas.common import CamelModel


class PageIn(CamelModel):
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9][a-z0-9\-]*$")

    title_ja: str = Field(..., min_length=1, max_length=255)
    title_en: Optional[str] = Field(default=None, max_length=255)

    content_ja: str = Field(..., min_length=1)
    content_en: Optional[str] = None

    meta_description_ja: Optional[str] = Field(default=None, max_length=500)
    meta_description_en: Optional[str] = Field(default=None, max_length=500)

    is_published: bool = True
    show_in_nav: bool = False


class PageOut(CamelModel):
    id: int
    slug: str
    title_ja: str
    title_en: Optional[str] = None
    content_ja: str
    content_en: Optional[str] = None
    meta_description_ja: Optional[str] = None
    meta_description_en: Optional[str] = None

    # 公開URL（/api/pages/images/<filename>）
    featured_image: Optional[str] = None

    is_published: bool
    show_in_nav: bool
    created_at: datetime
    updated_at: datetime


class FeaturedImageOut(CamelModel):
    message: str
    image_url: Optional[str] = None
    page: PageOut
