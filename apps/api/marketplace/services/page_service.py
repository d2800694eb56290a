# marketplace/services/page_service.py
#
# 固定ページ（会社概要など）
# - 公開側は is_published のものだけ
# - アイキャッチ画像は BlobStore の pages/<filename>
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.core.errors import DomainRuleError, FieldError, NotFoundError, ValidationException
from marketplace.models.base import _utcnow
from marketplace.models.page import Page
from marketplace.schemas.common import public_url
from marketplace.schemas.page import PageIn, PageOut
from marketplace.services.image_processing import InvalidImageError, process_featured_image
from marketplace.services.image_service import ALLOWED_IMAGE_TYPES
from marketplace.services.uploads import ensure_size, ensure_type, unique_name
from marketplace.storage import Blob, BlobStore, StagedBlobs

logger = logging.getLogger(__name__)


def page_image_key(filename: str) -> str:
    return f"pages/{filename}"


def page_image_url(filename: Optional[str]) -> Optional[str]:
    if not filename:
        return None
    return public_url(f"/api/pages/images/{filename}")


def page_to_out(page: Page) -> PageOut:
    out = PageOut.model_validate(page)
    out.featured_image = page_image_url(page.featured_image)
    return out


class PageService:
    def __init__(self, db: Session, store: BlobStore) -> None:
        self.db = db
        self.store = store

    def _require(self, page_id: int) -> Page:
        page = self.db.get(Page, page_id)
        if page is None:
            raise NotFoundError("Page not found")
        return page

    def _slug_taken(self, slug: str, *, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Page.id).where(Page.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Page.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def _apply(self, page: Page, data: PageIn) -> None:
        page.slug = data.slug
        page.title_ja = data.title_ja
        page.title_en = data.title_en
        page.content_ja = data.content_ja
        page.content_en = data.content_en
        page.meta_description_ja = data.meta_description_ja
        page.meta_description_en = data.meta_description_en
        page.is_published = data.is_published
        page.show_in_nav = data.show_in_nav

    # ----------------------------
    # read
    # ----------------------------
    def list_pages(self, *, published_only: bool = True) -> List[PageOut]:
        stmt = select(Page)
        if published_only:
            stmt = stmt.where(Page.is_published.is_(True))
        rows = self.db.execute(stmt.order_by(Page.created_at.desc(), Page.id.desc())).scalars().all()
        return [page_to_out(p) for p in rows]

    def get_page(self, page_id: int) -> Optional[PageOut]:
        page = self.db.get(Page, page_id)
        return page_to_out(page) if page is not None else None

    def get_page_by_slug(self, slug: str, *, published_only: bool = True) -> Optional[PageOut]:
        stmt = select(Page).where(Page.slug == slug)
        if published_only:
            stmt = stmt.where(Page.is_published.is_(True))
        page = self.db.execute(stmt).scalar_one_or_none()
        return page_to_out(page) if page is not None else None

    # ----------------------------
    # write
    # ----------------------------
    def create_page(self, data: PageIn) -> PageOut:
        if self._slug_taken(data.slug):
            raise DomainRuleError(f'Page with slug "{data.slug}" already exists', code="DUPLICATE_SLUG")

        page = Page()
        self._apply(page, data)
        self.db.add(page)
        self.db.commit()
        self.db.refresh(page)
        logger.info("Page created: id=%s slug=%s", page.id, page.slug)
        return page_to_out(page)

    def update_page(self, page_id: int, data: PageIn) -> PageOut:
        page = self._require(page_id)
        if self._slug_taken(data.slug, exclude_id=page.id):
            raise DomainRuleError(f'Page with slug "{data.slug}" already exists', code="DUPLICATE_SLUG")

        # featured_image はここでは触らない
        self._apply(page, data)
        page.updated_at = _utcnow()
        self.db.commit()
        self.db.refresh(page)
        return page_to_out(page)

    def delete_page(self, page_id: int) -> None:
        page = self._require(page_id)
        featured = page.featured_image

        self.db.delete(page)
        self.db.commit()

        if featured:
            self.store.delete(page_image_key(featured))
        logger.info("Page deleted: id=%s", page_id)

    def set_featured_image(
        self,
        page_id: int,
        filename: Optional[str],
        content_type: Optional[str],
        content: bytes,
    ) -> PageOut:
        ensure_size(content)
        ensure_type(filename, content_type, ALLOWED_IMAGE_TYPES, "Only image files (JPEG, PNG, WebP) are allowed")
        page = self._require(page_id)

        try:
            jpeg = process_featured_image(content)
        except InvalidImageError as e:
            raise ValidationException([FieldError("image", "Invalid image file")]) from e

        name = unique_name("page", ".jpg")
        previous = page.featured_image

        with StagedBlobs(self.store) as staged:
            staged.put(page_image_key(name), jpeg, "image/jpeg")
            page.featured_image = name
            try:
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
            staged.commit()

        # 新しい画像が保存できてから古い方を消す
        if previous:
            self.store.delete(page_image_key(previous))

        self.db.refresh(page)
        return page_to_out(page)

    def clear_featured_image(self, page_id: int) -> PageOut:
        page = self._require(page_id)
        previous = page.featured_image

        page.featured_image = None
        self.db.commit()

        if previous:
            self.store.delete(page_image_key(previous))

        self.db.refresh(page)
        return page_to_out(page)

    def get_featured_image_blob(self, filename: str) -> Optional[Blob]:
        try:
            return self.store.get(page_image_key(filename))
        except ValueError:
            return None
