from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from marketplace.core.errors import DomainRuleError, NotFoundError
from marketplace.models.category import Category
from marketplace.models.vehicle import Vehicle
from marketplace.schemas.category import CategoryIn

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list_categories(self) -> List[Category]:
        return list(self.db.execute(select(Category).order_by(Category.id)).scalars().all())

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.db.get(Category, category_id)

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        if not slug:
            return None
        return self.db.execute(select(Category).where(Category.slug == slug)).scalar_one_or_none()

    def _require(self, category_id: int) -> Category:
        category = self.get_category(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    def create_category(self, data: CategoryIn) -> Category:
        if self.get_category_by_slug(data.slug) is not None:
            raise DomainRuleError(f'Category with slug "{data.slug}" already exists', code="DUPLICATE_SLUG")

        category = Category(name_ja=data.name_ja, name_en=data.name_en, slug=data.slug)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        logger.info("Category created: id=%s slug=%s", category.id, category.slug)
        return category

    def update_category(self, category_id: int, data: CategoryIn) -> Category:
        category = self._require(category_id)

        taken = self.get_category_by_slug(data.slug)
        if taken is not None and taken.id != category.id:
            raise DomainRuleError(f'Category with slug "{data.slug}" already exists', code="DUPLICATE_SLUG")

        category.name_ja = data.name_ja
        category.name_en = data.name_en
        category.slug = data.slug
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete_category(self, category_id: int) -> None:
        category = self._require(category_id)

        in_use = self.db.execute(
            select(func.count()).select_from(Vehicle).where(Vehicle.category_id == category.id)
        ).scalar_one()
        if in_use:
            raise DomainRuleError(
                f"Cannot delete category: {in_use} vehicle(s) are using this category",
                code="CATEGORY_IN_USE",
            )

        self.db.delete(category)
        self.db.commit()
        logger.info("Category deleted: id=%s", category_id)

    def update_category_icon(self, category_id: int, icon_svg: str) -> Category:
        category = self._require(category_id)
        category.icon = icon_svg
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete_category_icon(self, category_id: int) -> Category:
        category = self._require(category_id)
        category.icon = None
        self.db.commit()
        self.db.refresh(category)
        return category
