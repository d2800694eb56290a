from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.orm import Session

from marketplace.core.errors import DomainRuleError, NotFoundError
from marketplace.models.base import _utcnow
from marketplace.models.category import Category
from marketplace.models.vehicle import Vehicle
from marketplace.schemas.common import Paginated
from marketplace.schemas.vehicle import Dimensions, VehicleIn, VehicleOut
from marketplace.services.category_service import CategoryService
from marketplace.services.image_service import image_to_out
from marketplace.services.validation import validate_vehicle_input_or_raise

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
RELATED_PRICE_RANGE = 0.3


# =========================================================
# Filters
# =========================================================
@dataclass(frozen=True)
class VehicleFilters:
    """一覧用の任意フィルタ。指定されたものだけ AND 条件になる"""

    category: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    page: int = 1
    page_size: int = 20

    def conditions(self) -> List[ColumnElement[bool]]:
        # 各条件は値をバインドパラメータとして自分で持つ（並び順に依存しない）
        cond: List[ColumnElement[bool]] = []
        if self.category:
            cond.append(Category.slug == self.category)
        if self.min_price is not None:
            cond.append(Vehicle.price >= self.min_price)
        if self.max_price is not None:
            cond.append(Vehicle.price <= self.max_price)
        if self.min_year is not None:
            cond.append(Vehicle.year >= self.min_year)
        if self.max_year is not None:
            cond.append(Vehicle.year <= self.max_year)
        return cond

    def limit_offset(self) -> tuple[int, int]:
        page = max(1, int(self.page))
        page_size = max(1, min(int(self.page_size), MAX_PAGE_SIZE))
        return page_size, (page - 1) * page_size


# =========================================================
# Response shaping
# =========================================================
def decode_features(raw: Any, *, vehicle_id: Any = None) -> List[str]:
    """features カラム（JSON文字列）を配列に戻す。壊れていたら空配列"""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Failed to parse features for vehicle %s", vehicle_id)
        return []
    if not isinstance(value, list):
        return []
    # null や数値など文字列以外の要素は捨てる
    return [v for v in value if isinstance(v, str)]


def vehicle_to_out(vehicle: Vehicle) -> VehicleOut:
    return VehicleOut(
        id=vehicle.id,
        category=vehicle.category.slug,
        make=vehicle.make,
        model=vehicle.model,
        year=vehicle.year,
        mileage=vehicle.mileage,
        price=vehicle.price,
        engine_type=vehicle.engine_type,
        dimensions=Dimensions(length=vehicle.length, width=vehicle.width, height=vehicle.height),
        condition=vehicle.condition,
        features=decode_features(vehicle.features, vehicle_id=vehicle.id),
        description_ja=vehicle.description_ja,
        description_en=vehicle.description_en,
        status=vehicle.status or "available",
        registration_document=vehicle.registration_document,
        images=[image_to_out(img) for img in vehicle.images],
        created_at=vehicle.created_at,
        updated_at=vehicle.updated_at,
    )


# =========================================================
# Service
# =========================================================
class VehicleService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.categories = CategoryService(db)

    # ----------------------------
    # internal helpers
    # ----------------------------
    def _load(self, vehicle_id: int) -> Optional[Vehicle]:
        # populate_existing: 同一セッション内でも常にDBの値で読み直す
        return self.db.get(Vehicle, vehicle_id, populate_existing=True)

    def _require(self, vehicle_id: int) -> Vehicle:
        vehicle = self._load(vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle with ID {vehicle_id} not found")
        return vehicle

    def _resolve_category(self, slug: str) -> Category:
        category = self.categories.get_category_by_slug(slug)
        if category is None:
            raise DomainRuleError(f"Invalid category: {slug}", code="INVALID_CATEGORY")
        return category

    def _apply(self, vehicle: Vehicle, data: VehicleIn, category: Category) -> None:
        vehicle.category_id = category.id
        vehicle.make = data.make.strip()
        vehicle.model = data.model.strip()
        vehicle.year = data.year
        vehicle.mileage = data.mileage
        vehicle.price = data.price
        vehicle.engine_type = data.engine_type
        vehicle.length = data.dimensions.length
        vehicle.width = data.dimensions.width
        vehicle.height = data.dimensions.height
        vehicle.condition = data.condition
        vehicle.features = json.dumps(data.features, ensure_ascii=False)
        vehicle.description_ja = data.description_ja
        vehicle.description_en = data.description_en
        vehicle.status = data.status or "available"
        vehicle.registration_document = data.registration_document

    def _hydrate_all(self, stmt) -> List[VehicleOut]:  # noqa: ANN001
        rows = self.db.execute(stmt.execution_options(populate_existing=True)).scalars().all()
        return [vehicle_to_out(v) for v in rows]

    # ----------------------------
    # read
    # ----------------------------
    def get_vehicle(self, vehicle_id: int) -> Optional[VehicleOut]:
        vehicle = self._load(vehicle_id)
        return vehicle_to_out(vehicle) if vehicle is not None else None

    def list_vehicles(self, filters: VehicleFilters) -> Paginated[VehicleOut]:
        cond = filters.conditions()
        limit, offset = filters.limit_offset()

        total = self.db.execute(
            select(func.count(Vehicle.id))
            .select_from(Vehicle)
            .join(Category, Vehicle.category_id == Category.id)
            .where(*cond)
        ).scalar_one()

        items = self._hydrate_all(
            select(Vehicle)
            .join(Category, Vehicle.category_id == Category.id)
            .where(*cond)
            .order_by(Vehicle.created_at.desc(), Vehicle.id.desc())
            .limit(limit)
            .offset(offset)
        )

        return Paginated[VehicleOut](
            items=items,
            total_count=int(total or 0),
            page=max(1, int(filters.page)),
            page_size=limit,
        )

    def search_vehicles(self, query: Optional[str]) -> List[VehicleOut]:
        q = (query or "").strip()
        if not q:
            return []

        stmt = (
            select(Vehicle)
            .join(Category, Vehicle.category_id == Category.id)
            .where(
                or_(
                    Vehicle.make.icontains(q, autoescape=True),
                    Vehicle.model.icontains(q, autoescape=True),
                    Category.name_ja.icontains(q, autoescape=True),
                    Category.name_en.icontains(q, autoescape=True),
                    Vehicle.description_ja.icontains(q, autoescape=True),
                    Vehicle.description_en.icontains(q, autoescape=True),
                )
            )
            .distinct()
            .order_by(Vehicle.created_at.desc(), Vehicle.id.desc())
        )
        return self._hydrate_all(stmt)

    def get_related_vehicles(self, vehicle_id: int, limit: int = 4) -> List[VehicleOut]:
        """
        関連車両:
          1. 同カテゴリ・価格±30%・販売中（価格が近い順）
          2. 足りなければ他カテゴリから同じ条件で補充
        """
        vehicle = self._require(vehicle_id)
        limit = max(1, min(int(limit), 20))

        min_price = math.floor(vehicle.price * (1 - RELATED_PRICE_RANGE))
        max_price = math.ceil(vehicle.price * (1 + RELATED_PRICE_RANGE))

        def _stmt(same_category: bool, n: int):
            category_cond = (
                Vehicle.category_id == vehicle.category_id
                if same_category
                else Vehicle.category_id != vehicle.category_id
            )
            return (
                select(Vehicle)
                .where(
                    Vehicle.id != vehicle.id,
                    category_cond,
                    Vehicle.price.between(min_price, max_price),
                    Vehicle.status == "available",
                )
                .order_by(func.abs(Vehicle.price - vehicle.price), Vehicle.id)
                .limit(n)
            )

        related = self._hydrate_all(_stmt(True, limit))
        if len(related) < limit:
            related.extend(self._hydrate_all(_stmt(False, limit - len(related))))
        return related

    # ----------------------------
    # write
    # ----------------------------
    def create_vehicle(self, data: VehicleIn) -> VehicleOut:
        validate_vehicle_input_or_raise(data.model_dump())
        category = self._resolve_category(data.category)

        vehicle = Vehicle()
        self._apply(vehicle, data, category)

        self.db.add(vehicle)
        self.db.commit()
        logger.info("Vehicle created: id=%s %s %s", vehicle.id, vehicle.make, vehicle.model)

        # 保存された値（タイムスタンプ含む）を読み直して返す
        return vehicle_to_out(self._require(vehicle.id))

    def update_vehicle(self, vehicle_id: int, data: VehicleIn) -> VehicleOut:
        validate_vehicle_input_or_raise(data.model_dump())
        vehicle = self._require(vehicle_id)
        category = self._resolve_category(data.category)

        self._apply(vehicle, data, category)
        # 値が同じでも onupdate は発火しないので明示的に更新する
        vehicle.updated_at = _utcnow()
        self.db.commit()
        logger.info("Vehicle updated: id=%s", vehicle_id)

        return vehicle_to_out(self._require(vehicle_id))

    def delete_vehicle(self, vehicle_id: int) -> None:
        """
        画像メタデータは ON DELETE CASCADE で消える。
        画像ファイル本体の削除は ImageService.purge_vehicle_assets を呼び出し側で実行する。
        """
        vehicle = self._require(vehicle_id)
        self.db.delete(vehicle)
        self.db.commit()
        logger.info("Vehicle deleted: id=%s", vehicle_id)
