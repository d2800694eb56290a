from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from marketplace.schemas.common import CamelModel, Paginated
from marketplace.schemas.image import VehicleImageOut

VehicleStatus = Literal["available", "reserved", "sold"]


class Dimensions(CamelModel):
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class VehicleIn(CamelModel):
    """
    作成・更新共通の入力。
    型だけここで受け、範囲や必須チェックは services.validation に寄せる
    （全フィールドのエラーを1回で返すため）。
    """

    # カテゴリは slug で受ける
    category: str = ""

    make: str = ""
    model: str = ""
    year: Optional[int] = None
    mileage: Optional[int] = None
    price: Optional[int] = None

    engine_type: Optional[str] = None
    dimensions: Dimensions = Field(default_factory=Dimensions)
    condition: Optional[str] = None
    features: List[str] = Field(default_factory=list)

    description_ja: Optional[str] = None
    description_en: Optional[str] = None

    status: VehicleStatus = "available"
    registration_document: Optional[str] = None


class VehicleOut(CamelModel):
    id: int
    category: str

    make: str
    model: str
    year: int
    mileage: int
    price: int

    engine_type: Optional[str] = None
    dimensions: Dimensions
    condition: Optional[str] = None
    features: List[str]

    description_ja: Optional[str] = None
    description_en: Optional[str] = None

    status: str
    registration_document: Optional[str] = None

    images: List[VehicleImageOut]

    created_at: datetime
    updated_at: datetime


VehicleListOut = Paginated[VehicleOut]
