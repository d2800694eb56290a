from __future__ import annotations

from sqlalchemy import Column, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from marketplace.models.base import Base, UTCDateTime, _utcnow


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)

    category_id = Column(
        Integer,
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )

    # 基本情報
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False, index=True)
    mileage = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False, index=True)

    engine_type = Column(String(100), nullable=True)

    # 寸法（m）
    length = Column(Float, nullable=True)
    width = Column(Float, nullable=True)
    height = Column(Float, nullable=True)

    condition = Column(String(100), nullable=True)

    # JSON文字列で保存（例: '["パワーゲート", "ETC"]'）
    features = Column(Text, nullable=True)

    description_ja = Column(Text, nullable=True)
    description_en = Column(Text, nullable=True)

    # available / reserved / sold
    status = Column(String(20), nullable=False, default="available")

    # 車検証などのPDF URL（任意）
    registration_document = Column(String(1024), nullable=True)

    created_at = Column(UTCDateTime(), nullable=False, default=_utcnow, index=True)
    updated_at = Column(UTCDateTime(), nullable=False, default=_utcnow, onupdate=_utcnow)

    category = relationship("Category", lazy="selectin")

    images = relationship(
        "VehicleImage",
        back_populates="vehicle",
        lazy="selectin",
        order_by="[VehicleImage.display_order, VehicleImage.id]",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_vehicles_status_price", "status", "price"),
    )

    def __repr__(self) -> str:
        return f"<Vehicle id={self.id} {self.make} {self.model}>"
