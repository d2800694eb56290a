from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from marketplace.models.base import Base, UTCDateTime, _utcnow


class VehicleImage(Base):
    """
    車両画像のメタデータ。
    実ファイル（本体 + サムネイル）は BlobStore に置き、DBにはファイル名とURLだけ持つ。
    """

    __tablename__ = "vehicle_images"

    id = Column(Integer, primary_key=True, autoincrement=True)

    vehicle_id = Column(
        Integer,
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    filename = Column(String(255), nullable=False)
    url = Column(String(1024), nullable=False)
    thumbnail_url = Column(String(1024), nullable=False)

    # 表示順（連番である必要はない）
    display_order = Column(Integer, nullable=False, default=0)

    uploaded_at = Column(UTCDateTime(), nullable=False, default=_utcnow)

    vehicle = relationship("Vehicle", back_populates="images")
