from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, String, Text

from marketplace.models.base import Base, UTCDateTime, _utcnow

INQUIRY_TYPES = ("phone", "email", "line")
INQUIRY_STATUSES = ("new", "contacted", "closed")


class Inquiry(Base):
    """お問い合わせ（公開フォームから作成、管理画面でステータス更新のみ）"""

    __tablename__ = "inquiries"

    id = Column(Integer, primary_key=True, autoincrement=True)

    vehicle_id = Column(
        Integer,
        ForeignKey("vehicles.id", ondelete="SET NULL"),
        # 車両が削除されても問い合わせは残す
        nullable=True,
        index=True,
    )

    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(50), nullable=True)

    message = Column(Text, nullable=False)

    # phone / email / line
    inquiry_type = Column(String(20), nullable=False)

    # new / contacted / closed
    status = Column(String(20), nullable=False, default="new", index=True)

    created_at = Column(UTCDateTime(), nullable=False, default=_utcnow, index=True)
