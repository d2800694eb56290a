from __future__ import annotations

from sqlalchemy import Boolean, Column, Integer, String, Text

from marketplace.models.base import Base, UTCDateTime, _utcnow


class Page(Base):
    __tablename__ = "pages"

    id = Column(Integer, primary_key=True, autoincrement=True)

    slug = Column(String(100), nullable=False, unique=True, index=True)

    title_ja = Column(String(255), nullable=False)
    title_en = Column(String(255), nullable=True)

    content_ja = Column(Text, nullable=False)
    content_en = Column(Text, nullable=True)

    meta_description_ja = Column(String(500), nullable=True)
    meta_description_en = Column(String(500), nullable=True)

    # BlobStore 上のファイル名（pages/<filename>）
    featured_image = Column(String(255), nullable=True)

    is_published = Column(Boolean, nullable=False, default=True)
    show_in_nav = Column(Boolean, nullable=False, default=False)

    created_at = Column(UTCDateTime(), nullable=False, default=_utcnow)
    updated_at = Column(UTCDateTime(), nullable=False, default=_utcnow, onupdate=_utcnow)
