from __future__ import annotations

from sqlalchemy import Column, Integer, String, Text

from marketplace.models.base import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name_ja = Column(String(100), nullable=False)
    name_en = Column(String(100), nullable=False)

    # URL / フィルタで使う外部向け識別子
    slug = Column(String(100), nullable=False, unique=True, index=True)

    # SVG文字列（任意）
    icon = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Category id={self.id} slug={self.slug}>"
