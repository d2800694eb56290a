"""
Models package.

目的:
- Alembic / アプリ起動時に全モデルモジュールを import し、
  Base.metadata に確実にテーブル定義を登録する。
"""

from __future__ import annotations

# NOTE:
# import すること自体が目的（副作用で Base.metadata に登録される）なので noqa を付ける。

from marketplace.models import category  # noqa: F401
from marketplace.models import vehicle  # noqa: F401
from marketplace.models import vehicle_image  # noqa: F401
from marketplace.models import inquiry  # noqa: F401
from marketplace.models import page  # noqa: F401
from marketplace.models import user  # noqa: F401
from marketplace.models.base import Base  # noqa: F401
