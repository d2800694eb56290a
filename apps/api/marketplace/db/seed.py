# marketplace/db/seed.py
#
# 初期データ投入（起動時 RUN_CREATE_ALL=true の時、および Alembic migration から参照）
from __future__ import annotations

import logging
import secrets
from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from marketplace.core.config import settings
from marketplace.core.security import hash_password
from marketplace.models.category import Category
from marketplace.models.user import User

logger = logging.getLogger(__name__)

# (name_ja, name_en, slug)
DEFAULT_CATEGORIES: List[Tuple[str, str, str]] = [
    ("平ボディ", "Flatbed", "flatbed"),
    ("ダンプ", "Dump", "dump"),
    ("クレーン", "Crane", "crane"),
    ("バン・ウィング", "Van/Wing", "van-wing"),
    ("冷凍車", "Refrigerated", "refrigerated"),
    ("アームロール・フックロール", "Arm Roll/Hook Roll", "arm-roll"),
    ("キャリアカー・ローダー", "Carrier/Loader", "carrier"),
    ("パッカー車", "Garbage Truck", "garbage"),
    ("ミキサー車", "Mixer", "mixer"),
    ("タンク車", "Tank", "tank"),
    ("高所作業車", "Aerial Work Platform", "aerial"),
    ("特殊車両", "Special Vehicles", "special"),
    ("バス", "Bus", "bus"),
    ("ベース車輛・その他", "Base Vehicle/Other", "other"),
]


def seed_categories(db: Session) -> int:
    """カテゴリが空の時だけ全件を1トランザクションで投入"""
    count = db.execute(select(func.count(Category.id))).scalar_one()
    if count:
        return 0

    try:
        db.add_all(Category(name_ja=ja, name_en=en, slug=slug) for ja, en, slug in DEFAULT_CATEGORIES)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Categories seeded: %s", len(DEFAULT_CATEGORIES))
    return len(DEFAULT_CATEGORIES)


def seed_admin_user(db: Session) -> bool:
    """ユーザーが1人も居なければ管理者を作る"""
    count = db.execute(select(func.count(User.id))).scalar_one()
    if count:
        return False

    password = settings.ADMIN_PASSWORD
    generated = not password
    if generated:
        password = secrets.token_urlsafe(12)

    db.add(User(username=settings.ADMIN_USERNAME, password_hash=hash_password(password), role="admin"))
    db.commit()

    if generated:
        # 初回のみ。manage_admin.py で変更すること
        logger.warning(
            "Admin user '%s' created with generated password: %s",
            settings.ADMIN_USERNAME,
            password,
        )
    else:
        logger.info("Admin user '%s' created", settings.ADMIN_USERNAME)
    return True


def seed_all(db: Session) -> None:
    seed_categories(db)
    seed_admin_user(db)
