from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.core.errors import UnauthorizedError
from marketplace.core.security import create_access_token, hash_password, verify_password
from marketplace.models.user import User
from marketplace.schemas.auth import LoginOut

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_user_by_username(self, username: str) -> Optional[User]:
        if not username:
            return None
        return self.db.execute(select(User).where(User.username == username)).scalar_one_or_none()

    def login(self, username: str, password: str) -> LoginOut:
        user = self.get_user_by_username((username or "").strip())

        # ユーザー不在とパスワード不一致は同じエラーにする
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login failed: username=%s", username)
            raise UnauthorizedError("Invalid credentials")

        token, expires_at = create_access_token(
            str(user.id),
            username=user.username,
            role=user.role or "admin",
        )
        logger.info("Login succeeded: user_id=%s", user.id)
        return LoginOut(token=token, expires_at=expires_at, user_id=user.id)

    def set_password(self, username: str, password: str, *, role: str = "admin") -> User:
        """ユーザーが居なければ作成、居ればパスワードを更新（管理スクリプト・初期投入用）"""
        user = self.get_user_by_username(username)
        if user is None:
            user = User(username=username, role=role)
            self.db.add(user)
        user.password_hash = hash_password(password)
        self.db.commit()
        self.db.refresh(user)
        return user
