from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from marketplace.core.config import settings
from marketplace.core.errors import UnauthorizedError
from marketplace.core.rate_limit import LoginRateLimiter
from marketplace.core.security import decode_access_token
from marketplace.db.session import get_db
from marketplace.models.user import User

# Bearerトークンを Authorization: Bearer <token> から取得
# auto_error=False にして自前で 401 を統一する
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Authentication dependency (single source of truth).
    - Extract Bearer token
    - Verify JWT via core.security.decode_access_token
    - Load User by id (sub)
    """
    if creds is None or not creds.credentials:
        raise UnauthorizedError("No token provided")

    payload = decode_access_token(creds.credentials)
    if payload is None:
        raise UnauthorizedError("Invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid or expired token")

    user = db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("Invalid or expired token")

    return user


@lru_cache
def get_login_limiter() -> LoginRateLimiter:
    # テストでは app.dependency_overrides で差し替える
    return LoginRateLimiter(settings.LOGIN_MAX_ATTEMPTS, settings.LOGIN_WINDOW_SECONDS)


def limit_login_attempts(
    request: Request,
    limiter: LoginRateLimiter = Depends(get_login_limiter),
) -> None:
    """ログイン総当たり対策（成功・失敗に関わらず1回と数える）"""
    client_ip = request.client.host if request.client else "unknown"
    limiter.hit(client_ip)
