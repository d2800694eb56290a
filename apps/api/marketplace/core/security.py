from __future__ import annotations

"""
security.py

JWT認証・パスワードハッシュ管理モジュール

特徴:
- 例外安全（検証失敗は None を返す）
- FastAPI依存注入と互換
- Windows環境でも安定（pbkdf2_sha256使用）
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple, TypedDict

from jose import JWTError, jwt
from passlib.context import CryptContext

from marketplace.core.config import settings


# =========================
# パスワードハッシュ
# =========================

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """
    パスワードを安全にハッシュ化
    """
    if not isinstance(password, str) or not password:
        raise ValueError("Password cannot be empty")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    パスワード検証
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


class TokenPayload(TypedDict):
    sub: str
    username: str
    role: str
    exp: int  # UNIX timestamp
    iat: int  # UNIX timestamp
    type: str


# =========================
# JWT作成
# =========================

def create_access_token(
    subject: str,
    *,
    username: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> Tuple[str, datetime]:
    """
    JWTアクセストークン生成

    Args:
        subject: user_id（文字列）
        username: 表示用ユーザー名
        role: ロール（admin 等）
        expires_delta: 有効期間（省略時は設定値）

    Returns:
        (JWT文字列, 失効日時)
    """
    if not subject:
        raise ValueError("Subject cannot be empty")

    now = datetime.now(timezone.utc)
    expires_at = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    payload: TokenPayload = {
        "sub": subject,
        "username": username,
        "role": role,
        "exp": int(expires_at.timestamp()),
        "iat": int(now.timestamp()),
        "type": "access",
    }

    token: str = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token, expires_at.replace(microsecond=0)


# =========================
# JWT検証
# =========================

def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    JWT検証

    Args:
        token: JWT文字列

    Returns:
        payload または None（期限切れ・署名不正・型不正）
    """
    if not token:
        return None

    try:
        payload: Dict[str, Any] = jwt.decode(
            token,
            key=settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None

    if not isinstance(payload, dict):
        return None

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None

    token_type = payload.get("type")
    if token_type is not None and token_type != "access":
        return None

    return payload
