from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from marketplace.schemas.common import CamelModel


class LoginIn(BaseModel):
    username: str = ""
    password: str = ""


class LoginOut(CamelModel):
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user_id: int


class TokenUser(CamelModel):
    id: int
    username: str
    role: str


class VerifyOut(CamelModel):
    valid: bool
    user: TokenUser
