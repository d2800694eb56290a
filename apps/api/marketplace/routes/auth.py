from __future__ import annotations

from fastapi import APIRouter, Depends

from marketplace.dependencies.auth import get_current_user, limit_login_attempts
from marketplace.dependencies.services import get_auth_service
from marketplace.models.user import User
from marketplace.schemas.auth import LoginIn, LoginOut, TokenUser, VerifyOut
from marketplace.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


# ============================================================
# login
# ============================================================

@router.post("/login", response_model=LoginOut, dependencies=[Depends(limit_login_attempts)])
def login(body: LoginIn, service: AuthService = Depends(get_auth_service)) -> LoginOut:
    return service.login(body.username, body.password)


@router.get("/verify", response_model=VerifyOut)
def verify(user: User = Depends(get_current_user)) -> VerifyOut:
    return VerifyOut(valid=True, user=TokenUser(id=user.id, username=user.username, role=user.role))


# JWTはステートレスなのでクライアント側でトークンを破棄するだけ
@router.post("/logout")
def logout():
    return {"message": "Logged out successfully"}
