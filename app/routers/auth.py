from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.dependencies.auth import get_credential_service, get_current_user
from app.models.user import User
from app.schemas.auth import (
    AuthTokenResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserPublic,
)
from app.services.credentials import CredentialService, Identity

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


def _public(user: User) -> UserPublic:
    return UserPublic(id=str(user.id), username=user.username, email=user.email)


@auth_router.post("/register", response_model=AuthTokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    credentials: CredentialService = Depends(get_credential_service),
):
    user, token = credentials.register(body.username, body.email, body.password)
    return AuthTokenResponse(message="User registered successfully", token=token, user=_public(user))


@auth_router.post("/login", response_model=AuthTokenResponse)
def login(
    body: LoginRequest,
    credentials: CredentialService = Depends(get_credential_service),
):
    user, token = credentials.login(body.username, body.password)
    return AuthTokenResponse(message="Login successful", token=token, user=_public(user))


# ✅ /me: 토큰만으로 현재 사용자 확인 (DB 조회 없음)
@auth_router.get("/me", response_model=MeResponse)
def get_me(identity: Identity = Depends(get_current_user)):
    return MeResponse(user=UserPublic(**identity.as_dict()))
