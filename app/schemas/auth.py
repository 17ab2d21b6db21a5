# app/schemas/auth.py
from pydantic import BaseModel
from typing import Optional


# ── 요청 ─────────────────────────────────────────────────────
# 필수값 검사는 CredentialService가 한다 (에러 메시지 통일)
class RegisterRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None  # username 또는 email
    password: Optional[str] = None


# ── 응답 ─────────────────────────────────────────────────────
class UserPublic(BaseModel):
    id: str
    username: str
    email: str


class AuthTokenResponse(BaseModel):
    message: str
    token: str
    user: UserPublic


class MeResponse(BaseModel):
    user: UserPublic
