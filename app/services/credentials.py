# app/services/credentials.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple
from uuid import UUID

from app.core.errors import AuthError, ConflictError, ValidationError
from app.core.jwt import TokenExpired, TokenInvalid, create_access_token, decode_access_token
from app.core.security import get_password_hash, verify_password
from app.db.store import RecordStore
from app.models.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid username or password"


@dataclass(frozen=True)
class Identity:
    """토큰에서 복원한 호출자 정보"""

    user_id: UUID
    username: str
    email: str

    def as_dict(self) -> dict:
        return {"id": str(self.user_id), "username": self.username, "email": self.email}


def issue_token(user: User) -> str:
    return create_access_token(str(user.id), user.username, user.email)


class CredentialService:
    def __init__(self, store: RecordStore):
        self.store = store

    def register(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> Tuple[User, str]:
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            raise ValidationError("Username, email, and password are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        # 로그인은 username/email 어느 쪽으로도 받으므로 두 컬럼을 교차로 확인한다
        if self.store.user_exists(username=username) or self.store.user_exists(email=username):
            raise ConflictError("Username already exists")
        if self.store.user_exists(email=email) or self.store.user_exists(username=email):
            raise ConflictError("Email already registered")

        user = self.store.add(
            User(username=username, email=email, password_hash=get_password_hash(password))
        )
        logger.info("user registered id=%s username=%s", user.id, user.username)
        return user, issue_token(user)

    def login(self, username_or_email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        ident = (username_or_email or "").strip()
        if not ident or not password:
            raise ValidationError("Username and password are required")

        user = self.store.find_user(ident)
        # 없는 사용자 / 비밀번호 불일치를 구분하지 않는다
        if user is None or not verify_password(password, user.password_hash):
            logger.info("login failed ident=%s", ident)
            raise AuthError(INVALID_CREDENTIALS)

        logger.info("login ok id=%s", user.id)
        return user, issue_token(user)

    def verify(self, token: Optional[str]) -> Identity:
        return verify_token(token)


def verify_token(token: Optional[str]) -> Identity:
    """
    서명/만료 검증만 한다 (DB 조회 없음).
    """
    if not token:
        raise AuthError("Access token required")
    try:
        payload = decode_access_token(token)
    except TokenExpired:
        raise AuthError("Token has expired")
    except TokenInvalid:
        raise AuthError("Invalid or expired token")

    try:
        return Identity(
            user_id=UUID(str(payload["sub"])),
            username=str(payload["username"]),
            email=str(payload["email"]),
        )
    except (KeyError, ValueError):
        raise AuthError("Invalid or expired token")
