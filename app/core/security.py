# app/core/security.py
from passlib.context import CryptContext

# bcrypt: salt가 해시 문자열 안에 포함된다
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # 손상된 해시 문자열
        return False
