from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.db.session import get_session
from app.db.store import RecordStore
from app.services.credentials import CredentialService, Identity, verify_token

# auto_error=False: 토큰 누락도 AuthError로 처리해서 {"error": ...} 형식을 맞춘다
bearer_scheme = HTTPBearer(auto_error=False)


# ✅ Authorization: Bearer <token> → Identity
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    token = credentials.credentials if credentials else None
    return verify_token(token)


def get_store(db: Session = Depends(get_session)) -> RecordStore:
    return RecordStore(db)


def get_credential_service(store: RecordStore = Depends(get_store)) -> CredentialService:
    return CredentialService(store)
