from fastapi import APIRouter

from app.services.tips import random_tip

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok", "message": "Todo API is running"}


@router.get("/productivity-tip")
def productivity_tip():
    return {"tip": random_tip()}
