# app/schemas/task.py
from pydantic import BaseModel, ConfigDict
from uuid import UUID
from typing import Optional
from datetime import date, datetime


# ── 생성 요청 ────────────────────────────────────────────────
class TaskCreate(BaseModel):
    text: Optional[str] = None
    due_date: Optional[date] = None
    notification_email: Optional[str] = None


# ── 부분 수정 요청 (보낸 필드만 반영) ────────────────────────
class TaskUpdate(BaseModel):
    text: Optional[str] = None
    completed: Optional[bool] = None
    due_date: Optional[date] = None
    notification_email: Optional[str] = None


# ── 조회 응답 ────────────────────────────────────────────────
class TaskRead(BaseModel):
    id: UUID
    owner_id: UUID
    text: str
    completed: bool
    created_at: datetime
    due_date: Optional[date]
    notification_email: Optional[str]
    last_reminded_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)
