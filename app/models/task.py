# app/models/task.py
from sqlmodel import SQLModel, Field
from typing import Optional
from uuid import UUID, uuid4
from datetime import date, datetime


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    owner_id: UUID = Field(foreign_key="users.id", index=True)
    text: str
    completed: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    due_date: Optional[date] = None
    notification_email: Optional[str] = None
    # 리마인더 메일이 실제로 전달된 시각 (로컬 시간). 하루 한 번 판정에 사용
    last_reminded_at: Optional[datetime] = None
