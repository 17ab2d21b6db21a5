# app/services/task_repository.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional
from uuid import UUID

from app.core.errors import AuthzError, NotFoundError, ValidationError
from app.db.store import RecordStore
from app.models.task import Task

logger = logging.getLogger(__name__)

# 소유자가 PUT으로 바꿀 수 있는 필드 (id/owner_id/last_reminded_at 제외)
UPDATABLE_FIELDS = ("text", "completed", "due_date", "notification_email")


def _clean_text(text: Optional[str]) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("Todo text is required")
    return cleaned


def _clean_email(email: Optional[str]) -> Optional[str]:
    email = (email or "").strip()
    return email or None


def ensure_owner(task: Task, owner_id: UUID, action: str) -> None:
    """
    모든 변경 작업 전에 호출되는 소유권 검사.
    에러 메시지에는 task 내용을 넣지 않는다.
    """
    if task.owner_id != owner_id:
        logger.warning("ownership violation task=%s caller=%s action=%s", task.id, owner_id, action)
        raise AuthzError(f"Unauthorized to {action} this todo")


class TaskRepository:
    def __init__(self, store: RecordStore):
        self.store = store

    def list(self, owner_id: UUID) -> list[Task]:
        return list(self.store.iter_tasks(owner_id=owner_id))

    def create(
        self,
        owner_id: UUID,
        text: Optional[str],
        due_date: Optional[date] = None,
        notification_email: Optional[str] = None,
        *,
        default_email: Optional[str] = None,
    ) -> Task:
        task = Task(
            owner_id=owner_id,
            text=_clean_text(text),
            completed=False,
            created_at=datetime.utcnow(),
            due_date=due_date,
            notification_email=_clean_email(notification_email) or _clean_email(default_email),
            last_reminded_at=None,
        )
        task = self.store.add(task)
        logger.info("task created id=%s owner=%s due=%s", task.id, owner_id, task.due_date)
        return task

    def _get_owned(self, owner_id: UUID, task_id: UUID | str, action: str) -> Task:
        # UUID 형식이 아닌 id는 존재할 수 없는 id
        try:
            key = task_id if isinstance(task_id, UUID) else UUID(str(task_id))
        except ValueError:
            raise NotFoundError("Todo not found")
        task = self.store.get_task(key)
        if task is None:
            raise NotFoundError("Todo not found")
        ensure_owner(task, owner_id, action)
        return task

    def update(self, owner_id: UUID, task_id: UUID | str, fields: Mapping[str, Any]) -> Task:
        task = self._get_owned(owner_id, task_id, "update")

        # shallow merge: 넘어온 필드만 덮어쓴다
        for name in UPDATABLE_FIELDS:
            if name not in fields:
                continue
            value = fields[name]
            if name == "text":
                value = _clean_text(value)
            elif name == "notification_email":
                value = _clean_email(value)
            elif name == "completed":
                if value is None:
                    raise ValidationError("completed must be a boolean")
                value = bool(value)
            setattr(task, name, value)

        task = self.store.save(task)
        logger.info("task updated id=%s fields=%s", task.id, sorted(k for k in fields if k in UPDATABLE_FIELDS))
        return task

    def delete(self, owner_id: UUID, task_id: UUID | str) -> None:
        task = self._get_owned(owner_id, task_id, "delete")
        self.store.delete(task)
        logger.info("task deleted id=%s", task_id)
