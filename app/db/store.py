# app/db/store.py
from __future__ import annotations

import logging
from typing import Iterator, Optional, TypeVar, Union
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.core.errors import ConflictError, StorageError
from app.models.task import Task
from app.models.user import User

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", User, Task)


class RecordStore:
    """
    User/Task 레코드를 id 단위로 읽고 쓰는 얇은 계층.

    - 컬렉션 전체를 다시 쓰지 않고 행 단위로만 변경한다.
    - DB 예외는 rollback 후 StorageError로 바꿔서 올린다.
    """

    def __init__(self, session: Session):
        self.session = session

    def _fail(self, op: str, e: Exception) -> StorageError:
        logger.exception("RecordStore.%s failed", op)
        try:
            self.session.rollback()
        except SQLAlchemyError:
            logger.exception("rollback failed")
        return StorageError(f"Storage failure during {op}")

    # ---- users ----

    def get_user(self, user_id: UUID) -> Optional[User]:
        try:
            return self.session.get(User, user_id)
        except SQLAlchemyError as e:
            raise self._fail("get_user", e) from e

    def find_user(self, username_or_email: str) -> Optional[User]:
        stmt = select(User).where(
            or_(User.username == username_or_email, User.email == username_or_email)
        )
        try:
            return self.session.exec(stmt).first()
        except SQLAlchemyError as e:
            raise self._fail("find_user", e) from e

    def user_exists(self, *, username: Optional[str] = None, email: Optional[str] = None) -> bool:
        if username is None and email is None:
            return False
        stmt = select(User.id)
        if username is not None:
            stmt = stmt.where(User.username == username)
        if email is not None:
            stmt = stmt.where(User.email == email)
        try:
            return self.session.exec(stmt).first() is not None
        except SQLAlchemyError as e:
            raise self._fail("user_exists", e) from e

    # ---- tasks ----

    def get_task(self, task_id: UUID) -> Optional[Task]:
        try:
            return self.session.get(Task, task_id)
        except SQLAlchemyError as e:
            raise self._fail("get_task", e) from e

    def iter_tasks(self, owner_id: Optional[UUID] = None) -> Iterator[Task]:
        """삽입(생성) 순서대로. owner_id가 없으면 전체."""
        stmt = select(Task)
        if owner_id is not None:
            stmt = stmt.where(Task.owner_id == owner_id)
        stmt = stmt.order_by(Task.created_at, Task.id)
        try:
            rows = self.session.exec(stmt).all()
        except SQLAlchemyError as e:
            raise self._fail("iter_tasks", e) from e
        return iter(rows)

    # ---- writes ----

    def add(self, record: RecordT) -> RecordT:
        return self.save(record)

    def save(self, record: RecordT) -> RecordT:
        try:
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        except IntegrityError as e:
            # unique 인덱스 위반 (동시 가입 경합)
            self._fail("save", e)
            raise ConflictError("Record already exists") from e
        except SQLAlchemyError as e:
            raise self._fail("save", e) from e
        return record

    def delete(self, record: Union[User, Task]) -> None:
        try:
            self.session.delete(record)
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete", e) from e
