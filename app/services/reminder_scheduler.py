# app/services/reminder_scheduler.py
from __future__ import annotations

"""
마감일 리마인더 스케줄러.

- 매일 정해진 시각(REMINDER_HOUR:REMINDER_MINUTE) + 시작 직후 1회 전체 스캔
- 오늘 마감 / 미완료 / 수신 이메일 있음 / 오늘 아직 안 보냄 → 메일 발송
- 발송 성공(delivered)일 때만 last_reminded_at 기록 → 같은 날 재스캔은 no-op
- task 하나의 실패가 나머지 스캔을 멈추지 않는다
"""

import logging
import threading
from contextlib import AbstractContextManager
from dataclasses import asdict, dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import AppError, StorageError
from app.db.session import session_scope
from app.db.store import RecordStore
from app.models.task import Task
from app.services.notifier import DispatchResult, NotificationDispatcher

logger = logging.getLogger(__name__)

DAILY_JOB_ID = "daily_reminder_scan"
STARTUP_JOB_ID = "startup_reminder_scan"


class ReminderState(str, Enum):
    NO_DUE_DATE = "no-due-date"
    PENDING_FUTURE = "pending-future"
    DUE_TODAY_UNNOTIFIED = "due-today-unnotified"
    DUE_TODAY_NOTIFIED = "due-today-notified"
    OVERDUE = "overdue"


def reminder_state(task: Task, today: date) -> ReminderState:
    if task.due_date is None:
        return ReminderState.NO_DUE_DATE
    if task.due_date > today:
        return ReminderState.PENDING_FUTURE
    if task.due_date < today:
        # 지난 마감은 다시 알리지 않는다
        return ReminderState.OVERDUE
    if task.last_reminded_at is not None and task.last_reminded_at.date() == today:
        return ReminderState.DUE_TODAY_NOTIFIED
    return ReminderState.DUE_TODAY_UNNOTIFIED


def is_reminder_due(task: Task, today: date) -> bool:
    if task.completed or not (task.notification_email or "").strip():
        return False
    return reminder_state(task, today) is ReminderState.DUE_TODAY_UNNOTIFIED


@dataclass
class ScanReport:
    scanned: int = 0
    due: int = 0
    delivered: int = 0
    skipped: int = 0
    failed: int = 0
    # 이전 스캔이 아직 돌고 있어서 건너뛴 경우 True
    busy: bool = False

    def as_dict(self) -> dict:
        return asdict(self)


class ReminderScheduler:
    def __init__(
        self,
        dispatcher: Optional[NotificationDispatcher] = None,
        *,
        session_factory: Callable[[], AbstractContextManager[Session]] = session_scope,
        clock: Callable[[], datetime] = datetime.now,
        hour: Optional[int] = None,
        minute: Optional[int] = None,
    ):
        settings = get_settings()
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.session_factory = session_factory
        self.clock = clock
        self.hour = settings.reminder_hour if hour is None else hour
        self.minute = settings.reminder_minute if minute is None else minute
        self._lock = threading.Lock()
        self._scheduler: Optional[BackgroundScheduler] = None

    # ---- scan ----

    def scan(self) -> ScanReport:
        """전체 task를 한 번 훑는다. 이미 다른 스캔이 돌고 있으면 바로 반환."""
        if not self._lock.acquire(blocking=False):
            logger.info("reminder scan already running, skipping this tick")
            return ScanReport(busy=True)
        try:
            return self._scan_locked()
        finally:
            self._lock.release()

    def _scan_locked(self) -> ScanReport:
        report = ScanReport()
        now = self.clock()
        today = now.date()

        with self.session_factory() as session:
            store = RecordStore(session)
            try:
                tasks = list(store.iter_tasks())
            except StorageError:
                logger.error("reminder scan aborted: could not read tasks")
                return report

            report.scanned = len(tasks)
            for task in tasks:
                try:
                    if not is_reminder_due(task, today):
                        continue
                except Exception:
                    # 스캔 도중 삭제된 행 등
                    logger.exception("could not evaluate task during reminder scan")
                    report.failed += 1
                    continue
                report.due += 1
                self._remind(store, task, now, report)

        logger.info(
            "reminder scan done scanned=%s due=%s delivered=%s skipped=%s failed=%s",
            report.scanned,
            report.due,
            report.delivered,
            report.skipped,
            report.failed,
        )
        return report

    def _remind(self, store: RecordStore, task: Task, now: datetime, report: ScanReport) -> None:
        try:
            result = self.dispatcher.send(task, task.notification_email)
        except Exception:
            logger.exception("dispatcher crashed task=%s", task.id)
            report.failed += 1
            return

        if result is DispatchResult.DELIVERED:
            task.last_reminded_at = now
            try:
                store.save(task)
            except AppError:
                # 메일은 나갔지만 기록 실패 → 다음 스캔에서 다시 보낼 수 있음
                logger.error("could not persist last_reminded_at task=%s", task.id)
                report.failed += 1
                return
            report.delivered += 1
        elif result is DispatchResult.SKIPPED:
            report.skipped += 1
        else:
            report.failed += 1

    # ---- background timer ----

    def _tick(self) -> None:
        try:
            self.scan()
        except Exception:
            logger.exception("reminder tick failed")

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            return
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            self._tick,
            trigger=CronTrigger(hour=self.hour, minute=self.minute),
            id=DAILY_JOB_ID,
            name="Check due tasks and send reminders",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        # 시작 직후 1회
        scheduler.add_job(
            self._tick,
            trigger="date",
            id=STARTUP_JOB_ID,
            name="Startup reminder scan",
            max_instances=1,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("reminder scheduler started, daily at %02d:%02d", self.hour, self.minute)

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("reminder scheduler stopped")


_reminder_scheduler: Optional[ReminderScheduler] = None


def get_reminder_scheduler() -> ReminderScheduler:
    global _reminder_scheduler
    if _reminder_scheduler is None:
        _reminder_scheduler = ReminderScheduler()
    return _reminder_scheduler
