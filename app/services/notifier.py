# app/services/notifier.py
from __future__ import annotations

"""
리마인더 메일 발송.

- 메시지 구성(제목/텍스트/HTML)은 여기서,
- 실제 전송은 transport(SMTP)에 맡긴다.
- 발송 실패는 예외로 올리지 않고 DispatchResult.FAILED로 돌려준다.
"""

import html
import logging
import smtplib
from datetime import date, datetime
from email.message import EmailMessage
from enum import Enum
from typing import Optional, Protocol

from app.core.config import Settings, get_settings
from app.core.errors import TransportError
from app.models.task import Task

logger = logging.getLogger(__name__)

# EMAIL_SERVICE → (host, port). 모두 STARTTLS
SMTP_PROVIDERS: dict[str, tuple[str, int]] = {
    "gmail": ("smtp.gmail.com", 587),
    "outlook": ("smtp-mail.outlook.com", 587),
    "hotmail": ("smtp-mail.outlook.com", 587),
    "yahoo": ("smtp.mail.yahoo.com", 587),
    "icloud": ("smtp.mail.me.com", 587),
    "zoho": ("smtp.zoho.com", 587),
    "sendgrid": ("smtp.sendgrid.net", 587),
    "mailgun": ("smtp.mailgun.org", 587),
}


class DispatchResult(str, Enum):
    DELIVERED = "delivered"
    SKIPPED = "skipped"
    FAILED = "failed"


class MailTransport(Protocol):
    def send(self, message: EmailMessage) -> None: ...


class SmtpTransport:
    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpTransport":
        host, port = SMTP_PROVIDERS.get(settings.email_service, SMTP_PROVIDERS["gmail"])
        if settings.email_service not in SMTP_PROVIDERS and not settings.smtp_host:
            logger.warning("unknown EMAIL_SERVICE=%s, falling back to gmail", settings.email_service)
        return cls(
            host=settings.smtp_host or host,
            port=settings.smtp_port or port,
            username=settings.email_user,
            password=settings.email_pass,
            timeout=settings.smtp_timeout,
        )

    def send(self, message: EmailMessage) -> None:
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise TransportError(f"SMTP send via {self.host}:{self.port} failed: {e}") from e


def format_due_date(due: Optional[date]) -> str:
    if due is None:
        return "No due date"
    # 예: Monday, October 19, 2026
    return f"{due.strftime('%A')}, {due.strftime('%B')} {due.day}, {due.year}"


def build_reminder_message(task: Task, recipient: str, sender: str) -> EmailMessage:
    due_text = format_due_date(task.due_date)
    status = "Completed" if task.completed else "Pending"

    msg = EmailMessage()
    # 헤더에는 줄바꿈이 들어갈 수 없다
    subject_text = " ".join(task.text.split())
    msg["Subject"] = f"⏰ Reminder: Task Due Today - {subject_text}"
    msg["From"] = sender
    msg["To"] = recipient
    msg.set_content(
        "Task Reminder\n"
        "\n"
        "You have a task that is due today:\n"
        "\n"
        f"Task: {task.text}\n"
        f"Due Date: {due_text}\n"
        f"Status: {status}\n"
        "\n"
        "Don't forget to complete your task!\n"
    )

    status_color = "#10b981" if task.completed else "#ef4444"
    status_label = "Completed ✓" if task.completed else "Pending"
    msg.add_alternative(
        f"""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #6366f1;">Task Reminder</h2>
  <p>You have a task that is due today:</p>
  <div style="background: #f8fafc; padding: 20px; border-radius: 8px; margin: 20px 0;">
    <h3 style="margin-top: 0;">{html.escape(task.text)}</h3>
    <p><strong>Due Date:</strong> {html.escape(due_text)}</p>
    <p style="color: {status_color};"><strong>Status: {status_label}</strong></p>
  </div>
  <p>Don't forget to complete your task!</p>
  <p style="color: #64748b; font-size: 12px; margin-top: 30px;">
    This is an automated reminder from your Smart Todo App.
  </p>
</div>
""",
        subtype="html",
    )
    return msg


class NotificationDispatcher:
    def __init__(
        self,
        transport: Optional[MailTransport] = None,
        *,
        sender: Optional[str] = None,
        configured: Optional[bool] = None,
    ):
        settings = get_settings()
        self.transport = transport or SmtpTransport.from_settings(settings)
        self.sender = sender or settings.email_from
        self.configured = settings.email_configured if configured is None else configured

    def send(self, task: Task, recipient_email: Optional[str]) -> DispatchResult:
        recipient = (recipient_email or "").strip()
        if not recipient:
            logger.info("no recipient for task=%s, skipping reminder", task.id)
            return DispatchResult.SKIPPED
        if not self.configured:
            logger.info(
                "email credentials not configured (set EMAIL_USER / EMAIL_PASS), skipping task=%s",
                task.id,
            )
            return DispatchResult.SKIPPED

        try:
            message = build_reminder_message(task, recipient, self.sender)
        except (ValueError, TypeError):
            logger.exception("could not build reminder task=%s to=%s", task.id, recipient)
            return DispatchResult.FAILED

        try:
            self.transport.send(message)
        except TransportError:
            logger.exception("reminder send failed task=%s to=%s", task.id, recipient)
            return DispatchResult.FAILED

        logger.info("reminder sent task=%s to=%s", task.id, recipient)
        return DispatchResult.DELIVERED


def make_test_task() -> Task:
    """/api/send-test-email 용 (DB에 저장하지 않음)"""
    return Task(
        owner_id=None,
        text="Test Reminder",
        completed=False,
        due_date=datetime.now().date(),
    )
