import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies.auth import get_current_user
from app.schemas.notification import ScanReportRead, SendTestEmailRequest
from app.services.credentials import Identity
from app.services.notifier import DispatchResult, NotificationDispatcher, make_test_task
from app.services.reminder_scheduler import ReminderScheduler, get_reminder_scheduler
from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notifications"])


def get_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher()


@router.post("/send-test-email")
def send_test_email(
    body: SendTestEmailRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    email = (body.email or "").strip()
    if not email:
        raise ValidationError("Email is required")

    result = dispatcher.send(make_test_task(), email)
    if result is DispatchResult.DELIVERED:
        return {"message": "Test email sent successfully"}

    logger.warning("test email not delivered result=%s", result.value)
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to send test email. Check email configuration."},
    )


# 수동 스캔 (스케줄 시각을 기다리지 않고 바로)
@router.post("/reminders/scan", response_model=ScanReportRead)
def run_reminder_scan(
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
    user: Identity = Depends(get_current_user),
):
    logger.info("manual reminder scan requested by %s", user.user_id)
    return scheduler.scan().as_dict()
