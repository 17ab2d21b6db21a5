# app/schemas/notification.py
from pydantic import BaseModel
from typing import Optional


class SendTestEmailRequest(BaseModel):
    email: Optional[str] = None


class ScanReportRead(BaseModel):
    scanned: int
    due: int
    delivered: int
    skipped: int
    failed: int
    busy: bool
