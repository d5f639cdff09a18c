from __future__ import annotations

from fastapi import APIRouter, Depends

from smsgate.api.deps import get_sms_service
from smsgate.core.security import require_admin_token
from smsgate.schemas.sms_v1 import SendSmsRequest
from smsgate.sms.service import SmsService

router = APIRouter(dependencies=[Depends(require_admin_token)])


@router.post("/send")
def send_sms(payload: SendSmsRequest, sms_service: SmsService = Depends(get_sms_service)) -> dict:
    segments = sms_service.send_batch(payload.numbers_to, payload.message)
    return {"ok": True, "segments": segments}
