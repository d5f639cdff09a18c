from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from smsgate.admin_settings.service import find_admin_settings_by_key, save_admin_settings
from smsgate.api.deps import get_db, get_sms_service
from smsgate.core.config import settings
from smsgate.core.security import require_admin_token
from smsgate.models.tables import AdminSettings
from smsgate.schemas.sms_v1 import AdminSettingsIn, TestSmsRequest
from smsgate.sms.service import SmsService

router = APIRouter(dependencies=[Depends(require_admin_token)])


def _settings_out(row: AdminSettings) -> dict:
    return {
        "id": row.id,
        "key": row.key,
        "jsonValue": row.json_value,
        "createdAt": row.created_at,
        "updatedAt": row.updated_at,
    }


@router.get("/settings/{key}")
def get_admin_settings(key: str, db: Session = Depends(get_db)) -> dict:
    row = find_admin_settings_by_key(db, key=key)
    if not row:
        raise HTTPException(status_code=404, detail=f"No admin settings for key={key}")
    return _settings_out(row)


@router.post("/settings")
def save_settings(
    payload: AdminSettingsIn,
    db: Session = Depends(get_db),
    sms_service: SmsService = Depends(get_sms_service),
) -> dict:
    row = save_admin_settings(db, key=payload.key, json_value=payload.json_value)
    out = _settings_out(row)
    if payload.key == settings.SMS_SETTINGS_KEY:
        # A rejected configuration is stored but leaves the previous sender active.
        out["smsConfigurationApplied"] = sms_service.refresh_configuration()
    return out


@router.post("/settings/testSms")
def send_test_sms(payload: TestSmsRequest, sms_service: SmsService = Depends(get_sms_service)) -> dict:
    segments = sms_service.send_test(payload)
    return {"ok": True, "segments": segments}
