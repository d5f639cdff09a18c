from __future__ import annotations

from fastapi import Request

from smsgate.sms.service import SmsService


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_sms_service(request: Request) -> SmsService:
    return request.app.state.sms_service
