from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session, sessionmaker

from smsgate.admin_settings.service import AdminSettingsStore
from smsgate.api.routers.admin import router as admin_router
from smsgate.api.routers.sms import router as sms_router
from smsgate.core.config import settings
from smsgate.core.db import make_session_factory
from smsgate.core.logging import configure_logging
from smsgate.sms.errors import DispatchError, ErrorKind
from smsgate.sms.service import SmsService

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger("app")

_ERROR_STATUS = {
    ErrorKind.NOT_CONFIGURED: 503,
    ErrorKind.CONFIGURATION_INVALID: 400,
    ErrorKind.SEND_FAILURE: 502,
}


def _check_database(session_factory: sessionmaker[Session]) -> bool:
    try:
        with session_factory() as db:
            db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def create_app(
    sms_service: SmsService | None = None,
    session_factory: sessionmaker[Session] | None = None,
) -> FastAPI:
    if session_factory is None:
        session_factory = make_session_factory(settings.DATABASE_URL)
    if sms_service is None:
        sms_service = SmsService(
            settings_store=AdminSettingsStore(session_factory),
            settings_key=settings.SMS_SETTINGS_KEY,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.SMS_REFRESH_ON_STARTUP:
            # Reads the settings store; keep the blocking query off the event loop.
            await run_in_threadpool(sms_service.start)
        else:
            log.info("Startup: SMS_REFRESH_ON_STARTUP=false; skipping SMS configuration load")
        try:
            yield
        finally:
            await run_in_threadpool(sms_service.stop)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.sms_service = sms_service
    app.state.session_factory = session_factory

    @app.exception_handler(DispatchError)
    async def _dispatch_error(request: Request, exc: DispatchError) -> JSONResponse:
        status = _ERROR_STATUS.get(exc.kind, 500)
        return JSONResponse(
            status_code=status,
            content={"status": status, "message": exc.message, "errorCode": exc.kind.value},
        )

    @app.get("/health")
    def health() -> dict[str, Any]:
        deps = {"database": _check_database(session_factory)}
        return {
            "ok": all(deps.values()),
            "deps": deps,
            "sms": {"configured": sms_service.is_configured},
            "app": settings.APP_NAME,
        }

    app.include_router(admin_router, prefix="/admin", tags=["admin"])
    app.include_router(sms_router, prefix="/sms", tags=["sms"])
    return app


app = create_app()
