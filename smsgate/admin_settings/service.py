from __future__ import annotations

from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from smsgate.models.tables import SYSTEM_TENANT_ID, AdminSettings
from smsgate.util.ids import new_uuid
from smsgate.util.time import now_utc


def find_admin_settings_by_key(db: Session, *, tenant_id: str = SYSTEM_TENANT_ID, key: str) -> AdminSettings | None:
    return (
        db.query(AdminSettings)
        .filter(AdminSettings.tenant_id == tenant_id, AdminSettings.key == key)
        .one_or_none()
    )


def save_admin_settings(
    db: Session, *, tenant_id: str = SYSTEM_TENANT_ID, key: str, json_value: dict
) -> AdminSettings:
    """Create-or-update settings by (tenant_id, key). Commits."""

    now = now_utc()
    existing = find_admin_settings_by_key(db, tenant_id=tenant_id, key=key)
    if existing:
        existing.json_value = dict(json_value)
        existing.updated_at = now
        db.commit()
        return existing

    row = AdminSettings(
        id=new_uuid(),
        tenant_id=tenant_id,
        key=key,
        json_value=dict(json_value),
        created_at=now,
        updated_at=now,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Another request created the same key concurrently; last write wins.
        existing = find_admin_settings_by_key(db, tenant_id=tenant_id, key=key)
        if not existing:
            raise
        existing.json_value = dict(json_value)
        existing.updated_at = now
        db.commit()
        return existing
    return row


class AdminSettingsStore:
    """Read-only view of admin settings for long-lived services.

    Opens a short session per lookup so callers never hold a connection.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def find_by_key(self, tenant_id: str, key: str) -> dict | None:
        with self._session_factory() as db:
            row = find_admin_settings_by_key(db, tenant_id=tenant_id, key=key)
            if row is None:
                return None
            return dict(row.json_value or {})
