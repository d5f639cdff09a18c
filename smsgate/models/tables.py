from __future__ import annotations

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from smsgate.models.base import Base

# Use JSONB on Postgres, fallback to JSON for SQLite/test environments.
JSONType = JSON().with_variant(JSONB, "postgresql")

# Root tenant: settings stored under it apply system-wide.
SYSTEM_TENANT_ID = "13814000-1dd2-11b2-8080-808080808080"


class AdminSettings(Base):
    __tablename__ = "admin_settings"
    __table_args__ = (UniqueConstraint("tenant_id", "key", name="ux_admin_settings_tenant_key"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False, default=SYSTEM_TENANT_ID)
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    json_value: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), nullable=False)
