from __future__ import annotations

import os

import pytest

# Settings() is read once at import; make sure every test run sees the same minimal env.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ADMIN_TOKEN", "change-me-admin-token")


@pytest.fixture
def session_factory():
    """Fresh admin_settings schema on a private in-memory database."""

    from smsgate.core.db import make_session_factory
    from smsgate.models.base import Base

    factory = make_session_factory("sqlite+pysqlite:///:memory:")
    engine = factory.kw["bind"]
    Base.metadata.create_all(bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
