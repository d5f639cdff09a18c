from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def make_session_factory(database_url: str) -> sessionmaker[Session]:
    """Engine + session factory for the admin-settings store.

    Sync routes and the SMS service read settings from worker threads, so
    SQLite connections may cross threads. An in-memory database exists only
    on its one connection and is pinned with StaticPool.
    """

    options: dict = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url.rstrip("/").endswith(":"):
            options["poolclass"] = StaticPool

    engine = create_engine(database_url, **options)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)
