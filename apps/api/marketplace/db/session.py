# marketplace/db/session.py
from __future__ import annotations

import os
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from marketplace.core.config import settings


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite は接続ごとに foreign_keys を ON にしないと CASCADE が効かない"""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _engine() -> Engine:
    url = settings.DATABASE_URL
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI はスレッドプールで同期エンドポイントを回すため
        connect_args["check_same_thread"] = False
        # ファイルDBなら保存先ディレクトリを用意しておく
        database = make_url(url).database
        if database and database != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(database)), exist_ok=True)

    # pool_pre_ping: avoid stale connections (useful for Postgres)
    engine = create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
    enable_sqlite_foreign_keys(engine)
    return engine


engine = _engine()

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


# FastAPI Dependency
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
