"""Engine and session factory for the relational store (Supabase Postgres in production)."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from aura_api.core.config import get_settings

Base = declarative_base()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # sync handlers run in the threadpool, so connections cross threads
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 5}


@lru_cache
def get_engine() -> Engine:
    url = get_settings().database_url
    if not url:
        raise RuntimeError("DATABASE_URL is not set; the profile store cannot be reached.")
    return create_engine(url, future=True, **_engine_options(url))


@lru_cache
def _get_sessionmaker() -> sessionmaker:
    # repository methods hand ORM rows back after the session is closed
    return sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False, future=True)


@contextmanager
def get_session() -> Iterator[Session]:
    """Session that is always closed; uncommitted work is rolled back on close."""
    session = _get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()
