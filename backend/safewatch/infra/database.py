import os
from functools import lru_cache

from sqlalchemy import create_engine

from safewatch.infra.db.tables import metadata


@lru_cache(maxsize=1)
def get_engine():
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL environment variable is not set")
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    engine = create_engine(database_url, connect_args=connect_args, future=True)
    metadata.create_all(engine)
    return engine
