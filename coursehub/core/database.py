import json
import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, Text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)

Base = declarative_base()


class JSONEncodedList(TypeDecorator):
    """
    Stores a Python list as JSON text.
    Serialization happens only here, so models and services always see lists.
    """
    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return json.dumps(list(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        try:
            decoded = json.loads(value)
        except (TypeError, ValueError):
            logger.error(f"Stored list column is not valid JSON: {value!r}")
            return []
        return decoded if isinstance(decoded, list) else []


def build_engine(database_url: str) -> Engine:
    """
    Creates the engine for the configured database.
    In-memory SQLite gets a StaticPool so every session shares one connection.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_db_and_tables(engine: Engine) -> None:
    # Models must be imported so they are registered with Base.metadata
    from coursehub import models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """
    Dependency to get a database session from the app's session factory.
    Ensures the session is always closed after the request.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
