"""Database connection, session management and the durable key/value store."""
import json
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..shared.storage import KeyValueStore
from .models import Base, StorageEntry

logger = logging.getLogger(__name__)


def create_db_engine(url: str) -> Engine:
    """Create SQLAlchemy engine."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # Share one in-memory database across sessions
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def get_session_factory(engine: Engine) -> sessionmaker:
    """Create session factory."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine):
    """Initialize database tables."""
    Base.metadata.create_all(bind=engine)


class DurableStore(KeyValueStore):
    """Key/value store backed by the storage_entries table."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[Any]:
        session: Session = self.session_factory()
        try:
            entry = session.query(StorageEntry).filter(StorageEntry.key == key).first()
            if entry is None:
                return None
            try:
                return json.loads(entry.value)
            except json.JSONDecodeError:
                logger.warning(f"Discarding unreadable value stored under {key}")
                return None
        finally:
            session.close()

    def set(self, key: str, value: Any) -> None:
        session: Session = self.session_factory()
        try:
            entry = session.query(StorageEntry).filter(StorageEntry.key == key).first()
            encoded = json.dumps(value)
            if entry is None:
                session.add(StorageEntry(key=key, value=encoded))
            else:
                entry.value = encoded
                entry.updated_at = datetime.utcnow()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def remove(self, key: str) -> None:
        session: Session = self.session_factory()
        try:
            session.query(StorageEntry).filter(StorageEntry.key == key).delete()
            session.commit()
        finally:
            session.close()
