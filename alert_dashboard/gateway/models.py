"""Database models for durable storage."""
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StorageEntry(Base):
    """One durable key and its JSON-encoded value."""
    __tablename__ = "storage_entries"

    key = Column(String(320), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
