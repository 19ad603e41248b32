"""SQLAlchemy database models for the local document store."""
import datetime
from typing import Optional

from sqlalchemy import (JSON, Column, DateTime, Integer, String, UniqueConstraint,
                        create_engine, event)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from notekeeper.config import config

Base = declarative_base()


class DBDocument(Base):
    """One record of a collection, stored as a JSON field map."""
    __tablename__ = "documents"
    # Insertion order is the store order reported by list()
    seq = Column(Integer, primary_key=True, autoincrement=True)
    collection = Column(String(255), nullable=False, index=True)
    doc_id = Column(String(255), nullable=False, index=True)
    fields = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.datetime.now, nullable=False)

    __table_args__ = (
        UniqueConstraint("collection", "doc_id", name="unique_collection_doc"),
    )

    def __repr__(self) -> str:
        return f"<Document(collection='{self.collection}', id='{self.doc_id}')>"


def init_db(db_url: Optional[str] = None) -> Engine:
    """Create the engine and schema for the local document store.

    Uses WAL journaling and NORMAL synchronous mode on every connection.
    """
    engine = create_engine(db_url or config.get_db_url(), pool_pre_ping=True)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Optional[Engine] = None):
    """Get a session factory for the database."""
    if engine is None:
        engine = init_db()
    return sessionmaker(bind=engine)
