"""SQLite-backed document store for local development and tests."""

import datetime
import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from notekeeper.exceptions import ErrorCode, StoreError
from notekeeper.models.db_models import DBDocument, get_session_factory, init_db
from notekeeper.storage.base import DocumentStore, Record

logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):
    """Document store persisting records as JSON rows through SQLAlchemy."""

    supports_point_reads = True

    def __init__(self, engine: Optional[Engine] = None, db_url: Optional[str] = None):
        """Initialize the store.

        Args:
            engine: Pre-configured engine. Created from ``db_url`` (or the
                configured database path) when None.
            db_url: SQLAlchemy URL used only when ``engine`` is None.
        """
        self._owns_engine = engine is None
        self.engine = engine if engine is not None else init_db(db_url)
        self.session_factory = get_session_factory(self.engine)

    def list(self, collection: str) -> List[Record]:
        try:
            with self.session_factory() as session:
                rows = session.scalars(
                    select(DBDocument)
                    .where(DBDocument.collection == collection)
                    .order_by(DBDocument.seq)
                ).all()
                return [(row.doc_id, dict(row.fields or {})) for row in rows]
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to list {collection}: {e}",
                operation="list",
                code=ErrorCode.STORE_READ_FAILED,
                original_error=e,
            ) from e

    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        try:
            with self.session_factory() as session:
                row = self._find(session, collection, record_id)
                return dict(row.fields or {}) if row is not None else None
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to read {collection}/{record_id}: {e}",
                operation="get",
                record_id=record_id,
                code=ErrorCode.STORE_READ_FAILED,
                original_error=e,
            ) from e

    def upsert(
        self, collection: str, record_id: Optional[str], fields: Dict[str, Any]
    ) -> str:
        doc_id = record_id or uuid.uuid4().hex
        try:
            with self.session_factory() as session:
                row = self._find(session, collection, doc_id) if record_id else None
                if row is None:
                    row = DBDocument(collection=collection, doc_id=doc_id, fields=dict(fields))
                    session.add(row)
                else:
                    row.fields = dict(fields)
                    row.updated_at = datetime.datetime.now()
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to write {collection}/{doc_id}: {e}",
                operation="upsert",
                record_id=doc_id,
                code=ErrorCode.STORE_WRITE_FAILED,
                original_error=e,
            ) from e
        logger.debug(f"Upserted {collection}/{doc_id}")
        return doc_id

    def delete(self, collection: str, record_id: str) -> bool:
        try:
            with self.session_factory() as session:
                row = self._find(session, collection, record_id)
                if row is None:
                    return False
                session.delete(row)
                session.commit()
                return True
        except SQLAlchemyError as e:
            raise StoreError(
                f"Failed to delete {collection}/{record_id}: {e}",
                operation="delete",
                record_id=record_id,
                code=ErrorCode.STORE_DELETE_FAILED,
                original_error=e,
            ) from e

    def close(self) -> None:
        if self._owns_engine:
            self.engine.dispose()

    @staticmethod
    def _find(session, collection: str, record_id: str) -> Optional[DBDocument]:
        return session.scalars(
            select(DBDocument).where(
                DBDocument.collection == collection,
                DBDocument.doc_id == record_id,
            )
        ).first()
