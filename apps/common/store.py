""" Generic read/insert/update/delete access to the grant collections.

    Every SQLAlchemy failure is reported as a StoreError. Writes only
    flush; nothing is committed until the enclosing transaction() exits
    cleanly, and any exception inside it rolls back every write made
    since it was entered.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from main import db
from models.exc import RecordNotFound, StoreError

logger = logging.getLogger(__name__)


class Store:
    def __init__(self, db):
        self.db = db

    @property
    def session(self):
        return self.db.session

    def read(self, model, *filters, order_by=()):
        if not isinstance(order_by, (list, tuple)):
            order_by = (order_by,)
        query = select(model).where(*filters).order_by(*order_by)
        try:
            return list(self.session.scalars(query))
        except SQLAlchemyError as e:
            raise StoreError(f"Could not read {model.__name__}") from e

    def get(self, model, id):
        try:
            record = self.session.get(model, id)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not read {model.__name__} {id}") from e

        if record is None:
            raise RecordNotFound(model, id)
        return record

    def insert(self, record):
        self.session.add(record)
        self._flush(f"Could not insert {record.__class__.__name__}")
        return record

    def update(self, record, **patch):
        for key, value in patch.items():
            setattr(record, key, value)
        self._flush(f"Could not update {record!r}")
        return record

    def delete(self, model, *filters) -> int:
        try:
            result = self.session.execute(delete(model).where(*filters))
        except SQLAlchemyError as e:
            raise StoreError(f"Could not delete {model.__name__}") from e
        return result.rowcount

    def _flush(self, message):
        try:
            self.session.flush()
        except SQLAlchemyError as e:
            raise StoreError(message) from e

    @contextmanager
    def transaction(self):
        try:
            yield self
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Rolled back transaction after database error")
            raise StoreError("Transaction failed") from e
        except Exception:
            self.session.rollback()
            raise


store = Store(db)
