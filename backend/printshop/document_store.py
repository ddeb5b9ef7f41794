# Overview: Document store over SQLAlchemy with per-collection change subscriptions.

"""
Document store.

Every engine in the shop (pricing, orders, settlement, reporting) works on
snapshots and never owns persistence. This module is the one place that
talks to the database:

- collections: orders, products, expenses, users (+ the store_settings singleton)
- reads return immutable records (see records.py), never ORM rows
- writes are committed immediately; any database failure is rolled back and
  surfaced as StoreError so the caller can keep its draft and retry
- subscribe() pushes the full current snapshot to the callback right away and
  again after every committed change to that collection

DELIVERY: notifications are synchronous and in-process, delivered after the
commit, at least once per change. There is no cross-collection ordering: a
subscriber to orders and products may see the two refresh in either order.

CONCURRENCY: last-write-wins unless the caller passes expected_version, in
which case a stale version raises ConflictError instead of overwriting.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import defaultdict
from typing import Any, Callable

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from .models import Account, Expense, Order, Product, StoreSettings
from .records import StoreSettingsRecord
from .validation import ConflictError, ValidationError


logger = logging.getLogger(__name__)


COLLECTIONS = {
    "orders": Order,
    "products": Product,
    "expenses": Expense,
    "users": Account,
}
STORE_SETTINGS = "store_settings"
STORE_SETTINGS_ID = "main"

# Managed by the store itself, never writable through create/update
_RESERVED_FIELDS = {"id", "version"}

# Lock timeouts and unconditional version races are retried with backoff
WRITE_ATTEMPTS = 3
WRITE_BACKOFF_BASE = 0.1


class StoreError(Exception):
    """Database unreachable or write rejected. The operation may be retried."""


class DuplicateDocumentError(StoreError):
    """A document with the same id (or unique key) already exists."""


class Subscription:
    """Handle returned by DocumentStore.subscribe()."""

    def __init__(self, store: "DocumentStore", name: str, callback: Callable[[Any], None]):
        self._store = store
        self.name = name
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self._store._unsubscribe(self)
            self.active = False


class DocumentStore:
    def __init__(self, db):
        self._db = db
        self._subscribers: dict[str, list[Subscription]] = defaultdict(list)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, name: str, callback: Callable[[Any], None]) -> Subscription:
        """
        Push the current snapshot of `name` to callback now and after every
        committed change. For store_settings the snapshot is a single record
        (or None), otherwise a list of records.
        """
        if name != STORE_SETTINGS:
            self._model(name)
        subscription = Subscription(self, name, callback)
        callback(self._snapshot(name))
        self._subscribers[name].append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscribers.get(subscription.name, [])
        if subscription in subscribers:
            subscribers.remove(subscription)

    def _snapshot(self, name: str):
        if name == STORE_SETTINGS:
            return self.get_settings()
        return self.read_all(name)

    def _notify(self, name: str) -> None:
        subscribers = list(self._subscribers.get(name, ()))
        if not subscribers:
            return
        snapshot = self._snapshot(name)
        for subscription in subscribers:
            # The write is already committed; a broken subscriber must not
            # turn it into a reported failure or starve the others.
            try:
                subscription.callback(snapshot)
            except Exception:
                logger.exception("Subscriber to %s failed", name)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _model(self, collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValidationError(f"Unknown collection: {collection}")

    def _check_fields(self, model, fields: dict) -> None:
        allowed = {c.key for c in model.__mapper__.columns} | getattr(model, "DOCUMENT_FIELDS", set())
        for key in fields:
            if key in _RESERVED_FIELDS or key not in allowed:
                raise ValidationError(f"Field not allowed: {key}")

    def _read(self, func):
        session = self._db.session
        try:
            return func(session)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning("Document store read failed: %s", exc)
            raise StoreError("Document store unavailable, please retry") from exc

    def _write(self, func, *, conditional: bool = False):
        """
        Run func(session) and commit, retrying lock timeouts with exponential
        backoff.

        StaleDataError means another writer bumped the version between load
        and flush. Unconditional writes retry (last-write-wins); conditional
        writes report ConflictError instead of overwriting the newer version.
        """
        session = self._db.session
        last_exc = None

        for attempt in range(WRITE_ATTEMPTS):
            try:
                result = func(session)
                session.commit()
                return result
            except StaleDataError as exc:
                session.rollback()
                if conditional:
                    raise ConflictError("Document was changed by someone else, reload and retry") from exc
                last_exc = exc
            except OperationalError as exc:
                session.rollback()
                last_exc = exc
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateDocumentError("Document already exists") from exc
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Document store write failed")
                raise StoreError("Could not save changes, please retry") from exc
            except Exception:
                session.rollback()
                raise

            if attempt < WRITE_ATTEMPTS - 1:
                logger.warning("Document store write attempt %d failed, retrying: %s", attempt + 1, last_exc)
                time.sleep(WRITE_BACKOFF_BASE * (2 ** attempt))

        logger.error("Document store write failed after %d attempts: %s", WRITE_ATTEMPTS, last_exc)
        raise StoreError("Could not save changes, please retry") from last_exc

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def read_all(self, collection: str) -> list:
        model = self._model(collection)
        rows = self._read(lambda s: s.query(model).order_by(model.created_at.asc(), model.id.asc()).all())
        return [row.to_record() for row in rows]

    def get(self, collection: str, doc_id: str):
        model = self._model(collection)
        row = self._read(lambda s: s.get(model, doc_id))
        return row.to_record() if row is not None else None

    def find_one(self, collection: str, **filters):
        model = self._model(collection)
        self._check_fields(model, {k: None for k in filters if k != "id"})
        row = self._read(lambda s: s.query(model).filter_by(**filters).first())
        return row.to_record() if row is not None else None

    def create(self, collection: str, fields: dict, doc_id: str | None = None) -> str:
        """Insert a document and return its id (generated when not given)."""
        model = self._model(collection)
        self._check_fields(model, fields)
        new_id = doc_id or uuid.uuid4().hex

        def _op(session):
            session.add(model(id=new_id, **fields))
            session.flush()
            return new_id

        created = self._write(_op)
        self._notify(collection)
        return created

    def update(self, collection: str, doc_id: str, fields: dict, expected_version: int | None = None):
        """
        Apply a partial update. Returns the updated record, or None when the
        document no longer exists.
        """
        model = self._model(collection)
        self._check_fields(model, fields)

        def _op(session):
            # SELECT ... FOR UPDATE; SQLite ignores the lock
            row = session.query(model).filter_by(id=doc_id).with_for_update().first()
            if row is None:
                return None
            if expected_version is not None and row.version != expected_version:
                raise ConflictError(
                    f"{collection} {doc_id} was changed by someone else "
                    f"(version {row.version}, expected {expected_version})"
                )
            for key, value in fields.items():
                setattr(row, key, value)
            session.flush()
            return row

        row = self._write(_op, conditional=expected_version is not None)
        if row is None:
            return None
        record = row.to_record()
        self._notify(collection)
        return record

    def delete(self, collection: str, doc_id: str) -> bool:
        model = self._model(collection)

        def _op(session):
            row = session.get(model, doc_id)
            if row is None:
                return False
            session.delete(row)
            return True

        deleted = self._write(_op)
        if deleted:
            self._notify(collection)
        return deleted

    # ------------------------------------------------------------------
    # Store settings singleton
    # ------------------------------------------------------------------

    def get_settings(self) -> StoreSettingsRecord | None:
        row = self._read(lambda s: s.get(StoreSettings, STORE_SETTINGS_ID))
        return row.to_record() if row is not None else None

    def upsert_settings(self, fields: dict, merge: bool = True) -> StoreSettingsRecord:
        """
        Write the settings singleton. merge=True keeps fields that are not
        given; merge=False clears them.
        """
        self._check_fields(StoreSettings, fields)

        def _op(session):
            row = session.get(StoreSettings, STORE_SETTINGS_ID)
            if row is None:
                row = StoreSettings(id=STORE_SETTINGS_ID)
                session.add(row)
            if not merge:
                for column in StoreSettings.__mapper__.columns:
                    if column.key not in _RESERVED_FIELDS:
                        setattr(row, column.key, None)
            for key, value in fields.items():
                setattr(row, key, value)
            session.flush()
            return row

        row = self._write(_op)
        record = row.to_record()
        self._notify(STORE_SETTINGS)
        return record
