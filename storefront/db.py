"""The persistent local store.

One in-memory SQLite database per application run. Its full image is written
to a single local storage key (a JSON array of byte values) after every
statement and every ORM commit, and read back from that key on the next run.
"""
import json
import logging
import sqlite3
from typing import Any, List, Mapping, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .errors import QueryFailure, StoreUninitialized
from .storage import LocalStorage

logger = logging.getLogger(__name__)

Base = declarative_base()


class LocalStore:
    def __init__(self, storage: LocalStorage, key: str = "3d-store-db", bcrypt_rounds: int = 10):
        self.storage = storage
        self.key = key
        self.bcrypt_rounds = bcrypt_rounds
        self.engine = None
        self.SessionLocal = None
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def ready(self) -> bool:
        return self.engine is not None

    def initialize(self) -> bool:
        """Open the store, rehydrating the saved image or seeding a fresh one.

        Returns False when initialization failed; the error is logged and the
        store stays unready, so reads come back empty and writes are dropped.
        """
        if self.ready:
            return True
        # models must be imported so Base.metadata knows every table
        from . import models, seed  # noqa: F401

        try:
            saved = self.storage.get_item(self.key)
            image = bytes(json.loads(saved)) if saved else None
            # owned from here on so close() releases it on any failure below
            self._conn = sqlite3.connect(":memory:", check_same_thread=False)
            if image:
                self._conn.deserialize(image)
                self._bind(self._conn)
                Base.metadata.create_all(bind=self.engine)
                logger.info("Loaded database snapshot from %r", self.key)
            else:
                self._bind(self._conn)
                Base.metadata.create_all(bind=self.engine)
                with self.SessionLocal() as db:
                    seed.seed_database(db, rounds=self.bcrypt_rounds)
                    db.commit()
                logger.info("Created and seeded a new database under %r", self.key)
        except Exception:
            logger.exception("Error initializing database")
            self.close()
            return False
        return True

    def _bind(self, conn: sqlite3.Connection):
        self._conn = conn
        self.engine = create_engine(
            "sqlite://",
            creator=lambda: conn,
            poolclass=StaticPool,
            future=True,
        )
        self.SessionLocal = sessionmaker(
            autoflush=False, bind=self.engine, expire_on_commit=False, future=True
        )

        @event.listens_for(self.SessionLocal, "after_commit")
        def persist_after_commit(session):
            self.persist()

    def session(self) -> Session:
        if not self.ready:
            raise StoreUninitialized()
        return self.SessionLocal()

    def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[tuple]:
        """Run one parameterized statement and persist, whatever the outcome.

        Returns the result rows as tuples, or an empty list when the store is
        not ready or the statement failed.
        """
        if not self.ready:
            logger.warning("%s, dropping query", StoreUninitialized.message)
            return []
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(query), dict(params or {}))
                rows = [tuple(row) for row in result] if result.returns_rows else []
            return rows
        except SQLAlchemyError as e:
            logger.error("%s: %s", QueryFailure.message, e)
            return []
        finally:
            self.persist()

    def snapshot(self) -> bytes:
        if self._conn is None:
            raise StoreUninitialized()
        return self._conn.serialize()

    def persist(self) -> bool:
        if self._conn is None:
            return False
        try:
            data = self._conn.serialize()
            self.storage.set_item(self.key, json.dumps(list(data)))
        except (sqlite3.Error, OSError):
            logger.exception("Error saving database")
            return False
        return True

    def close(self):
        if self.engine is not None:
            self.engine.dispose()
        if self._conn is not None:
            self._conn.close()
        self.engine = None
        self.SessionLocal = None
        self._conn = None
