"""Document store: named JSON collections over a key-value substrate.

Each collection is one JSON document persisted under a fixed key. The store
owns serialization and the fallback-on-corruption behaviour; it enforces no
schema. Reads of missing or unreadable documents fall back to the caller's
default, writes report failures through :class:`WriteResult` instead of
raising.
"""

import json
import logging
import threading
from enum import Enum
from typing import Any, Iterable, Mapping

from sqlalchemy import Engine, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from clinicdesk.core.config import settings
from clinicdesk.db.init_db import init_db
from clinicdesk.db.session import build_engine, build_session_factory
from clinicdesk.models.document import Document
from clinicdesk.services.results import WriteResult

logger = logging.getLogger(__name__)


class Collection(str, Enum):
    """Persisted collection keys."""

    PATIENTS = "patients"
    MEDICAL_RECORDS = "medical_records"
    APPOINTMENTS = "appointments"


def _key(collection: str | Collection) -> str:
    if isinstance(collection, Collection):
        return collection.value
    return collection


class DocumentStore:
    """Explicit store handle shared by every repository.

    Construct once per process (or per test) and pass it around; there is no
    module-level instance.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        max_document_bytes: int | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.max_document_bytes = (
            max_document_bytes
            if max_document_bytes is not None
            else settings.max_document_bytes
        )
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def from_engine(cls, engine: Engine, **kwargs: Any) -> "DocumentStore":
        """Build a store over an engine whose tables already exist."""
        return cls(build_session_factory(engine), **kwargs)

    @classmethod
    def from_url(cls, database_url: str | None = None, **kwargs: Any) -> "DocumentStore":
        """Build a store for ``database_url``, creating the table if needed."""
        engine = build_engine(database_url)
        init_db(engine)
        return cls.from_engine(engine, **kwargs)

    # ------------------------------------------------------------------
    # Read / write
    # ------------------------------------------------------------------

    def read(self, collection: str | Collection, default: Any = None) -> Any:
        """Return the deserialized document, or ``default``.

        Missing documents return ``default`` silently. Documents that cannot
        be read or parsed return ``default`` and log a diagnostic.
        """
        key = _key(collection)
        try:
            with self._session_factory() as session:
                document = session.get(Document, key)
                body = document.body if document is not None else None
        except SQLAlchemyError:
            logger.error(
                f"Could not read collection {key}, using default",
                exc_info=True,
                extra={"collection": key},
            )
            return default

        if body is None:
            return default

        try:
            return json.loads(body)
        except ValueError as exc:
            logger.warning(
                f"Corrupt document in collection {key}, using default: {exc}",
                extra={"collection": key},
            )
            return default

    def write(self, collection: str | Collection, value: Any) -> WriteResult:
        """Serialize ``value`` and persist it under ``collection``.

        The write is atomic for this collection only.
        """
        return self.write_many({_key(collection): value})

    def write_many(self, documents: Mapping[str | Collection, Any]) -> WriteResult:
        """Persist several collections in one transaction.

        Every value is serialized and checked against the quota before the
        transaction starts, so a failure leaves all collections untouched.
        """
        bodies: dict[str, str] = {}
        for collection, value in documents.items():
            key = _key(collection)
            try:
                body = json.dumps(value, ensure_ascii=False)
            except (TypeError, ValueError) as exc:
                return self._failed(key, f"Could not serialize collection {key}: {exc}")

            size = len(body.encode("utf-8"))
            if size > self.max_document_bytes:
                return self._failed(
                    key,
                    f"Storage quota exceeded for collection {key}: "
                    f"{size} bytes > {self.max_document_bytes} bytes",
                )
            bodies[key] = body

        try:
            with self._session_factory.begin() as session:
                for key, body in bodies.items():
                    document = session.get(Document, key)
                    if document is None:
                        session.add(Document(key=key, body=body))
                    else:
                        document.body = body
        except SQLAlchemyError as exc:
            return self._failed(", ".join(bodies), f"Could not write {', '.join(bodies)}: {exc}")

        return WriteResult.success()

    def remove(self, collection: str | Collection) -> WriteResult:
        """Drop one collection; later reads return their default."""
        return self.clear([collection])

    def clear(self, collections: Iterable[str | Collection] | None = None) -> WriteResult:
        """Drop the given collections (all known collections by default)."""
        keys = [_key(c) for c in (collections if collections is not None else Collection)]
        try:
            with self._session_factory.begin() as session:
                session.execute(delete(Document).where(Document.key.in_(keys)))
        except SQLAlchemyError as exc:
            return self._failed(", ".join(keys), f"Could not clear {', '.join(keys)}: {exc}")

        logger.info(f"Cleared collections: {', '.join(keys)}")
        return WriteResult.success()

    def lock(self, collection: str | Collection) -> threading.RLock:
        """Per-collection lock to hold across a read-modify-write cycle."""
        key = _key(collection)
        with self._locks_guard:
            return self._locks.setdefault(key, threading.RLock())

    @staticmethod
    def _failed(key: str, message: str) -> WriteResult:
        logger.error(message, extra={"collection": key})
        return WriteResult.failure(message)
