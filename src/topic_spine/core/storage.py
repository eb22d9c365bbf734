"""
Flat-file and in-memory record stores (SYNC-ONLY).

Both stores implement :class:`~topic_spine.core.protocols.RecordStore` and
share the same semantics; only where the collection lives differs.

Manifesto:
    The topic engine only needs atomic whole-collection reads and
    whole-collection rewrites.  Keeping the store that small means any
    backend that can load and save a list of records can host topics.

    - **Whole-collection writes:** every mutation rewrites the collection
    - **Atomic replace:** file writes go to a temp file, then ``os.replace``
    - **Storage order:** records keep insertion order; queries preserve it
    - **One instance per collection:** ``StoreRegistry`` hands out singletons

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                     _CollectionStore                       │
        │  _records: dict[id, T]   (insertion ordered)              │
        │  find_all / find_by_id / create / update / delete / query │
        │  _persist()  ← hook, no-op in memory                      │
        └───────────────────────────────────────────────────────────┘
                 │                                  │
        ┌────────▼─────────┐              ┌─────────▼──────────────┐
        │ MemoryStore      │              │ JsonFileStore          │
        │ (tests, embed)   │              │ <data_dir>/<name>.json │
        └──────────────────┘              └────────────────────────┘

Concurrency:
    A per-store ``threading.RLock`` serializes mutations within one
    process.  Nothing coordinates separate processes writing the same
    file; the last rewrite wins.

Examples:
    >>> store = JsonFileStore("topic", Path("data"), Topic.from_dict)
    >>> store.create(Topic.new("Physics", "Study of matter"))
    >>> [t.name for t in store.query(lambda t: t.parent_topic_id is None)]
    ['Physics']

Tags:
    storage, flat-file, json, repository, topic-spine
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generic, TypeVar

from topic_spine.core.errors import (
    CorruptStoreError,
    DuplicateRecordError,
    RecordIdMismatchError,
    StorageError,
)
from topic_spine.core.logging import get_logger
from topic_spine.core.protocols import Entity

T = TypeVar("T", bound=Entity)

Decoder = Callable[[dict[str, Any]], Any]

logger = get_logger(__name__)


class _CollectionStore(Generic[T]):
    """Shared record-store semantics over an ordered in-memory map."""

    def __init__(self, collection: str) -> None:
        self.collection = collection
        self._records: dict[str, T] = {}
        self._lock = threading.RLock()

    # -- hooks -------------------------------------------------------------

    def _ensure_loaded(self) -> None:
        """Populate ``_records`` before first use."""

    def _persist(self) -> None:
        """Write ``_records`` back to the backing medium."""

    # -- RecordStore -------------------------------------------------------

    def find_all(self) -> list[T]:
        with self._lock:
            self._ensure_loaded()
            return list(self._records.values())

    def find_by_id(self, record_id: str) -> T | None:
        with self._lock:
            self._ensure_loaded()
            return self._records.get(record_id)

    def create(self, record: T) -> T:
        with self._lock:
            self._ensure_loaded()
            if record.id in self._records:
                raise DuplicateRecordError(record.id, self.collection)
            self._records[record.id] = record
            self._persist_or_rollback(lambda: self._records.pop(record.id, None))
            return record

    def update(self, record_id: str, record: T) -> T | None:
        with self._lock:
            self._ensure_loaded()
            previous = self._records.get(record_id)
            if previous is None:
                return None
            if record.id != record_id:
                raise RecordIdMismatchError(record_id, record.id)
            self._records[record_id] = record
            self._persist_or_rollback(lambda: self._records.__setitem__(record_id, previous))
            return record

    def delete(self, record_id: str) -> bool:
        with self._lock:
            self._ensure_loaded()
            if record_id not in self._records:
                return False
            snapshot = dict(self._records)
            del self._records[record_id]
            self._persist_or_rollback(lambda: self._restore(snapshot))
            return True

    def query(self, predicate: Callable[[T], bool]) -> list[T]:
        with self._lock:
            self._ensure_loaded()
            return [record for record in self._records.values() if predicate(record)]

    def __len__(self) -> int:
        with self._lock:
            self._ensure_loaded()
            return len(self._records)

    # -- internals ---------------------------------------------------------

    def _restore(self, snapshot: dict[str, T]) -> None:
        self._records = snapshot

    def _persist_or_rollback(self, rollback: Callable[[], Any]) -> None:
        try:
            self._persist()
        except Exception:
            rollback()
            raise


class MemoryStore(_CollectionStore[T]):
    """Record store held entirely in memory."""

    def __init__(self, collection: str = "memory", records: list[T] | None = None) -> None:
        super().__init__(collection)
        for record in records or []:
            self._records[record.id] = record


class JsonFileStore(_CollectionStore[T]):
    """
    Record store backed by one JSON array file per collection.

    The file is ``<data_dir>/<collection lower-cased>.json``.  It is read on
    first use and created (as ``[]``) when missing; the directory is created
    as needed.

    Parameters:
        collection: Entity/collection name
        data_dir: Directory holding collection files
        decoder: Builds a record from one decoded JSON object
        indent: JSON indentation for written files (0 = compact)
    """

    def __init__(
        self,
        collection: str,
        data_dir: Path | str,
        decoder: Decoder,
        *,
        indent: int = 2,
    ) -> None:
        super().__init__(collection)
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / f"{collection.lower()}.json"
        self._decoder = decoder
        self._indent = indent or None
        self._loaded = False

    def reload(self) -> None:
        """Discard the in-memory copy; the next call re-reads the file."""
        with self._lock:
            self._records = {}
            self._loaded = False

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self._write([])
                logger.info("collection_created", collection=self.collection, path=str(self.path))
                self._loaded = True
                return
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(
                f"Failed to initialize database for {self.collection}", cause=e
            ).with_context(collection=self.collection, path=str(self.path)) from e

        self._records = self._decode(raw)
        self._loaded = True
        logger.debug(
            "collection_loaded",
            collection=self.collection,
            path=str(self.path),
            records=len(self._records),
        )

    def _decode(self, raw: str) -> dict[str, T]:
        try:
            payload = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError as e:
            raise CorruptStoreError(
                f"Collection file for {self.collection} is not valid JSON", cause=e
            ).with_context(collection=self.collection, path=str(self.path)) from e

        if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
            raise CorruptStoreError(
                f"Collection file for {self.collection} must hold a JSON array of objects"
            ).with_context(collection=self.collection, path=str(self.path))

        records: dict[str, T] = {}
        for item in payload:
            try:
                record = self._decoder(item)
            except (KeyError, TypeError, ValueError) as e:
                raise CorruptStoreError(
                    f"Undecodable record in {self.collection}: {e}", cause=e
                ).with_context(collection=self.collection, path=str(self.path)) from e
            records[record.id] = record
        return records

    def _persist(self) -> None:
        self._write([record.to_dict() for record in self._records.values()])

    def _write(self, payload: list[dict[str, Any]]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.stem}-", suffix=".tmp", dir=self.data_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=self._indent, ensure_ascii=False)
                fh.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(
                f"Failed to save database for {self.collection}", cause=e
            ).with_context(collection=self.collection, path=str(self.path)) from e


class StoreRegistry:
    """
    Process-wide registry handing out one file store per collection file.

    Two repositories asking for the same ``(data_dir, collection)`` pair
    share one store, so they see each other's writes without re-reading
    the file.
    """

    _instances: dict[tuple[str, str], JsonFileStore[Any]] = {}
    _lock = threading.Lock()

    @classmethod
    def get_store(
        cls,
        collection: str,
        data_dir: Path | str,
        decoder: Decoder,
        *,
        indent: int = 2,
    ) -> JsonFileStore[Any]:
        key = (str(Path(data_dir).resolve()), collection.lower())
        with cls._lock:
            store = cls._instances.get(key)
            if store is None:
                store = JsonFileStore(collection, data_dir, decoder, indent=indent)
                cls._instances[key] = store
            return store

    @classmethod
    def clear(cls) -> None:
        """Forget every store (primarily for testing)."""
        with cls._lock:
            cls._instances.clear()


__all__ = ["MemoryStore", "JsonFileStore", "StoreRegistry"]
