"""
Canonical protocols for Topic Spine persistence.

``RecordStore`` is the contract the topic repository consumes from the
persistence collaborator.  Anything with the same shape satisfies it; the
shipped implementations live in :mod:`topic_spine.core.storage`.

    ┌────────────────────────────────────────────────────────────┐
    │ RecordStore[T]                                             │
    │   find_all()            → list[T]        (storage order)   │
    │   find_by_id(id)        → T | None                         │
    │   create(record)        → T        (raises on duplicate)   │
    │   update(id, record)    → T | None                         │
    │   delete(id)            → bool                             │
    │   query(predicate)      → list[T]        (storage order)   │
    └────────────────────────────────────────────────────────────┘

Tags:
    protocol, storage, repository, topic-spine
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T", bound="Entity")


@runtime_checkable
class Entity(Protocol):
    """A storable record: a stable string id and a JSON-ready dict form."""

    @property
    def id(self) -> str: ...

    def to_dict(self) -> dict[str, Any]: ...


@runtime_checkable
class RecordStore(Protocol[T]):
    """Whole-collection record store.  SYNC-ONLY."""

    def find_all(self) -> list[T]: ...

    def find_by_id(self, record_id: str) -> T | None: ...

    def create(self, record: T) -> T: ...

    def update(self, record_id: str, record: T) -> T | None: ...

    def delete(self, record_id: str) -> bool: ...

    def query(self, predicate: Callable[[T], bool]) -> list[T]: ...


__all__ = ["Entity", "RecordStore"]
