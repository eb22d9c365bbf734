"""Topic store adapter.

:class:`TopicRepository` pairs a :class:`~topic_spine.core.protocols.RecordStore`
with the topic-specific predicate queries the hierarchy engine needs.  It
validates records before they are written and otherwise passes straight
through to the store.

Architecture::

    ┌──────────────────────────────────────────────────────────────┐
    │                       TopicRepository                        │
    │                                                              │
    │   store: RecordStore[Topic]                                  │
    │                                                              │
    │   find_all / find_by_id / create / update / delete / query   │
    │   find_by_parent_id(parent_id)   → direct children           │
    │   find_root_topics()             → parent_topic_id is None   │
    │   find_by_name(fragment)         → case-insensitive contains │
    │   find_versions(root_id)         → ordered by version        │
    │   find_version(root_id, n)       → Topic | None              │
    │   find_latest_version(root_id)   → Topic | None              │
    └──────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from topic_spine.core.protocols import RecordStore
from topic_spine.core.storage import MemoryStore, StoreRegistry
from topic_spine.topics.models import Topic


class TopicRepository:
    """Repository for topic version records."""

    def __init__(self, store: RecordStore[Topic] | None = None) -> None:
        self.store: RecordStore[Topic] = store if store is not None else MemoryStore("topic")

    @classmethod
    def from_data_dir(
        cls,
        data_dir: Path | str,
        collection: str = "topic",
        *,
        indent: int = 2,
    ) -> TopicRepository:
        """Repository over the shared flat-file store for ``collection``."""
        return cls(StoreRegistry.get_store(collection, data_dir, Topic.from_dict, indent=indent))

    # -- pass-through ------------------------------------------------------

    def find_all(self) -> list[Topic]:
        return self.store.find_all()

    def find_by_id(self, topic_id: str) -> Topic | None:
        return self.store.find_by_id(topic_id)

    def create(self, topic: Topic) -> Topic:
        topic.validate()
        return self.store.create(topic)

    def update(self, topic_id: str, topic: Topic) -> Topic | None:
        topic.validate()
        return self.store.update(topic_id, topic)

    def delete(self, topic_id: str) -> bool:
        return self.store.delete(topic_id)

    def query(self, predicate: Callable[[Topic], bool]) -> list[Topic]:
        return self.store.query(predicate)

    # -- hierarchy ---------------------------------------------------------

    def find_by_parent_id(self, parent_topic_id: str) -> list[Topic]:
        return self.query(lambda t: t.parent_topic_id == parent_topic_id)

    def find_root_topics(self) -> list[Topic]:
        return self.query(lambda t: not t.parent_topic_id)

    def find_by_name(self, fragment: str) -> list[Topic]:
        needle = fragment.casefold()
        return self.query(lambda t: needle in t.name.casefold())

    # -- versions ----------------------------------------------------------

    def find_versions(self, root_topic_id: str) -> list[Topic]:
        versions = self.query(lambda t: t.root_topic_id == root_topic_id)
        return sorted(versions, key=lambda t: t.version)

    def find_version(self, root_topic_id: str, version: int) -> Topic | None:
        matches = self.query(
            lambda t: t.root_topic_id == root_topic_id and t.version == version
        )
        return matches[0] if matches else None

    def find_latest_version(self, root_topic_id: str) -> Topic | None:
        versions = self.query(lambda t: t.root_topic_id == root_topic_id)
        if not versions:
            return None
        return max(versions, key=lambda t: t.version)


__all__ = ["TopicRepository"]
