"""Hierarchy & version engine.

:class:`TopicService` owns every graph and version-chain algorithm over the
topic collection and is the only writer of topic records.  It knows nothing
about principals or permissions; :mod:`topic_spine.topics.secure` wraps it.

Failure semantics:
    - Unknown ids produce ``None`` / ``False`` / ``[]``, never an exception
    - ``create_topic`` with an unknown parent raises ``TopicNotFoundError``
    - ``delete_topic`` on a topic with children raises ``TopicHasChildrenError``

Tree and path operations read the collection once and work on that
snapshot (:class:`TopicGraph`), so one call sees one consistent state.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Iterable

from topic_spine.core.errors import TopicHasChildrenError, TopicNotFoundError
from topic_spine.core.logging import get_logger
from topic_spine.topics.models import Topic, TopicTree
from topic_spine.topics.repository import TopicRepository

logger = get_logger(__name__)


class TopicGraph:
    """
    Point-in-time view of the parent/child graph.

    Edges are undirected for traversal: a topic's neighbours are its parent
    (when stored) followed by its children in storage order.
    """

    def __init__(self, topics: Iterable[Topic]) -> None:
        self.by_id: dict[str, Topic] = {}
        self.children: dict[str, list[Topic]] = defaultdict(list)
        for topic in topics:
            self.by_id[topic.id] = topic
            if topic.parent_topic_id:
                self.children[topic.parent_topic_id].append(topic)

    def __contains__(self, topic_id: object) -> bool:
        return topic_id in self.by_id

    def get(self, topic_id: str) -> Topic | None:
        return self.by_id.get(topic_id)

    def children_of(self, topic_id: str) -> list[Topic]:
        return self.children.get(topic_id, [])

    def neighbours(self, topic_id: str) -> list[Topic]:
        topic = self.by_id[topic_id]
        result: list[Topic] = []
        if topic.parent_topic_id and topic.parent_topic_id in self.by_id:
            result.append(self.by_id[topic.parent_topic_id])
        result.extend(self.children_of(topic_id))
        return result

    def descendants(self, topic_id: str) -> list[Topic]:
        """Every transitive child of ``topic_id``, breadth-first, each once."""
        seen = {topic_id}
        found: list[Topic] = []
        queue: deque[str] = deque([topic_id])
        while queue:
            current = queue.popleft()
            for child in self.children_of(current):
                if child.id in seen:
                    continue
                seen.add(child.id)
                found.append(child)
                queue.append(child.id)
        return found

    def tree(self, root_id: str) -> TopicTree | None:
        """
        Nest the root's descendants under their immediate parents.

        Descendants are re-linked in storage order, where a child may be
        stored before its parent.
        """
        root = self.by_id.get(root_id)
        if root is None:
            return None

        members = {topic.id for topic in self.descendants(root_id)}
        nodes: dict[str, TopicTree] = {root.id: TopicTree(root)}
        # children seen before their parent wait here until the parent lands
        pending: dict[str, list[TopicTree]] = defaultdict(list)

        for topic in self.by_id.values():
            if topic.id not in members:
                continue
            node = TopicTree(topic)
            nodes[topic.id] = node
            parent = nodes.get(topic.parent_topic_id or "")
            if parent is None:
                pending[topic.parent_topic_id or ""].append(node)
            else:
                parent.children.append(node)
            for waiting in pending.pop(topic.id, []):
                node.children.append(waiting)

        return nodes[root.id]

    def shortest_path(self, start_id: str, end_id: str) -> list[Topic] | None:
        """Breadth-first search over undirected parent/child edges."""
        if start_id not in self.by_id or end_id not in self.by_id:
            return None
        if start_id == end_id:
            return [self.by_id[start_id]]

        predecessor: dict[str, str | None] = {start_id: None}
        queue: deque[str] = deque([start_id])
        while queue:
            current = queue.popleft()
            for neighbour in self.neighbours(current):
                if neighbour.id in predecessor:
                    continue
                predecessor[neighbour.id] = current
                if neighbour.id == end_id:
                    return self._reconstruct(predecessor, end_id)
                queue.append(neighbour.id)
        return None

    def _reconstruct(self, predecessor: dict[str, str | None], end_id: str) -> list[Topic]:
        path: list[Topic] = []
        cursor: str | None = end_id
        while cursor is not None:
            path.append(self.by_id[cursor])
            cursor = predecessor[cursor]
        path.reverse()
        return path


class TopicService:
    """Topic hierarchy and version-chain operations."""

    def __init__(self, repository: TopicRepository | None = None) -> None:
        self.repository = repository if repository is not None else TopicRepository()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def create_topic(self, name: str, content: str, parent_id: str | None = None) -> Topic:
        """Persist version 1 of a new topic, optionally under ``parent_id``."""
        if parent_id is not None and self.repository.find_by_id(parent_id) is None:
            raise TopicNotFoundError(parent_id, f"Parent topic with ID {parent_id} not found")

        topic = self.repository.create(Topic.new(name, content, parent_id))
        logger.info(
            "topic_created",
            topic_id=topic.id,
            parent_topic_id=parent_id,
        )
        return topic

    def get_topic(self, topic_id: str) -> Topic | None:
        return self.repository.find_by_id(topic_id)

    def update_topic(
        self,
        topic_id: str,
        new_content: str,
        new_name: str | None = None,
    ) -> Topic | None:
        """
        Store the next version of ``topic_id``'s chain.

        The new record is derived from the chain's latest version, so
        updating an older version id still extends the chain linearly
        instead of forking it.
        """
        target = self.repository.find_by_id(topic_id)
        if target is None:
            return None

        head = self.repository.find_latest_version(target.root_topic_id) or target
        if head.id != target.id:
            logger.info(
                "topic_update_rebased",
                topic_id=topic_id,
                head_id=head.id,
                head_version=head.version,
            )

        new_version = self.repository.create(head.next_version(new_content, new_name))
        logger.info(
            "topic_versioned",
            topic_id=new_version.id,
            root_topic_id=new_version.root_topic_id,
            version=new_version.version,
            previous_version_id=new_version.previous_version_id,
        )
        return new_version

    def delete_topic(self, topic_id: str) -> bool:
        """Remove exactly ``topic_id``; refused while any record names it as parent."""
        if self.repository.find_by_id(topic_id) is None:
            return False

        children = self.repository.find_by_parent_id(topic_id)
        if children:
            raise TopicHasChildrenError(topic_id, len(children))

        deleted = self.repository.delete(topic_id)
        if deleted:
            logger.info("topic_deleted", topic_id=topic_id)
        return deleted

    # =========================================================================
    # Listing
    # =========================================================================

    def get_all_topics(self) -> list[Topic]:
        return self.repository.find_all()

    def get_root_topics(self) -> list[Topic]:
        return self.repository.find_root_topics()

    def get_child_topics(self, parent_id: str) -> list[Topic]:
        return self.repository.find_by_parent_id(parent_id)

    def search_topics(self, name_fragment: str) -> list[Topic]:
        return self.repository.find_by_name(name_fragment)

    # =========================================================================
    # Versions
    # =========================================================================

    def get_topic_version(self, root_topic_id: str, version: int) -> Topic | None:
        return self.repository.find_version(root_topic_id, version)

    def get_all_topic_versions(self, root_topic_id: str) -> list[Topic]:
        return self.repository.find_versions(root_topic_id)

    def get_latest_topic_version(self, root_topic_id: str) -> Topic | None:
        return self.repository.find_latest_version(root_topic_id)

    # =========================================================================
    # Graph
    # =========================================================================

    def snapshot(self) -> TopicGraph:
        return TopicGraph(self.repository.find_all())

    def get_topic_tree(self, topic_id: str) -> TopicTree | None:
        """The topic plus every transitive descendant, nested."""
        tree = self.snapshot().tree(topic_id)
        if tree is not None:
            logger.debug(
                "topic_tree_built", topic_id=topic_id, size=tree.size, depth=tree.depth
            )
        return tree

    def find_path(self, start_id: str, end_id: str) -> list[Topic] | None:
        """Some shortest parent/child path from ``start_id`` to ``end_id`` inclusive."""
        path = self.snapshot().shortest_path(start_id, end_id)
        logger.debug(
            "topic_path_searched",
            start_id=start_id,
            end_id=end_id,
            length=len(path) if path is not None else None,
        )
        return path


__all__ = ["TopicGraph", "TopicService"]
