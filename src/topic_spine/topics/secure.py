"""Secure topic facade.

:class:`SecureTopicService` exposes every :class:`TopicService` operation
with a leading ``principal`` argument and enforces the caller's strategy:

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │ kind                 │ behaviour                                    │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │ create               │ can_create first; deny → PermissionDenied    │
    │ update / delete      │ fetch target; absent → None/False (no check) │
    │                      │ then can_update / can_delete on the target   │
    │ read one             │ fetch; absent → None; deny → PermissionDenied│
    │ read many            │ fetch all candidates, silently drop denied   │
    │ child topics         │ can_read(parent) first, then filter          │
    │ tree                 │ can_read(root); prune denied subtrees        │
    │ path                 │ can_read(both ends); drop denied hops        │
    └──────────────────────┴──────────────────────────────────────────────┘

Denied mutations never reach the engine.  ``DomainConflictError`` and
``ConfigError`` raised underneath propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from topic_spine.core.errors import PermissionDeniedError
from topic_spine.core.logging import LogContext, get_logger
from topic_spine.topics.access import TopicAccessStrategy, get_strategy
from topic_spine.topics.models import AccessAction, Principal, Topic, TopicTree
from topic_spine.topics.service import TopicService

logger = get_logger(__name__)

StrategySelector = Callable[[Principal], TopicAccessStrategy]


class SecureTopicService:
    """Topic operations gated by the acting principal's access strategy."""

    def __init__(
        self,
        service: TopicService | None = None,
        strategy_selector: StrategySelector = get_strategy,
    ) -> None:
        self.service = service if service is not None else TopicService()
        self._select = strategy_selector

    # -- helpers -----------------------------------------------------------

    def _strategy(self, principal: Principal) -> TopicAccessStrategy:
        return self._select(principal)

    def _context(self, principal: Principal) -> LogContext:
        return LogContext(principal_id=principal.id, role=principal.role_name)

    def _deny(
        self,
        action: AccessAction,
        principal: Principal,
        topic_id: str | None = None,
    ) -> PermissionDeniedError:
        logger.warning(
            "permission_denied",
            action=action.value,
            topic_id=topic_id,
        )
        return PermissionDeniedError(
            action.value,
            principal.role_name,
            topic_id=topic_id,
            principal_id=principal.id,
        )

    def _require_read(
        self, strategy: TopicAccessStrategy, principal: Principal, topic: Topic
    ) -> None:
        if not strategy.can_read(principal, topic):
            raise self._deny(AccessAction.READ, principal, topic.id)

    def _readable(
        self, strategy: TopicAccessStrategy, principal: Principal, topics: Iterable[Topic]
    ) -> list[Topic]:
        return [topic for topic in topics if strategy.can_read(principal, topic)]

    # =========================================================================
    # Mutations
    # =========================================================================

    def create_topic(
        self,
        principal: Principal,
        name: str,
        content: str,
        parent_id: str | None = None,
    ) -> Topic:
        with self._context(principal):
            strategy = self._strategy(principal)
            if not strategy.can_create(principal, parent_id):
                raise self._deny(AccessAction.CREATE, principal, parent_id)
            return self.service.create_topic(name, content, parent_id)

    def update_topic(
        self,
        principal: Principal,
        topic_id: str,
        new_content: str,
        new_name: str | None = None,
    ) -> Topic | None:
        with self._context(principal):
            topic = self.service.get_topic(topic_id)
            if topic is None:
                return None
            strategy = self._strategy(principal)
            if not strategy.can_update(principal, topic):
                raise self._deny(AccessAction.UPDATE, principal, topic_id)
            return self.service.update_topic(topic_id, new_content, new_name)

    def delete_topic(self, principal: Principal, topic_id: str) -> bool:
        with self._context(principal):
            topic = self.service.get_topic(topic_id)
            if topic is None:
                return False
            strategy = self._strategy(principal)
            if not strategy.can_delete(principal, topic):
                raise self._deny(AccessAction.DELETE, principal, topic_id)
            return self.service.delete_topic(topic_id)

    # =========================================================================
    # Read one
    # =========================================================================

    def get_topic(self, principal: Principal, topic_id: str) -> Topic | None:
        with self._context(principal):
            topic = self.service.get_topic(topic_id)
            if topic is None:
                return None
            self._require_read(self._strategy(principal), principal, topic)
            return topic

    def get_topic_version(
        self, principal: Principal, root_topic_id: str, version: int
    ) -> Topic | None:
        with self._context(principal):
            topic = self.service.get_topic_version(root_topic_id, version)
            if topic is None:
                return None
            self._require_read(self._strategy(principal), principal, topic)
            return topic

    def get_latest_topic_version(self, principal: Principal, root_topic_id: str) -> Topic | None:
        with self._context(principal):
            topic = self.service.get_latest_topic_version(root_topic_id)
            if topic is None:
                return None
            self._require_read(self._strategy(principal), principal, topic)
            return topic

    # =========================================================================
    # Read many (silent filtering)
    # =========================================================================

    def get_all_topics(self, principal: Principal) -> list[Topic]:
        with self._context(principal):
            strategy = self._strategy(principal)
            return self._readable(strategy, principal, self.service.get_all_topics())

    def get_root_topics(self, principal: Principal) -> list[Topic]:
        with self._context(principal):
            strategy = self._strategy(principal)
            return self._readable(strategy, principal, self.service.get_root_topics())

    def get_child_topics(self, principal: Principal, parent_id: str) -> list[Topic]:
        with self._context(principal):
            strategy = self._strategy(principal)
            parent = self.service.get_topic(parent_id)
            if parent is None:
                return []
            self._require_read(strategy, principal, parent)
            return self._readable(strategy, principal, self.service.get_child_topics(parent_id))

    def get_all_topic_versions(self, principal: Principal, root_topic_id: str) -> list[Topic]:
        with self._context(principal):
            strategy = self._strategy(principal)
            return self._readable(
                strategy, principal, self.service.get_all_topic_versions(root_topic_id)
            )

    def search_topics(self, principal: Principal, name_fragment: str) -> list[Topic]:
        with self._context(principal):
            strategy = self._strategy(principal)
            return self._readable(strategy, principal, self.service.search_topics(name_fragment))

    # =========================================================================
    # Graph
    # =========================================================================

    def get_topic_tree(self, principal: Principal, topic_id: str) -> TopicTree | None:
        with self._context(principal):
            root = self.service.get_topic(topic_id)
            if root is None:
                return None
            strategy = self._strategy(principal)
            self._require_read(strategy, principal, root)

            tree = self.service.get_topic_tree(topic_id)
            if tree is None:
                return None
            return self._prune(tree, strategy, principal)

    def _prune(
        self, tree: TopicTree, strategy: TopicAccessStrategy, principal: Principal
    ) -> TopicTree:
        """Copy ``tree`` without any subtree rooted at an unreadable topic."""
        return TopicTree(
            topic=tree.topic,
            children=[
                self._prune(child, strategy, principal)
                for child in tree.children
                if strategy.can_read(principal, child.topic)
            ],
        )

    def find_path(self, principal: Principal, start_id: str, end_id: str) -> list[Topic] | None:
        with self._context(principal):
            start = self.service.get_topic(start_id)
            end = self.service.get_topic(end_id)
            if start is None or end is None:
                return None

            strategy = self._strategy(principal)
            self._require_read(strategy, principal, start)
            self._require_read(strategy, principal, end)

            path = self.service.find_path(start_id, end_id)
            if path is None:
                return None
            # hops are dropped, not re-routed; the result may have gaps
            return self._readable(strategy, principal, path)


__all__ = ["SecureTopicService", "StrategySelector"]
