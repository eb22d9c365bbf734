"""Role-keyed topic access strategies and the strategy selector.

Each strategy is a closed, pure decision table for one role.  A strategy
grants an action only to principals of *its own* role; there is no implied
seniority, so an admin principal is granted nothing by the editor strategy::

    ┌──────────┬────────┬──────┬────────┬────────┐
    │ strategy │ create │ read │ update │ delete │
    ├──────────┼────────┼──────┼────────┼────────┤
    │ Admin    │   ✓    │  ✓   │   ✓    │   ✓    │
    │ Editor   │   ✓    │  ✓   │   ✓    │   ✗    │
    │ Viewer   │   ✗    │  ✓   │   ✗    │   ✗    │
    └──────────┴────────┴──────┴────────┴────────┘
      (✓ only when principal.role == the strategy's role)

``get_strategy()`` fails closed: a role with no strategy raises
``UnknownRoleError`` instead of defaulting to any table.
"""

from __future__ import annotations

from abc import ABC
from collections.abc import Mapping
from types import MappingProxyType

from topic_spine.core.errors import UnknownRoleError
from topic_spine.topics.models import AccessAction, Principal, Role, Topic


class TopicAccessStrategy(ABC):
    """Per-role create/read/update/delete decisions.

    Subclasses declare ``role`` and ``permissions``; the decision methods
    never touch storage.  ``topic`` / ``parent_topic_id`` are accepted so a
    strategy *could* scope by topic, but the shipped tables decide by role
    alone.
    """

    role: Role
    permissions: Mapping[AccessAction, bool]

    def allows(self, action: AccessAction, principal: Principal, topic: Topic | None = None) -> bool:
        return principal.role == self.role and self.permissions.get(action, False)

    def can_create(self, principal: Principal, parent_topic_id: str | None = None) -> bool:
        return self.allows(AccessAction.CREATE, principal)

    def can_read(self, principal: Principal, topic: Topic) -> bool:
        return self.allows(AccessAction.READ, principal, topic)

    def can_update(self, principal: Principal, topic: Topic) -> bool:
        return self.allows(AccessAction.UPDATE, principal, topic)

    def can_delete(self, principal: Principal, topic: Topic) -> bool:
        return self.allows(AccessAction.DELETE, principal, topic)

    def __repr__(self) -> str:
        granted = ",".join(a.value for a, ok in self.permissions.items() if ok)
        return f"{self.__class__.__name__}(role={self.role.value}, grants=[{granted}])"


def _table(create: bool, read: bool, update: bool, delete: bool) -> Mapping[AccessAction, bool]:
    return MappingProxyType(
        {
            AccessAction.CREATE: create,
            AccessAction.READ: read,
            AccessAction.UPDATE: update,
            AccessAction.DELETE: delete,
        }
    )


class AdminTopicAccessStrategy(TopicAccessStrategy):
    """Admins have full access to all topics."""

    role = Role.ADMIN
    permissions = _table(create=True, read=True, update=True, delete=True)


class EditorTopicAccessStrategy(TopicAccessStrategy):
    """Editors can create, read and update topics, but not delete them."""

    role = Role.EDITOR
    permissions = _table(create=True, read=True, update=True, delete=False)


class ViewerTopicAccessStrategy(TopicAccessStrategy):
    """Viewers can only read topics."""

    role = Role.VIEWER
    permissions = _table(create=False, read=True, update=False, delete=False)


_STRATEGIES: Mapping[Role, TopicAccessStrategy] = MappingProxyType(
    {
        Role.ADMIN: AdminTopicAccessStrategy(),
        Role.EDITOR: EditorTopicAccessStrategy(),
        Role.VIEWER: ViewerTopicAccessStrategy(),
    }
)


def get_strategy(principal: Principal) -> TopicAccessStrategy:
    """Return the strategy for ``principal.role``; raise ``UnknownRoleError`` otherwise."""
    role = principal.role
    if not isinstance(role, Role):
        raise UnknownRoleError(role, principal_id=principal.id)
    match role:
        case Role.ADMIN | Role.EDITOR | Role.VIEWER:
            return _STRATEGIES[role]
        case _:  # pragma: no cover - Role is closed
            raise UnknownRoleError(role, principal_id=principal.id)


__all__ = [
    "TopicAccessStrategy",
    "AdminTopicAccessStrategy",
    "EditorTopicAccessStrategy",
    "ViewerTopicAccessStrategy",
    "get_strategy",
]
