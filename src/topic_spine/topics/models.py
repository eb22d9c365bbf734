"""Topic version records, topic trees, principals and roles.

A ``Topic`` is one immutable snapshot of a logical topic.  Updating a topic
never mutates a stored record; ``next_version()`` derives a new record that
links back to its predecessor::

    v1  id=A  root=A  previous=None
    v2  id=B  root=A  previous=A
    v3  id=C  root=A  previous=B

``parent_topic_id`` references a specific stored record id (not the root
identity), so children stay attached to the version they were created under.

Wire format keys are camelCase (``parentTopicId``, ``rootTopicId`` ...) so
collection files stay readable by other consumers of the same store.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from topic_spine.core.errors import TopicValidationError
from topic_spine.core.timestamps import generate_id, parse_timestamp, to_iso8601, utc_now


class Role(str, Enum):
    """Principal roles.  Mutually exclusive; no implied seniority."""

    ADMIN = "Admin"  # full access
    EDITOR = "Editor"  # contributor
    VIEWER = "Viewer"  # read only

    @classmethod
    def parse(cls, value: Role | str) -> Role | str:
        """Return the ``Role`` whose value is exactly ``value``, else ``value`` unchanged."""
        if isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            return value


class AccessAction(str, Enum):
    """Operations the access strategies decide on."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class Principal:
    """
    The authenticated actor behind a call.

    ``role`` is normally a :class:`Role`; a role string that matches no
    member is kept verbatim so the strategy selector can reject it.
    """

    id: str
    name: str
    role: Role | str
    email: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role.parse(self.role))

    @property
    def role_name(self) -> str:
        return self.role.value if isinstance(self.role, Role) else str(self.role)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name, "role": self.role_name}
        if self.email:
            data["email"] = self.email
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Principal:
        email = data.get("email")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            role=data["role"],
            email=email.lower() if isinstance(email, str) else None,
        )


@dataclass(frozen=True, slots=True)
class Topic:
    """
    One stored version of a topic.

    Attributes:
        id: Unique per stored record
        name: Display name (non-empty after trimming)
        content: Body text (non-empty after trimming)
        version: 1 for a new topic, +1 per update
        created_at: When the logical topic was created
        updated_at: When this version was written
        parent_topic_id: Record id of the parent; None for root-level topics
        previous_version_id: Record id of version N-1; None for version 1
        root_topic_id: Id of version 1, shared by every version of the topic
    """

    id: str
    name: str
    content: str
    version: int
    created_at: datetime
    updated_at: datetime
    parent_topic_id: str | None = None
    previous_version_id: str | None = None
    root_topic_id: str = ""

    def __post_init__(self) -> None:
        if not self.root_topic_id:
            # frozen dataclass: version 1 records are their own root
            object.__setattr__(self, "root_topic_id", self.id)

    # -- derivation --------------------------------------------------------

    @classmethod
    def new(
        cls,
        name: str,
        content: str,
        parent_topic_id: str | None = None,
        *,
        id: str | None = None,
        now: datetime | None = None,
    ) -> Topic:
        """Create version 1 of a new logical topic."""
        topic_id = id or generate_id()
        timestamp = now or utc_now()
        return cls(
            id=topic_id,
            name=name,
            content=content,
            version=1,
            created_at=timestamp,
            updated_at=timestamp,
            parent_topic_id=parent_topic_id,
            previous_version_id=None,
            root_topic_id=topic_id,
        )

    def next_version(
        self,
        content: str,
        name: str | None = None,
        *,
        id: str | None = None,
        now: datetime | None = None,
    ) -> Topic:
        """Derive version N+1.  ``self`` is left untouched."""
        return replace(
            self,
            id=id or generate_id(),
            name=self.name if name is None else name,
            content=content,
            version=self.version + 1,
            updated_at=now or utc_now(),
            previous_version_id=self.id,
        )

    # -- invariants --------------------------------------------------------

    def validate(self) -> None:
        """Raise ``TopicValidationError`` if the record breaks a model invariant."""
        if not self.id or not self.id.strip():
            raise TopicValidationError("Topic id cannot be empty", field="id")
        if not isinstance(self.name, str) or not self.name.strip():
            raise TopicValidationError("Topic name cannot be empty", field="name")
        if not isinstance(self.content, str) or not self.content.strip():
            raise TopicValidationError("Topic content cannot be empty", field="content")
        if self.version < 1:
            raise TopicValidationError("Topic version must be at least 1", field="version")
        if self.version == 1:
            if self.previous_version_id is not None:
                raise TopicValidationError(
                    "Version 1 cannot reference a previous version", field="previous_version_id"
                )
            if self.root_topic_id != self.id:
                raise TopicValidationError(
                    "Version 1 must be its own root topic", field="root_topic_id"
                )
        elif not self.previous_version_id:
            raise TopicValidationError(
                f"Version {self.version} must reference its previous version",
                field="previous_version_id",
            )
        if self.parent_topic_id is not None and self.parent_topic_id == self.id:
            raise TopicValidationError("Topic cannot be its own parent", field="parent_topic_id")

    @property
    def is_root_level(self) -> bool:
        return self.parent_topic_id is None

    @property
    def is_original(self) -> bool:
        return self.version == 1

    # -- serialization -----------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "version": self.version,
            "createdAt": to_iso8601(self.created_at),
            "updatedAt": to_iso8601(self.updated_at),
            "rootTopicId": self.root_topic_id,
        }
        if self.parent_topic_id:
            data["parentTopicId"] = self.parent_topic_id
        if self.previous_version_id:
            data["previousVersionId"] = self.previous_version_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Topic:
        created_at = parse_timestamp(data["createdAt"])
        return cls(
            id=str(data["id"]),
            name=data["name"],
            content=data["content"],
            version=int(data.get("version", 1)),
            created_at=created_at,
            updated_at=parse_timestamp(data.get("updatedAt") or created_at),
            parent_topic_id=data.get("parentTopicId") or None,
            previous_version_id=data.get("previousVersionId") or None,
            root_topic_id=data.get("rootTopicId") or str(data["id"]),
        )


@dataclass
class TopicTree:
    """A topic and its transitive children, nested by parent links."""

    topic: Topic
    children: list[TopicTree] = field(default_factory=list)

    def walk(self) -> Iterator[Topic]:
        """Pre-order traversal, children in storage order."""
        stack: list[TopicTree] = [self]
        while stack:
            node = stack.pop()
            yield node.topic
            stack.extend(reversed(node.children))

    @property
    def size(self) -> int:
        return sum(1 for _ in self.walk())

    @property
    def depth(self) -> int:
        if not self.children:
            return 1
        return 1 + max(child.depth for child in self.children)

    def find(self, topic_id: str) -> TopicTree | None:
        stack: list[TopicTree] = [self]
        while stack:
            node = stack.pop()
            if node.topic.id == topic_id:
                return node
            stack.extend(node.children)
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic": self.topic.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }


__all__ = ["AccessAction", "Principal", "Role", "Topic", "TopicTree"]
