"""
Structured error types for Topic Spine.

Every failure the topic layer reports is a ``TopicSpineError`` subclass that
carries a category, structured context and an optional chained cause, so the
transport layer can map it to a response and the log pipeline can index it
without parsing message strings.

Manifesto:
    - **Typed hierarchy:** One class per failure the callers must branch on
    - **Absent is not an error:** Lookups return ``None``/``False``/``[]``;
      only the cases below raise
    - **Rich context:** Errors carry topic ids, principal and action
    - **Error chaining:** Wrapped exceptions stay reachable through ``cause``

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────────┐
        │                      TopicSpineError                           │
        │              (category, context, cause)                        │
        ├────────────────────────────────────────────────────────────────┤
        │                                                                │
        │  TopicNotFoundError    PermissionDeniedError   ConfigError     │
        │  (NOT_FOUND)           (AUTH)                  (CONFIG)        │
        │                                                     │          │
        │  DomainConflictError   TopicValidationError   UnknownRoleError │
        │  (CONFLICT)            (VALIDATION)                            │
        │       │                                                        │
        │  TopicHasChildrenError                                         │
        │                                                                │
        │  StorageError (STORAGE)                                        │
        │       │                                                        │
        │  DuplicateRecordError  RecordIdMismatchError  CorruptStoreError│
        └────────────────────────────────────────────────────────────────┘

Propagation:
    The hierarchy engine never raises ``PermissionDeniedError``; only the
    secure facade does.  ``DomainConflictError`` and ``ConfigError`` are
    never swallowed by the facade.

Examples:
    >>> error = PermissionDeniedError("delete", "Editor", topic_id="t-1")
    >>> error.action, error.role
    ('delete', 'Editor')
    >>> error.to_dict()["category"]
    'AUTH'

Tags:
    error-handling, exception-hierarchy, error-context, topic-spine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and status mapping."""

    NOT_FOUND = "NOT_FOUND"
    AUTH = "AUTH"
    CONFLICT = "CONFLICT"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    STORAGE = "STORAGE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only the fields that are set end up in ``to_dict()``; anything without
    a dedicated field goes into ``metadata``.

    Attributes:
        topic_id: Record id the operation targeted
        root_topic_id: Logical topic id for version-chain operations
        principal_id: Acting principal
        role: Acting principal's role
        action: create / read / update / delete
        collection: Store collection name
        path: Backing file for file stores
        metadata: Additional key-value pairs
    """

    topic_id: str | None = None
    root_topic_id: str | None = None
    principal_id: str | None = None
    role: str | None = None
    action: str | None = None
    collection: str | None = None
    path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    _FIELDS = (
        "topic_id",
        "root_topic_id",
        "principal_id",
        "role",
        "action",
        "collection",
        "path",
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in self._FIELDS:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TopicSpineError(Exception):
    """
    Base exception for all Topic Spine errors.

    Subclasses set ``default_category``; callers may override it per
    instance.  ``with_context()`` returns ``self`` so context can be added
    inline at the raise site.

    Example:
        >>> raise StorageError("write failed").with_context(collection="topic")
        Traceback (most recent call last):
        ...
        StorageError: write failed
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TopicSpineError:
        """Add context to this error (fluent API)."""
        for key, value in kwargs.items():
            if key in ErrorContext._FIELDS:
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# LOOKUP / AUTHORIZATION / CONFLICT
# =============================================================================


class TopicNotFoundError(TopicSpineError):
    """A referenced topic does not exist (e.g. the parent of a new child)."""

    default_category = ErrorCategory.NOT_FOUND

    def __init__(self, topic_id: str, message: str | None = None):
        super().__init__(message or f"Topic with ID {topic_id} not found")
        self.topic_id = topic_id
        self.context.topic_id = topic_id


class PermissionDeniedError(TopicSpineError):
    """
    The acting principal may not perform ``action``.

    Raised only by the secure facade, never by the hierarchy engine.
    ``action`` and ``role`` are plain strings so the error can be built
    from enum members or raw values alike.
    """

    default_category = ErrorCategory.AUTH

    def __init__(
        self,
        action: str,
        role: str,
        *,
        topic_id: str | None = None,
        principal_id: str | None = None,
        message: str | None = None,
    ):
        action = getattr(action, "value", action)
        role = getattr(role, "value", role)
        super().__init__(
            message or f"Role {role!s} does not have permission to {action} this topic"
        )
        self.action = action
        self.role = role
        self.context.action = action
        self.context.role = role
        self.context.topic_id = topic_id
        self.context.principal_id = principal_id


class DomainConflictError(TopicSpineError):
    """The request conflicts with the current state of the topic graph."""

    default_category = ErrorCategory.CONFLICT


class TopicHasChildrenError(DomainConflictError):
    """Deleting a topic that still has children."""

    def __init__(self, topic_id: str, child_count: int):
        super().__init__(
            f"Cannot delete topic {topic_id}: it has {child_count} child topic(s)"
        )
        self.topic_id = topic_id
        self.child_count = child_count
        self.context.topic_id = topic_id
        self.context.metadata["child_count"] = child_count


class TopicValidationError(TopicSpineError):
    """A topic record violates a model invariant."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, field: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.field = field
        if field is not None:
            self.context.metadata["field"] = field


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigError(TopicSpineError):
    """Invalid configuration or data-integrity problem.  Never recoverable."""

    default_category = ErrorCategory.CONFIG


class UnknownRoleError(ConfigError):
    """A principal carries a role no access strategy is registered for."""

    def __init__(self, role: Any, principal_id: str | None = None):
        role = getattr(role, "value", role)
        super().__init__(f"No access strategy found for role {role!r}")
        self.role = role
        self.context.role = str(role)
        self.context.principal_id = principal_id


# =============================================================================
# STORAGE
# =============================================================================


class StorageError(TopicSpineError):
    """Record store read/write failure."""

    default_category = ErrorCategory.STORAGE


class DuplicateRecordError(StorageError):
    """``create`` was called with an id that is already stored."""

    def __init__(self, record_id: str, collection: str | None = None):
        super().__init__(f"Entity with ID {record_id} already exists")
        self.record_id = record_id
        self.context.topic_id = record_id
        self.context.collection = collection


class RecordIdMismatchError(StorageError):
    """``update`` was called with a record whose id differs from the target id."""

    def __init__(self, target_id: str, record_id: str):
        super().__init__(
            f"Entity ID {record_id} does not match the provided ID {target_id}"
        )
        self.target_id = target_id
        self.record_id = record_id
        self.context.topic_id = target_id


class CorruptStoreError(StorageError):
    """A collection file could not be decoded into records."""


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TopicSpineError",
    "TopicNotFoundError",
    "PermissionDeniedError",
    "DomainConflictError",
    "TopicHasChildrenError",
    "TopicValidationError",
    "ConfigError",
    "UnknownRoleError",
    "StorageError",
    "DuplicateRecordError",
    "RecordIdMismatchError",
    "CorruptStoreError",
]
