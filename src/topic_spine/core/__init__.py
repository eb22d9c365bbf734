"""Topic Spine Core -- domain-agnostic primitives the topic layer builds on.

Architecture::

    errors.py          Structured error hierarchy (TopicSpineError and friends)
    logging.py         structlog configuration + scoped LogContext
    settings.py        TopicSpineSettings (pydantic-settings, TOPIC_SPINE_*)
    timestamps.py      Record ids + UTC helpers
    protocols.py       Entity / RecordStore protocols
    storage.py         MemoryStore, JsonFileStore, StoreRegistry

Nothing in ``topic_spine.core`` imports from ``topic_spine.topics``.
"""

from topic_spine.core.errors import (
    ConfigError,
    CorruptStoreError,
    DomainConflictError,
    DuplicateRecordError,
    ErrorCategory,
    ErrorContext,
    PermissionDeniedError,
    RecordIdMismatchError,
    StorageError,
    TopicHasChildrenError,
    TopicNotFoundError,
    TopicSpineError,
    TopicValidationError,
    UnknownRoleError,
)
from topic_spine.core.protocols import Entity, RecordStore
from topic_spine.core.storage import JsonFileStore, MemoryStore, StoreRegistry
from topic_spine.core.timestamps import generate_id, parse_timestamp, to_iso8601, utc_now

__all__ = [
    "ConfigError",
    "CorruptStoreError",
    "DomainConflictError",
    "DuplicateRecordError",
    "Entity",
    "ErrorCategory",
    "ErrorContext",
    "JsonFileStore",
    "MemoryStore",
    "PermissionDeniedError",
    "RecordIdMismatchError",
    "RecordStore",
    "StorageError",
    "StoreRegistry",
    "TopicHasChildrenError",
    "TopicNotFoundError",
    "TopicSpineError",
    "TopicValidationError",
    "UnknownRoleError",
    "generate_id",
    "parse_timestamp",
    "to_iso8601",
    "utc_now",
]
