"""Versioned topic hierarchy with role-scoped access.

Control flow::

    caller → SecureTopicService → strategy check → TopicService
           → TopicRepository → RecordStore

``build_secure_service()`` wires the stack over the configured data dir.
"""

from __future__ import annotations

from pathlib import Path

from topic_spine.topics.access import (
    AdminTopicAccessStrategy,
    EditorTopicAccessStrategy,
    TopicAccessStrategy,
    ViewerTopicAccessStrategy,
    get_strategy,
)
from topic_spine.topics.models import AccessAction, Principal, Role, Topic, TopicTree
from topic_spine.topics.principals import PrincipalDirectory, default_principals, parse_bearer
from topic_spine.topics.repository import TopicRepository
from topic_spine.topics.secure import SecureTopicService
from topic_spine.topics.service import TopicGraph, TopicService


def build_secure_service(
    data_dir: Path | str,
    collection: str = "topic",
    *,
    indent: int = 2,
) -> SecureTopicService:
    """Secure facade over the flat-file topic collection in ``data_dir``."""
    repository = TopicRepository.from_data_dir(data_dir, collection, indent=indent)
    return SecureTopicService(TopicService(repository))


__all__ = [
    "AccessAction",
    "AdminTopicAccessStrategy",
    "EditorTopicAccessStrategy",
    "Principal",
    "PrincipalDirectory",
    "Role",
    "SecureTopicService",
    "Topic",
    "TopicAccessStrategy",
    "TopicGraph",
    "TopicRepository",
    "TopicService",
    "TopicTree",
    "ViewerTopicAccessStrategy",
    "build_secure_service",
    "default_principals",
    "get_strategy",
    "parse_bearer",
]
