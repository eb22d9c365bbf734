"""
Topic Spine - versioned topic hierarchies with role-scoped access control.

Packages:
- topic_spine.core: errors, logging, settings, ids/timestamps, record stores
- topic_spine.topics: topic model, hierarchy engine, access strategies, secure facade
- topic_spine.cli: Typer command-line surface
"""

__version__ = "0.1.0"

from topic_spine.topics import (  # noqa: E402
    Principal,
    Role,
    SecureTopicService,
    Topic,
    TopicRepository,
    TopicService,
    TopicTree,
    get_strategy,
)

__all__ = [
    "__version__",
    "Principal",
    "Role",
    "SecureTopicService",
    "Topic",
    "TopicRepository",
    "TopicService",
    "TopicTree",
    "get_strategy",
]
