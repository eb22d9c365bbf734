"""
Shared pytest fixtures and configuration for topic-spine tests.

This module provides:
- Auto-marking of unit / integration tests by location
- Cleanup of process-wide state (settings cache, store registry, log context)
- In-memory topic stacks and one seeded principal per role
- Temporary data directories for file-backed stores and the CLI
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from topic_spine.core.settings import clear_settings_cache
from topic_spine.core.storage import MemoryStore, StoreRegistry
from topic_spine.topics import (
    Principal,
    Role,
    SecureTopicService,
    TopicRepository,
    TopicService,
)

# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        # file stores and the CLI touch the filesystem
        if test_path.parts[0] == "cli" or "storage" in test_path.name:
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Process-wide State Cleanup
# =============================================================================


@pytest.fixture(autouse=True)
def clean_global_state() -> Generator[None, None, None]:
    """Reset settings cache, store registry and structlog between tests."""
    clear_settings_cache()
    StoreRegistry.clear()
    yield
    clear_settings_cache()
    StoreRegistry.clear()
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


# =============================================================================
# Topic Stacks
# =============================================================================


@pytest.fixture
def repository() -> TopicRepository:
    """Topic repository over a fresh in-memory store."""
    return TopicRepository(MemoryStore("topic"))


@pytest.fixture
def service(repository: TopicRepository) -> TopicService:
    return TopicService(repository)


@pytest.fixture
def secure_service(service: TopicService) -> SecureTopicService:
    return SecureTopicService(service)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Empty directory for flat-file collections."""
    path = tmp_path / "data"
    path.mkdir()
    return path


# =============================================================================
# Principals
# =============================================================================


@pytest.fixture
def admin() -> Principal:
    return Principal("admin-id", "Admin User", Role.ADMIN, "admin@example.com")


@pytest.fixture
def editor() -> Principal:
    return Principal("editor-id", "Editor User", Role.EDITOR, "editor@example.com")


@pytest.fixture
def viewer() -> Principal:
    return Principal("viewer-id", "Viewer User", Role.VIEWER, "viewer@example.com")


@pytest.fixture
def stranger() -> Principal:
    """Principal whose role matches no access strategy."""
    return Principal("guest-id", "Guest", "Guest")
