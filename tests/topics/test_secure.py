"""Tests for the secure topic facade."""

import json

import pytest

from topic_spine.core.errors import (
    PermissionDeniedError,
    TopicHasChildrenError,
    TopicNotFoundError,
    UnknownRoleError,
)
from topic_spine.core.logging import configure_logging
from topic_spine.topics.access import AdminTopicAccessStrategy, TopicAccessStrategy
from topic_spine.topics.models import Principal, Topic
from topic_spine.topics.secure import SecureTopicService


class HiddenNamesStrategy(AdminTopicAccessStrategy):
    """Admin table, except topics whose name starts with ``secret`` are unreadable."""

    def can_read(self, principal: Principal, topic: Topic) -> bool:
        return super().can_read(principal, topic) and not topic.name.startswith("secret")


@pytest.fixture
def hidden(service) -> SecureTopicService:
    strategy = HiddenNamesStrategy()
    return SecureTopicService(service, strategy_selector=lambda principal: strategy)


class TestMutations:
    def test_admin_full_lifecycle(self, secure_service, admin):
        topic = secure_service.create_topic(admin, "Python", "A language")
        v2 = secure_service.update_topic(admin, topic.id, "Newer")
        assert v2.version == 2
        assert secure_service.delete_topic(admin, v2.id) is True

    def test_editor_creates_and_updates(self, secure_service, editor):
        topic = secure_service.create_topic(editor, "Python", "A language")
        assert secure_service.update_topic(editor, topic.id, "Newer").version == 2

    def test_admin_delete_after_editor_denied(self, secure_service, service, editor, admin):
        topic = service.create_topic("Python", "A language")
        with pytest.raises(PermissionDeniedError):
            secure_service.delete_topic(editor, topic.id)
        assert topic in secure_service.get_all_topics(admin)

        assert secure_service.delete_topic(admin, topic.id) is True
        assert topic not in secure_service.get_all_topics(admin)
        assert secure_service.get_topic(admin, topic.id) is None

    def test_editor_cannot_delete(self, secure_service, service, editor):
        topic = service.create_topic("Python", "A language")
        with pytest.raises(PermissionDeniedError) as exc_info:
            secure_service.delete_topic(editor, topic.id)
        assert exc_info.value.action == "delete"
        assert exc_info.value.role == "Editor"
        assert service.get_topic(topic.id) is not None

    def test_viewer_cannot_create(self, secure_service, service, viewer):
        with pytest.raises(PermissionDeniedError) as exc_info:
            secure_service.create_topic(viewer, "Python", "A language")
        assert exc_info.value.action == "create"
        assert service.get_all_topics() == []

    def test_viewer_cannot_update(self, secure_service, service, viewer):
        topic = service.create_topic("Python", "A language")
        with pytest.raises(PermissionDeniedError):
            secure_service.update_topic(viewer, topic.id, "Hacked")
        assert service.get_all_topic_versions(topic.id) == [topic]

    def test_missing_target_is_not_a_denial(self, secure_service, viewer):
        assert secure_service.update_topic(viewer, "missing", "c") is None
        assert secure_service.delete_topic(viewer, "missing") is False

    def test_engine_errors_propagate(self, secure_service, service, admin):
        with pytest.raises(TopicNotFoundError):
            secure_service.create_topic(admin, "Orphan", "c", "missing")
        parent = service.create_topic("Parent", "c")
        service.create_topic("Child", "c", parent.id)
        with pytest.raises(TopicHasChildrenError):
            secure_service.delete_topic(admin, parent.id)

    def test_unknown_role_fails_closed(self, secure_service, service, stranger):
        topic = service.create_topic("Python", "A language")
        with pytest.raises(UnknownRoleError):
            secure_service.create_topic(stranger, "Other", "c")
        with pytest.raises(UnknownRoleError):
            secure_service.get_topic(stranger, topic.id)
        with pytest.raises(UnknownRoleError):
            secure_service.get_all_topics(stranger)


class TestReadOne:
    def test_viewer_reads(self, secure_service, service, viewer):
        topic = service.create_topic("Python", "A language")
        v2 = service.update_topic(topic.id, "Newer")
        assert secure_service.get_topic(viewer, topic.id) == topic
        assert secure_service.get_topic_version(viewer, topic.id, 2) == v2
        assert secure_service.get_latest_topic_version(viewer, topic.id) == v2

    def test_missing_returns_none(self, secure_service, viewer):
        assert secure_service.get_topic(viewer, "missing") is None
        assert secure_service.get_topic_version(viewer, "missing", 1) is None
        assert secure_service.get_latest_topic_version(viewer, "missing") is None

    def test_unreadable_raises(self, hidden, service, admin):
        topic = service.create_topic("secret plans", "c")
        with pytest.raises(PermissionDeniedError) as exc_info:
            hidden.get_topic(admin, topic.id)
        assert exc_info.value.action == "read"


class TestReadManyFiltering:
    def test_unreadable_topics_are_dropped_in_order(self, hidden, service, admin):
        a = service.create_topic("A", "c")
        service.create_topic("secret B", "c")
        c = service.create_topic("C", "c")
        assert hidden.get_all_topics(admin) == [a, c]
        assert hidden.get_root_topics(admin) == [a, c]

    def test_search_and_versions_filtered(self, hidden, service, admin):
        v1 = service.create_topic("public", "c")
        service.update_topic(v1.id, "c2", "secret now")
        assert [t.version for t in hidden.get_all_topic_versions(admin, v1.id)] == [1]
        assert hidden.search_topics(admin, "now") == []

    def test_child_topics_require_readable_parent(self, hidden, service, admin):
        parent = service.create_topic("secret parent", "c")
        service.create_topic("child", "c", parent.id)
        with pytest.raises(PermissionDeniedError):
            hidden.get_child_topics(admin, parent.id)

    def test_child_topics_filtered(self, hidden, service, admin):
        parent = service.create_topic("parent", "c")
        visible = service.create_topic("child", "c", parent.id)
        service.create_topic("secret child", "c", parent.id)
        assert hidden.get_child_topics(admin, parent.id) == [visible]

    def test_child_topics_of_missing_parent(self, secure_service, viewer):
        assert secure_service.get_child_topics(viewer, "missing") == []


class TestGraph:
    @pytest.fixture
    def chain(self, service):
        """root -> secret mid -> leaf, root -> sibling"""
        root = service.create_topic("root", "c")
        mid = service.create_topic("secret mid", "c", root.id)
        leaf = service.create_topic("leaf", "c", mid.id)
        sibling = service.create_topic("sibling", "c", root.id)
        return root, mid, leaf, sibling

    def test_viewer_sees_whole_tree(self, secure_service, viewer, chain):
        root, *_ = chain
        assert secure_service.get_topic_tree(viewer, root.id).size == 4

    def test_tree_pruned_at_unreadable_node(self, hidden, admin, chain):
        root, mid, leaf, sibling = chain
        tree = hidden.get_topic_tree(admin, root.id)
        assert [t.id for t in tree.walk()] == [root.id, sibling.id]
        assert tree.find(leaf.id) is None

    def test_tree_root_must_be_readable(self, hidden, admin, chain):
        _, mid, _, _ = chain
        with pytest.raises(PermissionDeniedError):
            hidden.get_topic_tree(admin, mid.id)

    def test_tree_missing(self, secure_service, viewer):
        assert secure_service.get_topic_tree(viewer, "missing") is None

    def test_path_drops_unreadable_hops(self, hidden, admin, chain):
        root, mid, leaf, _ = chain
        assert hidden.find_path(admin, leaf.id, root.id) == [leaf, root]

    def test_path_endpoints_must_be_readable(self, hidden, admin, chain):
        root, mid, _, _ = chain
        with pytest.raises(PermissionDeniedError):
            hidden.find_path(admin, root.id, mid.id)

    def test_path_missing_or_disconnected(self, secure_service, service, viewer, chain):
        root, *_ = chain
        lone = service.create_topic("lone", "c")
        assert secure_service.find_path(viewer, root.id, "missing") is None
        assert secure_service.find_path(viewer, root.id, lone.id) is None


class TestCustomStrategy:
    def test_selector_is_consulted_per_call(self, service, admin, viewer):
        seen: list[str] = []

        def selector(principal: Principal) -> TopicAccessStrategy:
            seen.append(principal.id)
            return AdminTopicAccessStrategy()

        secure = SecureTopicService(service, strategy_selector=selector)
        secure.create_topic(admin, "A", "c")
        # the admin table still refuses a viewer principal
        with pytest.raises(PermissionDeniedError):
            secure.create_topic(viewer, "B", "c")
        assert seen == ["admin-id", "viewer-id"]


class TestWithConfiguredLogging:
    """Facade behaviour once structured logging is configured."""

    def test_denial_raises_and_is_logged(self, secure_service, viewer, capsys):
        configure_logging(level="INFO", json_format=True)
        with pytest.raises(PermissionDeniedError):
            secure_service.create_topic(viewer, "Python", "A language")

        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["event"] == "permission_denied"
        assert line["log.level"] == "warning"
        assert line["principal_id"] == "viewer-id"
        assert line["role"] == "Viewer"
        assert line["logger"] == "topic_spine.topics.secure"

    def test_mutations_log_at_info(self, secure_service, service, admin, capsys):
        configure_logging(level="INFO", json_format=False)
        topic = secure_service.create_topic(admin, "Python", "A language")
        secure_service.update_topic(admin, topic.id, "Newer")
        secure_service.get_topic_tree(admin, topic.id)

        err = capsys.readouterr().err
        assert "topic_created" in err
        assert "topic_versioned" in err
        assert len(service.get_all_topics()) == 2

    def test_tree_build_logs_size_and_depth(self, secure_service, admin, capsys):
        configure_logging(level="DEBUG", json_format=True)
        root = secure_service.create_topic(admin, "Root", "c")
        secure_service.create_topic(admin, "Child", "c", root.id)
        secure_service.get_topic_tree(admin, root.id)

        lines = [json.loads(raw) for raw in capsys.readouterr().err.strip().splitlines()]
        built = [line for line in lines if line["event"] == "topic_tree_built"]
        assert built[-1]["size"] == 2
        assert built[-1]["depth"] == 2
