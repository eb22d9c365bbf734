"""
Topic Spine CLI -- ``topic-spine`` command-line interface.

Usage::

    topic-spine --help
    topic-spine topics create "Python" "A language" --as admin-id
    topic-spine topics tree <topic-id> --as viewer-id --json
    topic-spine principals list
"""

from topic_spine.cli.app import app

__all__ = ["app"]
