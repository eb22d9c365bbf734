"""Principal directory and bearer-token resolution.

Tokens are principal ids: ``Authorization: Bearer editor-id`` resolves to
the principal whose id is ``editor-id``.  The directory is read from a JSON
array file (``[{"id": ..., "name": ..., "role": ...}, ...]``) and seeded with
one principal per role when the file does not exist yet.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from topic_spine.core.errors import CorruptStoreError, StorageError
from topic_spine.core.logging import get_logger
from topic_spine.topics.models import Principal, Role

logger = get_logger(__name__)


def default_principals() -> list[Principal]:
    return [
        Principal("admin-id", "Admin User", Role.ADMIN, "admin@example.com"),
        Principal("editor-id", "Editor User", Role.EDITOR, "editor@example.com"),
        Principal("viewer-id", "Viewer User", Role.VIEWER, "viewer@example.com"),
    ]


def parse_bearer(header: str | None) -> str | None:
    """Extract the token from ``"Bearer <token>"``; None when malformed."""
    if not header:
        return None
    parts = header.split()
    if len(parts) != 2 or parts[0] != "Bearer":
        return None
    return parts[1]


class PrincipalDirectory:
    """Read-only lookup of principals by id or bearer token."""

    def __init__(self, principals: Iterable[Principal] = ()) -> None:
        self._by_id: dict[str, Principal] = {p.id: p for p in principals}

    @classmethod
    def from_file(cls, path: Path | str, *, seed: bool = True) -> PrincipalDirectory:
        path = Path(path)
        if not path.exists():
            principals = default_principals()
            if seed:
                cls._write_seed(path, principals)
            return cls(principals)

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StorageError(f"Failed to read principals from {path}", cause=e) from e
        except json.JSONDecodeError as e:
            raise CorruptStoreError(
                f"Principals file {path} is not valid JSON", cause=e
            ).with_context(path=str(path)) from e

        if not isinstance(payload, list):
            raise CorruptStoreError(
                f"Principals file {path} must hold a JSON array"
            ).with_context(path=str(path))
        try:
            principals = [Principal.from_dict(item) for item in payload]
        except (KeyError, TypeError, AttributeError) as e:
            raise CorruptStoreError(
                f"Malformed principal in {path}: {e}", cause=e
            ).with_context(path=str(path)) from e
        logger.debug("principals_loaded", path=str(path), count=len(principals))
        return cls(principals)

    @staticmethod
    def _write_seed(path: Path, principals: list[Principal]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps([p.to_dict() for p in principals], indent=2) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            raise StorageError(f"Failed to seed principals at {path}", cause=e) from e
        logger.info("principals_seeded", path=str(path), count=len(principals))

    def find_by_id(self, principal_id: str) -> Principal | None:
        return self._by_id.get(principal_id)

    def find_all(self) -> list[Principal]:
        return list(self._by_id.values())

    def resolve_token(self, token: str | None) -> Principal | None:
        if not token:
            return None
        return self.find_by_id(token)

    def authenticate(self, credential: str | None) -> Principal | None:
        """Resolve ``"Bearer <token>"`` or a bare token to a principal."""
        if credential and credential.startswith("Bearer "):
            return self.resolve_token(parse_bearer(credential))
        return self.resolve_token(credential)


__all__ = ["PrincipalDirectory", "default_principals", "parse_bearer"]
