"""
User store backends.

Provides a narrow :class:`UserStore` contract (``all``, ``find``,
``exists``, ``append``) and two implementations:

- :class:`JsonFileUserStore` keeps every user in a single JSON array on
  disk.  The document is read in full on every operation and rewritten
  in full on every append.
- :class:`InMemoryUserStore` keeps users in a list, for tests and
  throw-away deployments.

Read, parse and write failures raise :class:`StoreIOError`.  They are
never reported as "no such user".

Known hazard: the check-and-append in :meth:`UserStore.append` is
serialised with a lock that only covers the current process.  Two
processes signing up the same username at the same moment can still
both write a record.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from .models import UserRecord

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("json", "memory")


class StoreIOError(Exception):
    """The backing document could not be read, parsed or written."""


class DuplicateUserError(Exception):
    """A record with the requested username already exists."""

    def __init__(self, username: str):
        super().__init__(f"User '{username}' already exists")
        self.username = username


class UserStore(ABC):
    """Abstract base class for user store backends."""

    def __init__(self) -> None:
        self._write_lock = threading.Lock()

    @abstractmethod  # pragma: no cover
    def _load(self) -> list[UserRecord]:
        """Return a fresh copy of every stored record, in store order."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def _save(self, records: list[UserRecord]) -> None:
        """Replace the stored sequence with *records*."""
        raise NotImplementedError

    def all(self) -> list[UserRecord]:
        return self._load()

    def find(self, username: str) -> UserRecord | None:
        """
        Return the first record whose username equals *username*.

        Comparison is exact and case-sensitive.  If duplicates slipped
        into the document, the earliest one wins.
        """
        for record in self._load():
            if record.username == username:
                return record
        return None

    def exists(self, username: str) -> bool:
        return self.find(username) is not None

    def append(self, username: str, password: str) -> UserRecord:
        """
        Create a user and persist the whole store.

        The store is re-read here rather than reusing an earlier lookup,
        and the collision check and the write happen under one lock.

        Args:
            username: Login name for the new user.
            password: Plain-text password; only its hash is stored.

        Returns:
            The newly stored record.

        Raises:
            DuplicateUserError: If *username* is already taken.
            StoreIOError: If the store cannot be read or written.
        """
        with self._write_lock:
            records = self._load()
            if any(record.username == username for record in records):
                raise DuplicateUserError(username)
            record = UserRecord.create(username, password)
            records.append(record)
            self._save(records)
        logger.info("Stored new user %s (%d total)", username, len(records))
        return record


class JsonFileUserStore(UserStore):
    """
    User store persisted as one JSON array of ``{username, password_hash}``.

    A missing file is an empty store; the file and its parent directory
    are created on the first append.  Writes go to a temporary sibling
    file which then replaces the document, so readers never observe a
    half-written array.
    """

    def __init__(self, path: str | os.PathLike[str]):
        super().__init__()
        self.path = Path(path)

    def _load(self) -> list[UserRecord]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Unable to read user store %s: %s", self.path, exc)
            raise StoreIOError(f"Unable to read user store at '{self.path}'") from exc

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            return [UserRecord.from_dict(entry) for entry in data]
        except ValueError as exc:
            logger.error("Unable to parse user store %s: %s", self.path, exc)
            raise StoreIOError(f"Unable to parse user store at '{self.path}'") from exc

    def _save(self, records: list[UserRecord]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        payload = json.dumps([record.to_dict() for record in records], indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            logger.error("Unable to write user store %s: %s", self.path, exc)
            raise StoreIOError(f"Unable to write user store at '{self.path}'") from exc

    def __repr__(self) -> str:
        return f"<JsonFileUserStore {self.path}>"


class InMemoryUserStore(UserStore):
    """User store that lives only as long as the process."""

    def __init__(self, records: Iterable[UserRecord] = ()):
        super().__init__()
        self._records = list(records)

    def _load(self) -> list[UserRecord]:
        return list(self._records)

    def _save(self, records: list[UserRecord]) -> None:
        self._records = list(records)

    def __repr__(self) -> str:
        return f"<InMemoryUserStore {len(self._records)} users>"


def build_user_store(backend: str | None = None, path: str | os.PathLike[str] | None = None) -> UserStore:
    """
    Return a store for the configured backend.

    Args:
        backend: ``"json"`` (default) or ``"memory"``.
        path: Location of the JSON document; required for ``"json"``.

    Raises:
        ValueError: For an unknown backend or a missing path.
    """
    selected = (backend or "json").strip().lower()
    logger.info("Selected user store backend: %s", selected)

    if selected == "memory":
        return InMemoryUserStore()

    if selected == "json":
        if not path:
            raise ValueError("USER_STORE_PATH is required for the json backend")
        return JsonFileUserStore(path)

    raise ValueError(
        f"Unsupported user store backend {selected!r}; expected one of {', '.join(STORE_BACKENDS)}"
    )
