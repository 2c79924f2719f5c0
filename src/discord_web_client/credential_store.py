"""
Credential Store module for the Discord web client.

The credential lives in a single slot of a key-value storage port. Two
adapters are provided: an in-memory one and a JSON file that plays the role
of browser local storage. The store never validates the credential and never
touches the network.
"""

import json
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from .config import DEFAULT_STORAGE_KEY
from .exceptions import InvalidInputError, PersistenceError


@runtime_checkable
class KeyValueStorage(Protocol):
    """Port for a durable string key-value slot."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class InMemoryStorage:
    """Storage that lives for the lifetime of the object."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """
    Key-value storage persisted as a flat JSON object on disk.

    Every write rewrites the whole file; reads go to disk each time so that
    two processes sharing the file see each other's login and logout.
    """

    def __init__(self, file_path: Path) -> None:
        """
        Initialize the file storage.

        Args:
            file_path: Path to the JSON file; created on first write
        """
        self._file_path = file_path

    @property
    def file_path(self) -> Path:
        return self._file_path

    def _read(self) -> dict[str, str]:
        if not self._file_path.exists():
            return {}

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Failed to parse storage file: {e}",
                details={"file_path": str(self._file_path)},
            )
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to read storage file: {e}",
                details={"file_path": str(self._file_path)},
            )

        if not isinstance(raw_data, dict):
            raise PersistenceError(
                code="parse_error",
                message="Storage file does not contain a JSON object",
                details={"file_path": str(self._file_path)},
            )

        return {str(k): v for k, v in raw_data.items() if isinstance(v, str)}

    def _write(self, items: dict[str, str]) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self._file_path, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2, sort_keys=True)
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to write storage file: {e}",
                details={"file_path": str(self._file_path)},
            )

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if key in items:
            del items[key]
            self._write(items)


class CredentialStore:
    """
    Holds the current credential for the external API.

    Without a storage port (a non-browser context) the store behaves as
    permanently empty: ``get`` returns None and writes are ignored.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def get(self) -> Optional[str]:
        """Return the stored credential, or None when absent."""
        if self._storage is None:
            return None
        value = self._storage.get_item(self._key)
        return value or None

    def set(self, credential: str) -> None:
        """Store the credential exactly as given."""
        if not isinstance(credential, str) or not credential.strip():
            raise InvalidInputError("Credential must be a non-blank string")
        if self._storage is None:
            return
        self._storage.set_item(self._key, credential)

    def clear(self) -> None:
        if self._storage is None:
            return
        self._storage.remove_item(self._key)

    def is_authenticated(self) -> bool:
        """True iff a credential is present. Says nothing about its validity."""
        return self.get() is not None
