"""
Dictionary-backed key-value storage.

DictKeyValueStore holds the typed get/set logic shared by every
backend. Subclasses only decide how a new state is made durable.
InMemoryKeyValueStore never persists anything and is used for tests
and for embedding the core without a data directory.
"""

from typing import Any, Optional

from budgetbee.services.storage.interface import KeyValueStore, StorageError


class DictKeyValueStore(KeyValueStore):
    """
    Key-value store over a plain dict of JSON-compatible values.

    A write builds the next state, persists it, and only then swaps it
    in. A failed persist leaves the previous state readable.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = dict(initial or {})

    def _persist(self, data: dict[str, Any]) -> None:
        """Make a new state durable. Raise StorageError on failure."""
        pass

    def _put(self, key: str, value: Any) -> None:
        next_state = dict(self._data)
        next_state[key] = value
        self._persist(next_state)
        self._data = next_state

    def _get_typed(self, key: str, default: Any, expected: tuple, type_name: str) -> Any:
        if key not in self._data:
            return default
        value = self._data[key]
        # bool is a subclass of int, never accept it for numbers
        if isinstance(value, bool) and bool not in expected:
            raise StorageError(f"Value for '{key}' is a boolean, expected {type_name}")
        if not isinstance(value, expected):
            raise StorageError(
                f"Value for '{key}' is {type(value).__name__}, expected {type_name}"
            )
        return value

    # === Strings ===

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._get_typed(key, default, (str,), "string")

    def set_string(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Cannot store {type(value).__name__} as string for '{key}'")
        self._put(key, value)

    # === Booleans ===

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self._get_typed(key, default, (bool,), "boolean")

    def set_bool(self, key: str, value: bool) -> None:
        self._put(key, bool(value))

    # === Numbers ===

    def get_float(self, key: str, default: float = 0.0) -> float:
        return float(self._get_typed(key, default, (int, float), "float"))

    def set_float(self, key: str, value: float) -> None:
        self._put(key, float(value))

    def get_int(self, key: str, default: int = 0) -> int:
        return self._get_typed(key, default, (int,), "int")

    def set_int(self, key: str, value: int) -> None:
        self._put(key, int(value))

    # === Keys ===

    def contains(self, key: str) -> bool:
        return key in self._data

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        next_state = dict(self._data)
        del next_state[key]
        self._persist(next_state)
        self._data = next_state

    def snapshot(self) -> dict[str, Any]:
        """Copy of every stored value."""
        return dict(self._data)


class InMemoryKeyValueStore(DictKeyValueStore):
    """Volatile key-value store. Nothing survives the process."""
    pass
