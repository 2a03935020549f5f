"""
Abstract Key-Value Storage Interface

DESIGN DECISION: The store only sees a primitive key-value layer.
This allows us to:
1. Swap the JSON preferences file for another durable backend later
2. Use in-memory storage for testing
3. Inject write faults in tests to exercise the fallback paths
4. Keep the transaction store free of any file format knowledge

The interface offers typed get/set of strings, booleans, floats and
ints. Structured values (the transaction list) are serialized by the
caller into strings. There are no partial or structured updates.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for the durable key-value layer.

    Every setter must be durable before it returns.
    """

    @abstractmethod
    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Read a string value.

        Raises:
            StorageError: If the value exists but cannot be read
        """
        pass

    @abstractmethod
    def set_string(self, key: str, value: str) -> None:
        """
        Write a string value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def get_bool(self, key: str, default: bool = False) -> bool:
        """Read a boolean value."""
        pass

    @abstractmethod
    def set_bool(self, key: str, value: bool) -> None:
        """Write a boolean value."""
        pass

    @abstractmethod
    def get_float(self, key: str, default: float = 0.0) -> float:
        """Read a float value."""
        pass

    @abstractmethod
    def set_float(self, key: str, value: float) -> None:
        """Write a float value."""
        pass

    @abstractmethod
    def get_int(self, key: str, default: int = 0) -> int:
        """Read an integer value."""
        pass

    @abstractmethod
    def set_int(self, key: str, value: int) -> None:
        """Write an integer value."""
        pass

    @abstractmethod
    def contains(self, key: str) -> bool:
        """Check whether a key has a stored value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class InvalidArgumentError(ValueError):
    """A value was rejected before anything was persisted."""
    pass
