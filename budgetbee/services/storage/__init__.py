"""
Storage Services Package

Provides the abstract key-value interface and concrete implementations.
Currently implements a JSON preferences file as the durable backend,
but designed to be swappable.
"""

from budgetbee.services.storage.interface import (
    InvalidArgumentError,
    KeyValueStore,
    NotFoundError,
    StorageError,
)
from budgetbee.services.storage.memory import DictKeyValueStore, InMemoryKeyValueStore
from budgetbee.services.storage.json_prefs import JsonPreferencesStore

__all__ = [
    # Interfaces
    "KeyValueStore",
    # Exceptions
    "InvalidArgumentError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "DictKeyValueStore",
    "InMemoryKeyValueStore",
    "JsonPreferencesStore",
]
