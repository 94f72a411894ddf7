"""Graph store interface and the in-memory implementation."""

from wpsource.store.base import Collection, GraphStore
from wpsource.store.memory import InMemoryCollection, InMemoryGraphStore

__all__ = [
    "Collection",
    "GraphStore",
    "InMemoryCollection",
    "InMemoryGraphStore",
]
