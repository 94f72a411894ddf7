"""In-memory graph store.

Keeps every collection and node in process memory. Used by the command line
runner and in tests; a host application provides its own GraphStore.
"""

from typing import Any, Optional

import structlog
from pydantic_core import to_jsonable_python

from wpsource.collectors.normalization.schema import Reference
from wpsource.store.base import Collection, GraphStore

logger = structlog.get_logger(__name__)


class InMemoryCollection(Collection):
    """Collection holding its nodes in insertion order."""

    def __init__(self, type_name: str, template: Optional[str] = None):
        self.type_name = type_name
        self.template = template
        self.nodes: list[dict[str, Any]] = []

    def add_node(self, fields: dict[str, Any]) -> dict[str, Any]:
        if "id" not in fields:
            raise ValueError(f"Node for {self.type_name} has no id")
        node = dict(fields)
        self.nodes.append(node)
        return node

    def get_node(self, id: Any) -> Optional[dict[str, Any]]:
        for node in self.nodes:
            if node["id"] == id:
                return node
        return None

    def __len__(self) -> int:
        return len(self.nodes)


class InMemoryGraphStore(GraphStore):
    """GraphStore implementation backed by dictionaries."""

    def __init__(self) -> None:
        self.collections: dict[str, InMemoryCollection] = {}

    def add_collection(self, type_name: str, template: Optional[str] = None) -> InMemoryCollection:
        collection = self.collections.get(type_name)
        if collection is None:
            collection = InMemoryCollection(type_name, template)
            self.collections[type_name] = collection
            logger.debug("collection_added", type_name=type_name, template=template)
        return collection

    def get_collection(self, type_name: str) -> Optional[InMemoryCollection]:
        return self.collections.get(type_name)

    def create_reference(self, type_name: str, id: Any) -> Reference:
        return Reference(type_name=type_name, id=id)

    def node_counts(self) -> dict[str, int]:
        return {name: len(collection) for name, collection in self.collections.items()}

    def export(self) -> dict[str, list[dict[str, Any]]]:
        """Dump every node as JSON-compatible data, grouped by type name."""
        return {
            name: to_jsonable_python(collection.nodes, by_alias=True)
            for name, collection in self.collections.items()
        }
