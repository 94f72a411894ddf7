"""Graph store interface the ingestion orchestrator writes into.

The host application owns node storage, schema binding and reference
resolution. Ingestion only needs the narrow capability set below.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class Collection(ABC):
    """A registered node type."""

    type_name: str

    @abstractmethod
    def add_node(self, fields: dict[str, Any]) -> Any:
        """Add one node. fields always contains an "id"."""
        ...


class GraphStore(ABC):
    """Capabilities the orchestrator depends on."""

    @abstractmethod
    def add_collection(self, type_name: str, template: Optional[str] = None) -> Collection:
        """Register a node type, optionally bound to a route template."""
        ...

    @abstractmethod
    def get_collection(self, type_name: str) -> Optional[Collection]:
        """Return a previously registered collection, or None."""
        ...

    @abstractmethod
    def create_reference(self, type_name: str, id: Any) -> Any:
        """Create a lazy reference to a node of another type."""
        ...
