"""Value types produced by normalization.

Provides the Reference pointer stored in place of embedded entities and the
ContentFragment model produced by splitting rich text.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Reference(BaseModel):
    """Lazy pointer to another node, resolved by the graph store.

    Never carries the referenced entity's data, only its type and id.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type_name: str = Field(..., alias="typeName")
    id: Any = Field(..., description="Target id, or a list of ids for taxonomy terms")


class FragmentKind(Enum):
    """Kinds of rich-text fragments."""

    HTML = "html"
    IMAGE = "image"


class ContentFragment(BaseModel):
    """One ordered segment of a split rich-text field."""

    model_config = ConfigDict(populate_by_name=True)

    order: int = Field(..., ge=1, description="1-based position in the document")
    type: FragmentKind
    fragment_data: dict[str, Any] = Field(default_factory=dict, alias="fragmentData")

    def to_field(self) -> dict[str, Any]:
        """Dump as a node field value."""
        return self.model_dump(mode="json", by_alias=True)


def create_reference(type_name: str, id: Any) -> Reference:
    """Default reference factory used when no graph store is involved."""
    return Reference(type_name=type_name, id=id)
