"""Classification of JSON objects found in REST API payloads.

Each shape has one pure predicate. classify_object() evaluates them in a fixed
precedence order; the first match wins.
"""

import re
from enum import Enum
from typing import Any, Mapping

IMAGE_URL_PATTERN = re.compile(r"^https?://.*/.*\.(jpg|png|svg|jpeg)($|\?)", re.IGNORECASE)


class ObjectShape(Enum):
    """How a JSON object is rewritten by the normalizer."""

    IMAGE = "image"
    POST_REFERENCE = "post_reference"
    ATTACHMENT_REFERENCE = "attachment_reference"
    RENDERED = "rendered"
    NESTED = "nested"


def reference_id(value: Mapping[str, Any]) -> Any:
    """Return the entity id of an object, preferring the upper-case "ID" key."""
    return value.get("ID") if value.get("ID") is not None else value.get("id")


def is_image_descriptor(value: Mapping[str, Any]) -> bool:
    """ACF image field: {"type": "image", "filename": ..., "url": ...}."""
    return value.get("type") == "image" and bool(value.get("filename")) and bool(value.get("url"))


def is_post_reference(value: Mapping[str, Any]) -> bool:
    return bool(value.get("post_type")) and reference_id(value) is not None


def is_attachment_reference(value: Mapping[str, Any]) -> bool:
    return bool(value.get("filename")) and reference_id(value) is not None


def is_rendered_text(value: Mapping[str, Any]) -> bool:
    """Rendered wrapper such as {"rendered": "<p>..</p>", "protected": false}."""
    return "rendered" in value


def is_image_url(value: Any) -> bool:
    return isinstance(value, str) and IMAGE_URL_PATTERN.match(value) is not None


def classify_object(value: Mapping[str, Any], materialize_images: bool = False) -> ObjectShape:
    """Classify a JSON object.

    Args:
        value: Decoded JSON object.
        materialize_images: Whether image descriptors are downloaded in the
            current context. When False they fall through to the reference
            shapes.
    """
    if materialize_images and is_image_descriptor(value):
        return ObjectShape.IMAGE
    if is_post_reference(value):
        return ObjectShape.POST_REFERENCE
    if is_attachment_reference(value):
        return ObjectShape.ATTACHMENT_REFERENCE
    if is_rendered_text(value):
        return ObjectShape.RENDERED
    return ObjectShape.NESTED
