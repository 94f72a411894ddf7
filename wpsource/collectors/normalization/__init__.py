"""Normalization of REST API payloads into graph node fields.

Provides the recursive field normalizer, the object shape classifier, the
rich-text fragment splitter and the value types they produce.
"""

from wpsource.collectors.normalization.fragments import FragmentSplitter, extract_images
from wpsource.collectors.normalization.normalizer import FieldNormalizer
from wpsource.collectors.normalization.schema import ContentFragment, FragmentKind, Reference
from wpsource.collectors.normalization.shapes import ObjectShape, classify_object

__all__ = [
    "ContentFragment",
    "FieldNormalizer",
    "FragmentKind",
    "FragmentSplitter",
    "ObjectShape",
    "Reference",
    "classify_object",
    "extract_images",
]
