"""Field normalizer for WordPress REST API resources.

Rewrites an arbitrary decoded JSON tree into node fields: keys are camel cased,
internal keys (leading underscore) are dropped, embedded entities become
references, rendered wrappers are unwrapped and, inside ACF field groups,
remote images are downloaded and replaced by local paths.
"""

from typing import Any, Callable, Mapping, Optional

import structlog

from wpsource.collectors.downloader import MediaDownloader
from wpsource.collectors.normalization.naming import (
    camel_case,
    create_type_name,
    file_name_from_url,
    slugify_file_name,
)
from wpsource.collectors.normalization.schema import create_reference as default_reference
from wpsource.collectors.normalization.shapes import (
    ObjectShape,
    classify_object,
    is_image_url,
    reference_id,
)

logger = structlog.get_logger(__name__)

ReferenceFactory = Callable[[str, Any], Any]

TYPE_ATTACHMENT = "attachment"

# Values beneath this key are ACF custom fields
CUSTOM_FIELDS_KEY = "acf"


class FieldNormalizer:
    """Recursive normalizer producing node fields.

    Example:
        normalizer = FieldNormalizer("WordPress")
        fields = normalizer.normalize_fields(post)
    """

    def __init__(
        self,
        type_name_prefix: str,
        create_reference: ReferenceFactory = default_reference,
        downloader: Optional[MediaDownloader] = None,
        download_custom_field_images: bool = False,
    ):
        """Initialize the normalizer.

        Args:
            type_name_prefix: Prefix used to derive referenced type names.
            create_reference: Factory called with (type_name, id).
            downloader: Downloader used for ACF images.
            download_custom_field_images: Download images found in ACF fields.
        """
        self.type_name_prefix = type_name_prefix
        self.create_reference = create_reference
        self.downloader = downloader
        self.download_custom_field_images = download_custom_field_images and downloader is not None

    def type_name_for(self, name: str) -> str:
        return create_type_name(self.type_name_prefix, name)

    def normalize_fields(
        self,
        fields: Mapping[str, Any],
        in_custom_fields: bool = False,
    ) -> dict[str, Any]:
        """Normalize every public field of a resource item."""
        normalized = {}
        for key, value in fields.items():
            if key.startswith("_"):
                continue  # links, embeds
            normalized[camel_case(key)] = self.normalize_value(
                value,
                in_custom_fields or key == CUSTOM_FIELDS_KEY,
            )
        return normalized

    def normalize_value(self, value: Any, in_custom_fields: bool = False) -> Any:
        """Normalize a single value, recursing into lists and objects."""
        if value is None:
            return None

        if isinstance(value, (list, tuple)):
            return [self.normalize_value(item, in_custom_fields) for item in value]

        materialize = in_custom_fields and self.download_custom_field_images

        if isinstance(value, Mapping):
            shape = classify_object(value, materialize_images=materialize)

            if shape is ObjectShape.IMAGE:
                file_name = slugify_file_name(value["filename"])
                local_path = self.downloader.schedule(value["url"], file_name)
                return {
                    "src": str(local_path),
                    "title": value.get("title"),
                    "alt": value.get("description"),
                }
            if shape is ObjectShape.POST_REFERENCE:
                return self.create_reference(
                    self.type_name_for(value["post_type"]),
                    reference_id(value),
                )
            if shape is ObjectShape.ATTACHMENT_REFERENCE:
                return self.create_reference(
                    self.type_name_for(TYPE_ATTACHMENT),
                    reference_id(value),
                )
            if shape is ObjectShape.RENDERED:
                return self.normalize_value(value["rendered"], in_custom_fields)
            return self.normalize_fields(value, in_custom_fields)

        if materialize and is_image_url(value):
            file_name = file_name_from_url(value)
            logger.debug("scheduling_custom_field_image", file_name=file_name)
            return str(self.downloader.schedule(value, file_name))

        return value
