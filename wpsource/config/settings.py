"""
Source Settings.

Centralized configuration using Pydantic Settings with environment variable
loading. Every value is validated when the settings object is built, so a
malformed option fails before the first request is issued.

Environment variables use the ``WORDPRESS_`` prefix, e.g.
``WORDPRESS_BASE_URL`` or ``WORDPRESS_LANGUAGES='["de", "fr"]'``.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from wpsource.core.exceptions import ConfigurationError

DEFAULT_ROUTES = {
    "post": "/:slug",
    "post_tag": "/tag/:slug",
    "category": "/category/:slug",
    "author": "/author/:slug",
}

MAX_PER_PAGE = 100


class CustomEndpoint(BaseModel):
    """An arbitrary REST route ingested into its own collection.

    Accepts both snake_case and camelCase keys (``typeName``).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type_name: str = ""
    route: str = ""
    normalize: bool = False

    @model_validator(mode="after")
    def require_type_name_and_route(self) -> "CustomEndpoint":
        if not self.type_name:
            raise ValueError("Please provide a type_name option for all custom_endpoints")
        if not self.route:
            raise ValueError(
                f"No route option in endpoint: {self.type_name} "
                "(e.g. 'apiName/versionNumber/endpointObject')"
            )
        return self


class SourceSettings(BaseSettings):
    """WordPress source settings loaded from keyword arguments and environment."""

    model_config = SettingsConfigDict(
        env_prefix="WORDPRESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Remote API
    # -------------------------------------------------------------------------
    base_url: str = Field(default="", description="WordPress site URL")
    api_base: str = Field(default="wp-json", description="REST API path prefix")
    languages: list[str] = Field(
        default_factory=list,
        description="Additional locale codes fetched from {base_url}/{code}/{api_base}",
    )
    per_page: int = Field(default=MAX_PER_PAGE, description="Page size for paged requests")
    concurrent: int = Field(
        default=10,
        description="Concurrency hint, unused by the single-page fetch",
    )
    request_timeout: float | None = Field(
        default=None,
        description="Request timeout in seconds. None waits indefinitely.",
    )

    # -------------------------------------------------------------------------
    # Graph naming
    # -------------------------------------------------------------------------
    type_name: str = Field(default="WordPress", description="Prefix for generated type names")
    routes: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_ROUTES))
    custom_endpoints: list[CustomEndpoint] = Field(default_factory=list)

    # -------------------------------------------------------------------------
    # Feature toggles
    # -------------------------------------------------------------------------
    split_posts_into_fragments: bool = False
    download_remote_images_from_posts: bool = False
    download_remote_featured_images: bool = False
    download_acf_images: bool = False
    load_acf_options: bool = True
    load_taxonomies: bool = True

    # -------------------------------------------------------------------------
    # Local storage
    # -------------------------------------------------------------------------
    download_dir: Path = Field(default=Path("wp-images"))
    staging_dir: Path = Field(default=Path(".temp/downloads"))

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("languages", mode="before")
    @classmethod
    def split_languages(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [code.strip() for code in value.split(",")] if value.strip() else []
        return value

    @field_validator("languages")
    @classmethod
    def validate_languages(cls, value: list[str]) -> list[str]:
        if any(not code for code in value):
            raise ValueError("language codes must be non-empty")
        if len(set(value)) != len(value):
            raise ValueError("language codes must be distinct")
        return value

    @field_validator("per_page")
    @classmethod
    def validate_per_page(cls, value: int) -> int:
        if value > MAX_PER_PAGE or value < 1:
            raise ValueError(f"per_page cannot be more than {MAX_PER_PAGE} or less than 1")
        return value

    @field_validator("type_name")
    @classmethod
    def require_type_name(cls, value: str) -> str:
        if not value:
            raise ValueError("Missing type_name option")
        return value

    @property
    def localized(self) -> bool:
        """Check if any language variant is configured."""
        return bool(self.languages)


def load_settings(**overrides: Any) -> SourceSettings:
    """
    Build validated settings.

    Raises:
        ConfigurationError: If any option is missing or invalid.
    """
    try:
        return SourceSettings(**overrides)
    except ValidationError as exc:
        error = exc.errors()[0]
        config_key = ".".join(str(part) for part in error["loc"]) or None
        raise ConfigurationError(
            f"Invalid configuration: {error['msg']}",
            config_key=config_key,
        ) from exc
