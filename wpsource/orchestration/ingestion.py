"""WordPress ingestion orchestrator.

Drives one ingestion run against a WordPress site and writes the resulting
nodes into a GraphStore:

1. ACF site options
2. Post types (one collection per type, plus one per type and locale)
3. Authors
4. Taxonomies and their terms
5. Posts of every discovered post type, in discovery order
6. Custom endpoints

Media downloads started while normalizing run in the background and are
awaited before run() returns.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import structlog

from wpsource.collectors.client import WordPressClient
from wpsource.collectors.downloader import MediaDownloader
from wpsource.collectors.normalization.fragments import FragmentSplitter
from wpsource.collectors.normalization.naming import camel_case, create_type_name, file_name_from_url
from wpsource.collectors.normalization.normalizer import TYPE_ATTACHMENT, FieldNormalizer
from wpsource.config.settings import SourceSettings, load_settings
from wpsource.core.exceptions import MediaDownloadError
from wpsource.store.base import Collection, GraphStore

logger = structlog.get_logger(__name__)

TYPE_AUTHOR = "author"
OPTIONS_TYPE_NAME = "AcfOptions"
OPTIONS_NODE_ID = "options"
EMBEDDED_FEATURED_MEDIA = "wp:featuredmedia"


def _as_mapping(data: Any) -> Mapping[str, Any]:
    return data if isinstance(data, Mapping) else {}


def _as_items(data: Any) -> list[Mapping[str, Any]]:
    """Resource items of a payload; a single object counts as one item."""
    if isinstance(data, Mapping):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, Mapping)]
    return []


@dataclass
class IngestionSummary:
    """Outcome of one ingestion run."""

    node_counts: dict[str, int] = field(default_factory=dict)
    failed_downloads: list[str] = field(default_factory=list)

    @property
    def total_nodes(self) -> int:
        return sum(self.node_counts.values())


class WordPressIngestion:
    """Ingests a WordPress site into a graph store.

    Example:
        store = InMemoryGraphStore()
        async with WordPressIngestion(load_settings(base_url=url), store) as ingestion:
            summary = await ingestion.run()
    """

    def __init__(
        self,
        settings: SourceSettings,
        store: GraphStore,
        client: Optional[WordPressClient] = None,
        downloader: Optional[MediaDownloader] = None,
    ):
        """Initialize the orchestrator.

        Args:
            settings: Validated source settings.
            store: Graph store receiving collections, nodes and references.
            client: REST client, built from settings when omitted.
            downloader: Media downloader, built from settings when omitted.
        """
        self.settings = settings
        self.store = store
        self.client = client or WordPressClient.from_settings(settings)
        self.downloader = downloader or MediaDownloader(
            settings.download_dir,
            settings.staging_dir,
            timeout=settings.request_timeout,
        )
        self.normalizer = FieldNormalizer(
            settings.type_name,
            create_reference=store.create_reference,
            downloader=self.downloader,
            download_custom_field_images=settings.download_acf_images,
        )
        self.splitter = FragmentSplitter(
            self.downloader,
            download_images=settings.download_remote_images_from_posts,
        )

        # REST bases discovered from wp/v2/types and wp/v2/taxonomies
        self.post_rest_bases: dict[str, str] = {}
        self.taxonomy_rest_bases: dict[str, str] = {}

        self._node_counts: Counter[str] = Counter()

    @classmethod
    def from_options(cls, store: GraphStore, **options: Any) -> "WordPressIngestion":
        """Validate options and build an orchestrator.

        Raises:
            ConfigurationError: Before any network activity, on invalid options.
        """
        return cls(load_settings(**options), store)

    async def __aenter__(self) -> "WordPressIngestion":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()
        await self.downloader.aclose()

    def create_type_name(self, name: str = "") -> str:
        return create_type_name(self.settings.type_name, name)

    def _collection(self, type_name: str) -> Collection:
        collection = self.store.get_collection(type_name)
        if collection is None:
            collection = self.store.add_collection(type_name)
        return collection

    def _add_node(self, collection: Collection, fields: dict[str, Any]) -> None:
        collection.add_node(fields)
        self._node_counts[collection.type_name] += 1

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    async def run(self) -> IngestionSummary:
        """Run every ingestion step in order.

        Returns:
            IngestionSummary with node counts and failed downloads.

        Raises:
            FetchError: On transport failures and unexpected HTTP statuses.
        """
        logger.info("ingestion_started", base_url=self.settings.base_url)

        try:
            if self.settings.load_acf_options:
                await self.load_options()
            await self.load_post_types()
            await self.load_users()
            if self.settings.load_taxonomies:
                await self.load_taxonomies()
            await self.load_posts()
            await self.load_custom_endpoints()
        finally:
            failures = await self.downloader.wait_all()

        summary = IngestionSummary(
            node_counts=dict(self._node_counts),
            failed_downloads=[str(failure) for failure in failures],
        )
        logger.info(
            "ingestion_completed",
            total_nodes=summary.total_nodes,
            failed_downloads=len(summary.failed_downloads),
        )
        return summary

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    async def load_options(self) -> None:
        """Add the ACF options page as a singleton node per locale."""
        res = await self.client.fetch("acf/v3/options/options")

        for variant in res.variants:
            collection = self.store.add_collection(f"{OPTIONS_TYPE_NAME}_{variant.language_code}")
            self._add_node(collection, {"id": OPTIONS_NODE_ID, **_as_mapping(variant.data)})

        collection = self.store.add_collection(OPTIONS_TYPE_NAME)
        self._add_node(collection, {"id": OPTIONS_NODE_ID, **_as_mapping(res.data)})

    async def load_post_types(self) -> None:
        """Register one collection per post type and locale."""
        res = await self.client.fetch("wp/v2/types", fallback={})
        routes = self.settings.routes

        for post_type, options in _as_mapping(res.data).items():
            self.post_rest_bases[post_type] = _as_mapping(options).get("rest_base") or post_type
            self.store.add_collection(
                self.create_type_name(post_type),
                routes.get(post_type) or f"/{post_type}/:slug",
            )

        for variant in res.variants:
            for post_type in _as_mapping(variant.data):
                localized = f"{post_type}_{variant.language_code}"
                self.store.add_collection(
                    self.create_type_name(localized),
                    routes.get(localized) or f"/{localized}/:slug",
                )

        logger.info("post_types_discovered", post_types=list(self.post_rest_bases))

    async def load_users(self) -> None:
        """Add one author node per user."""
        res = await self.client.fetch("wp/v2/users")
        authors = self.store.add_collection(
            self.create_type_name(TYPE_AUTHOR),
            self.settings.routes.get(TYPE_AUTHOR),
        )

        for author in _as_items(res.data):
            fields = self.normalizer.normalize_fields(author)
            avatars = {
                f"avatar{size}": url
                for size, url in _as_mapping(author.get("avatar_urls")).items()
            }
            self._add_node(
                authors,
                {
                    **fields,
                    "id": author.get("id"),
                    "title": author.get("name"),
                    "avatars": avatars,
                },
            )

    async def load_taxonomies(self) -> None:
        """Add one collection per taxonomy holding its terms."""
        res = await self.client.fetch("wp/v2/taxonomies", fallback={})

        for taxonomy, options in _as_mapping(res.data).items():
            collection = self.store.add_collection(
                self.create_type_name(taxonomy),
                self.settings.routes.get(taxonomy),
            )
            rest_base = _as_mapping(options).get("rest_base") or taxonomy
            self.taxonomy_rest_bases[taxonomy] = rest_base

            terms = await self.client.fetch_paged(f"wp/v2/{rest_base}")
            for term in _as_items(terms.data):
                self._add_node(
                    collection,
                    {
                        "id": term.get("id"),
                        "title": term.get("name"),
                        "slug": term.get("slug"),
                        "content": term.get("description"),
                        "count": term.get("count"),
                    },
                )

    async def load_posts(self) -> None:
        """Add the first page of every discovered post type, per locale."""
        for post_type, rest_base in self.post_rest_bases.items():
            logger.info("loading_post_type", post_type=post_type, rest_base=rest_base)
            res = await self.client.fetch_paged(f"wp/v2/{rest_base}", {"_embed": "1"})

            collection = self._collection(self.create_type_name(post_type))
            for post in _as_items(res.data):
                self._add_node(collection, await self.build_post_fields(post))

            for variant in res.variants:
                localized = self._collection(
                    self.create_type_name(f"{post_type}_{variant.language_code}")
                )
                for post in _as_items(variant.data):
                    self._add_node(localized, await self.build_post_fields(post))

            logger.info(
                "post_type_ingested",
                post_type=post_type,
                count=len(_as_items(res.data)),
            )

    async def load_custom_endpoints(self) -> None:
        """Add the items of every configured custom endpoint."""
        for endpoint in self.settings.custom_endpoints:
            collection = self.store.add_collection(endpoint.type_name)
            res = await self.client.fetch(endpoint.route)

            for item in _as_items(res.data):
                fields = self.normalizer.normalize_fields(item) if endpoint.normalize else dict(item)
                self._add_node(collection, {**fields, "id": item.get("id") or item.get("slug")})

            logger.info("custom_endpoint_ingested", type_name=endpoint.type_name, route=endpoint.route)

    # -------------------------------------------------------------------------
    # Posts
    # -------------------------------------------------------------------------

    async def build_post_fields(self, post: Mapping[str, Any]) -> dict[str, Any]:
        """Normalize a post and attach its references and media fields."""
        fields = self.normalizer.normalize_fields(post)
        create_reference = self.store.create_reference

        fields["author"] = create_reference(
            self.create_type_name(TYPE_AUTHOR),
            post.get("author") or "0",
        )

        if post.get("type") != TYPE_ATTACHMENT:
            fields["featuredMedia"] = create_reference(
                self.create_type_name(TYPE_ATTACHMENT),
                post.get("featured_media"),
            )

        for taxonomy, prop in self.taxonomy_rest_bases.items():
            if prop in post:
                fields[camel_case(prop)] = create_reference(
                    self.create_type_name(taxonomy),
                    post[prop],
                )

        content = fields.get("content")
        if self.settings.split_posts_into_fragments and isinstance(content, str) and content:
            fields["postFragments"] = [
                fragment.to_field() for fragment in self.splitter.process_post_fragments(content)
            ]

        if self.settings.download_remote_featured_images:
            image = await self._download_featured_image(post)
            if image is not None:
                fields["featuredMediaImage"] = image

        fields["id"] = post.get("id")
        return fields

    async def _download_featured_image(self, post: Mapping[str, Any]) -> Optional[str]:
        media = _as_mapping(post.get("_embedded")).get(EMBEDDED_FEATURED_MEDIA)
        if not media:
            return None

        try:
            source_url = media[0]["source_url"]
            path = await self.downloader.download(source_url, file_name_from_url(source_url))
        except (MediaDownloadError, LookupError, TypeError) as e:
            logger.warning(
                "featured_image_unavailable",
                slug=post.get("slug"),
                error=str(e),
            )
            return None
        return str(path)
