"""Splitting of rendered post content into ordered fragments.

Text between inline images becomes html fragments; the images themselves
become image fragments pointing at a local copy of the asset.
"""

import re
from typing import NamedTuple, Optional

import structlog

from wpsource.collectors.downloader import MediaDownloader
from wpsource.collectors.normalization.naming import file_name_from_url
from wpsource.collectors.normalization.schema import ContentFragment, FragmentKind

logger = structlog.get_logger(__name__)

IMG_TAG_PATTERN = re.compile(r"<img\b[^>]*?>", re.IGNORECASE)
SRC_ATTRIBUTE_PATTERN = re.compile(r'\ssrc="([^"]*?)"', re.IGNORECASE)
ALT_ATTRIBUTE_PATTERN = re.compile(r'\salt="([^"]*?)"', re.IGNORECASE)

# Captures the src so that re.split() keeps it between the surrounding text
SPLIT_PATTERN = re.compile(r'<img\b[^>]*?\ssrc="([^"]*)"[^>]*>', re.IGNORECASE)


class InlineImage(NamedTuple):
    url: str
    alt: str


def extract_images(html: str) -> list[InlineImage]:
    """Return the (src, alt) pair of every image tag, in document order."""
    images = []
    for tag in IMG_TAG_PATTERN.finditer(html):
        src = SRC_ATTRIBUTE_PATTERN.search(tag.group(0))
        if src is None:
            continue
        alt = ALT_ATTRIBUTE_PATTERN.search(tag.group(0))
        images.append(InlineImage(url=src.group(1), alt=alt.group(1) if alt else ""))
    return images


class FragmentSplitter:
    """Splits rich text into html and image fragments.

    Example:
        splitter = FragmentSplitter(downloader, download_images=True)
        fragments = splitter.process_post_fragments(fields["content"])
    """

    def __init__(
        self,
        downloader: Optional[MediaDownloader] = None,
        download_images: bool = False,
    ):
        self.downloader = downloader
        self.download_images = download_images and downloader is not None

    def process_post_fragments(self, html: str) -> list[ContentFragment]:
        """Split rendered content into fragments ordered as in the document."""
        images = {}
        for image in extract_images(html):
            images.setdefault(image.url, image.alt)

        fragments = []
        for segment in SPLIT_PATTERN.split(html):
            if not segment:
                continue
            order = len(fragments) + 1

            file_name = file_name_from_url(segment) if segment in images else ""
            if file_name and self.download_images:
                local_path = self.downloader.schedule(segment, file_name)
                fragments.append(
                    ContentFragment(
                        order=order,
                        type=FragmentKind.IMAGE,
                        fragment_data={
                            "remoteUrl": segment,
                            "fileName": file_name,
                            "image": str(local_path),
                            "alt": images[segment],
                        },
                    )
                )
            else:
                fragments.append(
                    ContentFragment(
                        order=order,
                        type=FragmentKind.HTML,
                        fragment_data={"html": segment},
                    )
                )

        logger.debug("post_fragments_split", count=len(fragments))
        return fragments
