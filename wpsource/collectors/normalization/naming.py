"""Naming helpers shared by the normalizer, splitter and orchestrator."""

import re
import unicodedata
from urllib.parse import unquote, urlsplit

_WORD_SEPARATORS = re.compile(r"[_.\-\s]+")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")
_LAST_DASH = re.compile(r"-([^-]*)$")


def camel_case(value: str, pascal_case: bool = False) -> str:
    """Convert snake, kebab or spaced words to camelCase.

    All-uppercase words are lowercased ("ID" -> "id"); other words keep their
    inner capitals ("WordPress post" -> "WordPressPost" with pascal_case).
    """
    words = [word for word in _WORD_SEPARATORS.split(value.strip()) if word]
    parts = []
    for index, word in enumerate(words):
        if word.isupper():
            word = word.lower()
        if index == 0 and not pascal_case:
            parts.append(word[0].lower() + word[1:])
        else:
            parts.append(word[0].upper() + word[1:])
    return "".join(parts)


def create_type_name(prefix: str, name: str = "") -> str:
    """Build a graph type name, e.g. ("WordPress", "post_tag") -> "WordPressPostTag"."""
    return camel_case(f"{prefix} {name}", pascal_case=True)


def slugify(value: str) -> str:
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_ALPHANUMERIC.sub("-", value.lower()).strip("-")


def slugify_file_name(name: str) -> str:
    """Slugify a file name, keeping its extension ("My Photo.JPG" -> "my-photo.jpg")."""
    return _LAST_DASH.sub(r".\1", slugify(name))


def file_name_from_url(url: str) -> str:
    """Slugified file name of the last path segment of a URL."""
    segment = urlsplit(url).path.rsplit("/", 1)[-1]
    return slugify_file_name(unquote(segment))
