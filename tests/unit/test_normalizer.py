"""Unit tests for the field normalizer."""

from pathlib import Path

import pytest
from unittest.mock import MagicMock

from wpsource.collectors.normalization import FieldNormalizer, Reference

MEDIA_DIR = Path("/srv/wp-images")


@pytest.fixture
def downloader():
    """Downloader double resolving files under MEDIA_DIR."""
    mock = MagicMock()
    mock.schedule.side_effect = lambda url, file_name: MEDIA_DIR / file_name
    return mock


@pytest.fixture
def normalizer(downloader):
    return FieldNormalizer(
        "WordPress",
        downloader=downloader,
        download_custom_field_images=True,
    )


class TestNormalizeFields:
    """Test key handling."""

    def test_drops_internal_keys(self, normalizer):
        fields = normalizer.normalize_fields(
            {"id": 1, "_links": {"self": []}, "_embedded": {"author": []}, "slug": "a"}
        )

        assert fields == {"id": 1, "slug": "a"}

    def test_drops_internal_keys_in_nested_objects(self, normalizer):
        fields = normalizer.normalize_fields({"meta": {"_edit_lock": "1", "footnotes": ""}})

        assert fields == {"meta": {"footnotes": ""}}

    def test_camel_cases_keys(self, normalizer):
        fields = normalizer.normalize_fields({"featured_media": 5, "comment_status": "open"})

        assert fields == {"featuredMedia": 5, "commentStatus": "open"}


class TestNormalizeValue:
    """Test value rewrites."""

    def test_none(self, normalizer):
        assert normalizer.normalize_value(None) is None

    def test_scalars_unchanged(self, normalizer):
        assert normalizer.normalize_value(3) == 3
        assert normalizer.normalize_value("text") == "text"
        assert normalizer.normalize_value(False) is False

    def test_lists_preserve_order(self, normalizer):
        assert normalizer.normalize_value([3, {"rendered": "a"}, None]) == [3, "a", None]

    def test_rendered_unwrapped(self, normalizer):
        assert normalizer.normalize_value({"rendered": "X", "protected": True}) == "X"

    def test_rendered_unwrapped_at_any_depth(self, normalizer):
        fields = normalizer.normalize_fields({"a": {"b": [{"c": {"rendered": "X"}}]}})

        assert fields == {"a": {"b": [{"c": "X"}]}}

    def test_post_reference(self, normalizer):
        ref = normalizer.normalize_value({"post_type": "page", "id": 7, "post_title": "About"})

        assert ref == Reference(type_name="WordPressPage", id=7)

    def test_attachment_reference(self, normalizer):
        ref = normalizer.normalize_value({"ID": 12, "filename": "doc.pdf", "url": "http://x/doc.pdf"})

        assert ref == Reference(type_name="WordPressAttachment", id=12)

    def test_custom_reference_factory(self):
        factory = MagicMock(return_value="ref")
        normalizer = FieldNormalizer("Blog", create_reference=factory)

        assert normalizer.normalize_value({"post_type": "post", "ID": 1}) == "ref"
        factory.assert_called_once_with("BlogPost", 1)


class TestCustomFieldImages:
    """Test image materialization inside ACF field groups."""

    IMAGE = {
        "ID": 5,
        "type": "image",
        "filename": "Hero Image.JPG",
        "url": "http://media.example.com/Hero Image.JPG",
        "title": "Hero",
        "description": "A hero",
    }

    def test_image_descriptor_downloaded(self, normalizer, downloader):
        fields = normalizer.normalize_fields({"acf": {"hero": self.IMAGE}})

        downloader.schedule.assert_called_once_with(self.IMAGE["url"], "hero-image.jpg")
        assert fields["acf"]["hero"] == {
            "src": str(MEDIA_DIR / "hero-image.jpg"),
            "title": "Hero",
            "alt": "A hero",
        }

    def test_image_descriptor_outside_acf_is_reference(self, normalizer, downloader):
        fields = normalizer.normalize_fields({"hero": self.IMAGE})

        assert fields["hero"] == Reference(type_name="WordPressAttachment", id=5)
        downloader.schedule.assert_not_called()

    def test_image_descriptor_with_downloads_disabled(self, downloader):
        normalizer = FieldNormalizer("WordPress", downloader=downloader)

        value = normalizer.normalize_value(self.IMAGE, in_custom_fields=True)

        assert value == Reference(type_name="WordPressAttachment", id=5)
        downloader.schedule.assert_not_called()

    def test_image_url_scalar_downloaded(self, normalizer, downloader):
        value = normalizer.normalize_value("http://a.com/b.jpeg", in_custom_fields=True)

        assert value == str(MEDIA_DIR / "b.jpeg")
        downloader.schedule.assert_called_once_with("http://a.com/b.jpeg", "b.jpeg")

    def test_image_url_outside_acf_unchanged(self, normalizer, downloader):
        assert normalizer.normalize_value("http://a.com/b.jpeg") == "http://a.com/b.jpeg"
        downloader.schedule.assert_not_called()

    def test_non_image_url_unchanged(self, normalizer, downloader):
        value = normalizer.normalize_value("http://a.com/b.pdf", in_custom_fields=True)

        assert value == "http://a.com/b.pdf"
        downloader.schedule.assert_not_called()

    def test_context_inherited_by_nested_lists(self, normalizer, downloader):
        fields = normalizer.normalize_fields({"acf": {"gallery": ["http://a.com/1.png", "http://a.com/2.png"]}})

        assert fields["acf"]["gallery"] == [str(MEDIA_DIR / "1.png"), str(MEDIA_DIR / "2.png")]
        assert downloader.schedule.call_count == 2
